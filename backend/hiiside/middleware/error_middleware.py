"""
Catch-all for unexpected exceptions.

Runs inside CORSMiddleware so generic 500 responses still carry CORS
headers. Details are logged, never returned to the client.
"""

import logging
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..api.errors import UNEXPECTED_ERROR, error_response

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware:
    """Pure ASGI middleware turning uncaught exceptions into {"error": ...} 500s."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception as e:
            # Too late to replace a response that is already on the wire
            if response_started:
                raise
            logger.error(f"Unhandled error on {scope.get('method')} {scope.get('path')}: {e}", exc_info=e)
            response = error_response(500, UNEXPECTED_ERROR)
            await response(scope, receive, send)
