"""
CORS handling for the browser client.

Pure ASGI middleware. Allowed origins are echoed back with credentials;
other origins get no Access-Control-Allow-Origin header, so browsers block
cross-origin reads while same-origin requests are unaffected. Every OPTIONS
request is answered with 204 without reaching the routes.
"""

from typing import Iterable, List, Tuple
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

ALLOW_HEADERS = "Content-Type"
ALLOW_METHODS = "GET,POST,OPTIONS"


class CORSMiddleware:
    """Allow-list CORS with an OPTIONS short-circuit."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ()):
        """
        Args:
            app: The ASGI application
            allowed_origins: Exact origins permitted to send credentialed requests
        """
        self.app = app
        self.allowed_origins = set(allowed_origins)

    def cors_headers(self, origin: str) -> List[Tuple[str, str]]:
        headers = []
        if origin and origin in self.allowed_origins:
            headers.append(("Access-Control-Allow-Origin", origin))
            headers.append(("Access-Control-Allow-Credentials", "true"))
            headers.append(("Vary", "Origin"))
        headers.append(("Access-Control-Allow-Headers", ALLOW_HEADERS))
        headers.append(("Access-Control-Allow-Methods", ALLOW_METHODS))
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin", "")
        extra_headers = self.cors_headers(origin)

        if scope["method"] == "OPTIONS":
            await send({
                "type": "http.response.start",
                "status": 204,
                "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in extra_headers],
            })
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for key, value in extra_headers:
                    if key == "Vary":
                        headers.add_vary_header(value)
                    else:
                        headers[key] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)
