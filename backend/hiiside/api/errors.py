"""
Exception handlers. Every error response body is {"error": <message>}.
"""

import logging
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.errors import UpstreamError, UpstreamErrorKind

logger = logging.getLogger(__name__)

SESSION_EXPIRED = "Chat session expired. Please sign in again."
RATE_LIMITED = "Rate limited by Bluesky. Please retry soon."
INVALID_CHAT_REQUEST = "Invalid chat request."
UNEXPECTED_ERROR = "Unexpected chat server error."
INVALID_BODY = "Invalid request body."


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    in_body = any(error.get("loc", ("",))[0] == "body" for error in exc.errors())
    message = INVALID_BODY if in_body else "Invalid query parameters."
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def upstream_exception_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Map an UpstreamError to a local status; AUTH also ends the local session."""
    if exc.kind == UpstreamErrorKind.AUTH:
        token = getattr(request.state, "session_token", None)
        if token:
            await request.app.state.session_registry.destroy(token)
            logger.info("Upstream rejected session credentials, local session destroyed")
        return error_response(status.HTTP_401_UNAUTHORIZED, SESSION_EXPIRED)

    if exc.kind == UpstreamErrorKind.RATE_LIMITED:
        logger.warning(f"Upstream rate limit on {request.url.path}")
        return error_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED)

    if exc.kind == UpstreamErrorKind.VALIDATION:
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message or INVALID_CHAT_REQUEST)

    logger.error(f"Upstream failure on {request.url.path}: {exc!r}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, UNEXPECTED_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UpstreamError, upstream_exception_handler)
