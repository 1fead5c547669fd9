"""
ASGI middleware for logging requests and responses.

Uses pure ASGI middleware (not BaseHTTPMiddleware) so streamed emoji
responses pass through untouched.

This middleware logs:
- Every request: method, path, status code, processing time
- API requests (/api/...): JSON request/response bodies at DEBUG level,
  with credentials, tokens and cookies filtered out
"""

import json
import logging
import time
from typing import Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"
MAX_LOGGED_BODY = 5000


def _sanitize_body(data: bytes) -> str:
    """Filter sensitive fields if the payload is JSON, fall back to plain text."""
    text = data.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=MAX_LOGGED_BODY)
    filtered = filter_sensitive_data(payload)
    return truncate_large_data(json.dumps(filtered, ensure_ascii=False), max_length=MAX_LOGGED_BODY)


def _extract_error_reason(body_text: Optional[str]) -> Optional[str]:
    """Pull the {"error": ...} message out of an error response."""
    if not body_text:
        return None
    try:
        payload = json.loads(body_text)
    except json.JSONDecodeError:
        return truncate_large_data(body_text, max_length=500)
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return None


class RequestLoggingMiddleware:
    """Pure ASGI middleware to log requests and responses."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are never logged (e.g., ["/healthz"])
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/healthz"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        is_api = path.startswith(API_PREFIX)
        client = scope.get("client")
        client_host = client[0] if client else None

        body_chunks = []
        response_chunks = []
        status_code = 0

        async def logging_receive() -> Message:
            message = await receive()
            if is_api and message["type"] == "http.request":
                body_chunks.append(message.get("body", b""))
            return message

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif is_api and message["type"] == "http.response.body" and status_code >= 400:
                response_chunks.append(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, logging_receive, logging_send)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "error": str(e),
                }}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        request_body_text = None
        if body_chunks and logger.isEnabledFor(logging.DEBUG):
            full_body = b"".join(body_chunks)
            if full_body:
                request_body_text = _sanitize_body(full_body)
                logger.debug(f"Request body: {request_body_text}")

        error_reason = _extract_error_reason(
            b"".join(response_chunks).decode("utf-8", errors="ignore")
        ) if response_chunks else None

        if status_code < 400:
            log_level = logging.INFO if is_api else logging.DEBUG
        elif status_code < 500:
            log_level = logging.WARNING
        else:
            log_level = logging.ERROR

        message = f"{method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if error_reason:
            message += f" | error={error_reason}"

        logger.log(
            log_level,
            message,
            extra={"extra_fields": {
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "client": client_host,
                "request_body": request_body_text,
                "error_reason": error_reason,
            }}
        )
