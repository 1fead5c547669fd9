"""
Emoji lookup passthrough.
GET/HEAD /api/emoji/<rest> is forwarded to <EMOJI_API_ORIGIN>/api/<rest>.
"""

import logging
import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from ..config import Settings
from ..core.errors import UpstreamError, UpstreamErrorKind
from .deps import get_http_client, get_raw_pathname, get_settings

logger = logging.getLogger(__name__)

EMOJI_PREFIX = "/api/emoji"

router = APIRouter(prefix=EMOJI_PREFIX, tags=["emoji"])

DEFAULT_CACHE_CONTROL = "public, max-age=86400"


@router.api_route("/{rest:path}", methods=["GET", "HEAD"])
async def forward_emoji_request(
    rest: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Stream an emoji API response back unchanged.

    Status, Content-Type and Cache-Control are relayed; HEAD gets headers only.
    """
    # Rewrite the still-encoded path so escapes like %3F stay in the path
    raw_pathname = get_raw_pathname(request)
    if raw_pathname.startswith(EMOJI_PREFIX + "/"):
        upstream_path = "/api" + raw_pathname[len(EMOJI_PREFIX):]
    else:
        upstream_path = f"/api/{rest}"
    target = f"{settings.emoji_api_origin.rstrip('/')}{upstream_path}"
    query = request.url.query
    if query:
        target = f"{target}?{query}"

    upstream_request = http_client.build_request(
        "GET",
        target,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": request.headers.get("accept", "*/*"),
        },
    )
    try:
        upstream = await http_client.send(upstream_request, stream=True)
    except httpx.HTTPError as e:
        logger.warning(f"Emoji API request failed: {e!r}")
        raise UpstreamError(UpstreamErrorKind.UNEXPECTED, "Emoji API request failed") from e

    headers = {"Cache-Control": upstream.headers.get("cache-control", DEFAULT_CACHE_CONTROL)}
    media_type = upstream.headers.get("content-type", "application/octet-stream")

    if request.method == "HEAD":
        await upstream.aclose()
        return Response(status_code=upstream.status_code, media_type=media_type, headers=headers)

    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=upstream.status_code,
        media_type=media_type,
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )
