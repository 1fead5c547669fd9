"""
Static asset serving for the build output and public directories, plus the
SPA index template.
"""

import logging
import os
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import Response

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".svg": "image/svg+xml",
    ".json": "application/json; charset=utf-8",
    ".map": "application/json; charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".txt": "text/plain; charset=utf-8",
    ".xml": "application/xml; charset=utf-8",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

HTML_CACHE_CONTROL = "no-cache"
ASSET_CACHE_CONTROL = "public, max-age=31536000, immutable"


def get_content_type(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def resolve_static_path(root: str, pathname: str) -> Optional[str]:
    """
    Map a URL path onto a file path under root.

    The joined path is canonicalized (symlinks and ".." resolved) before it is
    compared against the root, so traversal outside the root yields None.

    Args:
        root: Asset root directory
        pathname: Request path, e.g. "/assets/app.js"

    Returns:
        Optional[str]: Absolute path inside root, or None
    """
    try:
        root = os.path.realpath(root)
        resolved = os.path.realpath(os.path.join(root, pathname.lstrip("/")))
    except (ValueError, OSError):
        # e.g. an embedded NUL byte from a percent-encoded path
        return None
    if resolved != root and not resolved.startswith(root + os.sep):
        return None
    return resolved


async def read_file_if_exists(path: str) -> Optional[bytes]:
    """Read a regular file, or return None if it is missing or not a file."""
    try:
        if not await aiofiles.os.path.isfile(path):
            return None
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except OSError as e:
        logger.debug(f"Unable to read {path}: {e}")
        return None


async def serve_static_file(path: str, method: str) -> Optional[Response]:
    """
    Build a response for a static file.

    Returns:
        Optional[Response]: None when the file cannot be served
    """
    content = await read_file_if_exists(path)
    if content is None:
        return None

    content_type = get_content_type(path)
    headers = {
        "Cache-Control": HTML_CACHE_CONTROL if content_type.startswith("text/html") else ASSET_CACHE_CONTROL,
    }
    if method == "HEAD":
        headers["Content-Length"] = str(len(content))
        return Response(status_code=200, media_type=content_type, headers=headers)
    return Response(content=content, status_code=200, media_type=content_type, headers=headers)


class IndexTemplate:
    """
    The SPA shell: dist/index.html when built, else the source index.html.
    The text is cached after the first successful read when caching is on.
    """

    def __init__(self, dist_dir: str, fallback_path: str, cache: bool = True):
        self.dist_index = os.path.join(dist_dir, "index.html")
        self.fallback_path = fallback_path
        self.cache = cache
        self._cached: Optional[str] = None

    async def load(self) -> str:
        if self._cached is not None:
            return self._cached

        content = await read_file_if_exists(self.dist_index)
        if content is None:
            async with aiofiles.open(self.fallback_path, "rb") as f:
                content = await f.read()

        text = content.decode("utf-8")
        if self.cache:
            self._cached = text
        return text
