"""
Static assets and the SPA shell.

GET/HEAD fall through: build output, public files, then the index template
with per-route metadata. Any other method on an unknown path is a 404.
This router must be included last.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, Response

from ..config import Settings
from ..services.html_meta import apply_meta
from ..services.metadata import MetadataResolver
from ..services.static_files import IndexTemplate, resolve_static_path, serve_static_file
from .deps import get_index_template, get_metadata_resolver, get_raw_pathname, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


@router.get("/healthz")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
async def serve_page(
    request: Request,
    settings: Settings = Depends(get_settings),
    resolver: MetadataResolver = Depends(get_metadata_resolver),
    template: IndexTemplate = Depends(get_index_template),
):
    method = request.method
    pathname = request.scope["path"]

    for root in (settings.dist_dir, settings.public_dir):
        file_path = resolve_static_path(root, pathname)
        if file_path is None:
            continue
        response = await serve_static_file(file_path, method)
        if response is not None:
            return response

    raw_pathname = get_raw_pathname(request)
    meta = await resolver.resolve(raw_pathname)
    logger.debug(f"Serving SPA shell for {raw_pathname} (type={meta.type})")
    document = apply_meta(await template.load(), meta, settings.site_name)

    if method == "HEAD":
        return Response(status_code=status.HTTP_200_OK, media_type="text/html; charset=utf-8")
    return HTMLResponse(content=document)


@router.api_route(
    "/{full_path:path}",
    methods=["POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def not_found(full_path: str):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
