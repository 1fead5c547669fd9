"""
HiiSide - Main FastAPI Application

Proxies Bluesky direct messages for browser sessions and serves the SPA shell
with per-route link-preview metadata.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from .config import Settings, settings as default_settings
from .api import chat_router, emoji_router, pages_router, register_exception_handlers
from .core.logging_config import setup_logging
from .core.session_registry import SessionRegistry
from .middleware import CORSMiddleware, RequestLoggingMiddleware, UnhandledErrorMiddleware
from .services.bluesky import PublicApiClient
from .services.metadata import MetadataResolver
from .services.static_files import IndexTemplate
from .storage import SessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    config: Settings = app.state.settings
    setup_logging(config)

    logger.info(f"Starting {config.app_name} v{config.app_version}")
    logger.info(f"Site URL: {config.site_url}")
    logger.info(f"Static roots: dist={config.dist_dir} public={config.public_dir}")
    logger.info(f"CORS allow-list: {config.allowed_origins}")
    yield
    await app.state.http_client.aclose()
    logger.info(f"Shutting down {config.app_name}")


def create_app(
    config: Optional[Settings] = None,
    session_store: Optional[SessionStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings, the module-level settings when omitted
        session_store: Backing store for sessions, in-memory when omitted
        http_client: Shared upstream HTTP client, created from settings when omitted

    Returns:
        FastAPI: Configured application
    """
    config = config or default_settings

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Bluesky chat proxy and SPA shell server for HiiSide",
        lifespan=lifespan,
        docs_url="/api/docs" if config.debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if config.debug else None,
    )

    if http_client is None:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.upstream_timeout_seconds),
            follow_redirects=True,
        )

    app.state.settings = config
    app.state.http_client = http_client
    app.state.session_registry = SessionRegistry(session_store)
    app.state.metadata_resolver = MetadataResolver(
        config,
        PublicApiClient(http_client, config.public_api, config.user_agent),
    )
    app.state.index_template = IndexTemplate(
        config.dist_dir,
        config.index_template_path,
        cache=config.cache_index_template,
    )

    register_exception_handlers(app)

    # Innermost first: errors become 500s before logging and CORS see them,
    # and request logging sits inside CORS so preflights are not logged
    app.add_middleware(UnhandledErrorMiddleware)
    if config.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSMiddleware, allowed_origins=config.allowed_origins)

    # Order matters: the pages router ends with catch-all routes
    app.include_router(chat_router)
    app.include_router(emoji_router)
    app.include_router(pages_router)

    return app


app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run(
        "hiiside.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    run()
