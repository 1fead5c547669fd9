"""
Request dependencies shared by the routers.
Services are created once in create_app() and read from app.state.
"""

import httpx
from fastapi import HTTPException, Request, status
from pydantic import BaseModel, ValidationError
from typing import Optional, Type, TypeVar

from ..config import Settings
from ..core.session_registry import SessionRegistry
from ..models import SessionRecord
from ..services.bluesky import ChatClient
from ..services.metadata import MetadataResolver
from ..services.static_files import IndexTemplate
from ..utils.cookies import SESSION_COOKIE_NAME, parse_cookies
from .errors import INVALID_BODY

SESSION_NOT_FOUND = "Chat session not found."

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_metadata_resolver(request: Request) -> MetadataResolver:
    return request.app.state.metadata_resolver


def get_index_template(request: Request) -> IndexTemplate:
    return request.app.state.index_template


def get_session_token(request: Request) -> str:
    """Session token from the Cookie header, or an empty string."""
    return parse_cookies(request.headers.get("cookie")).get(SESSION_COOKIE_NAME, "")


async def require_session(request: Request) -> SessionRecord:
    """
    Dependency to get the caller's session.

    Raises:
        HTTPException: 401 if the cookie is missing or unknown
    """
    token = get_session_token(request)
    session = await get_registry(request).lookup(token)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=SESSION_NOT_FOUND)

    # Lets the upstream error handler drop this session on expiry
    request.state.session_token = token
    return session


async def get_chat_client(request: Request) -> ChatClient:
    """The session agent's capability routed to the chat service."""
    session = await require_session(request)
    settings = get_settings(request)
    return session.agent.with_proxy(settings.chat_service_type, settings.chat_service_did)


def get_raw_pathname(request: Request) -> str:
    """Request path as sent by the client, before percent-decoding."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return request.url.path


async def read_json_body(request: Request, model: Type[ModelT]) -> Optional[ModelT]:
    """
    Parse the JSON request body into model.

    Handlers call this after their session dependency has run, so a request
    without a session is rejected before its body is looked at.

    Returns:
        Optional[ModelT]: Parsed body, or None when the body is empty

    Raises:
        HTTPException: 400 if the body is not valid JSON or has wrongly typed fields
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return model.model_validate_json(raw)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_BODY)
