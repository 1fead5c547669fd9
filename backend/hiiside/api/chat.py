"""
Chat API endpoints - Proxy direct-message operations for browser sessions.

Every handler requires a session cookie, validates its inputs, delegates to
the session's chat capability and returns the upstream payload unchanged.
Upstream failures are mapped to responses by the UpstreamError handler.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from typing import Optional

from ..config import Settings
from ..core.errors import UpstreamError, UpstreamErrorKind
from ..core.session_registry import SessionRegistry
from ..models import (
    SessionRecord, SessionStatus, SessionCreated,
    LoginRequest, RestoreSessionRequest, MembersRequest,
    SendMessageRequest, MessageRefRequest, ConvoRequest,
)
from ..services.bluesky import BlueskyAgent, ChatClient
from ..utils.cookies import serialize_cleared_cookie, serialize_session_cookie
from .deps import (
    get_chat_client, get_http_client, get_registry, get_session_token,
    get_settings, read_json_body, require_session,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _new_agent(request: Request, settings: Settings) -> BlueskyAgent:
    return BlueskyAgent(get_http_client(request), settings.bsky_service, settings.user_agent)


async def _start_session(
    agent: BlueskyAgent,
    registry: SessionRegistry,
    settings: Settings,
    response: Response,
) -> SessionCreated:
    token = await registry.create(agent.did, agent.handle, agent)
    response.headers.append(
        "set-cookie",
        serialize_session_cookie(token, settings.cookie_domain, settings.is_production),
    )
    return SessionCreated(did=agent.did, handle=agent.handle)


@router.post("/session", response_model=SessionCreated)
async def create_session(
    request: Request,
    response: Response,
    body: Optional[LoginRequest] = None,
    settings: Settings = Depends(get_settings),
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Log in with an identifier and app password and open a session.

    Returns:
        SessionCreated: did and handle of the logged-in account
    """
    identifier = ((body.identifier if body else None) or "").strip()
    app_password = ((body.app_password if body else None) or "").strip()
    if not identifier or not app_password:
        raise _bad_request("Missing identifier or app password.")

    agent = _new_agent(request, settings)
    try:
        await agent.login(identifier[1:] if identifier.startswith("@") else identifier, app_password)
    except UpstreamError as e:
        if e.kind != UpstreamErrorKind.AUTH:
            raise
        logger.info(f"Login rejected by upstream: {e.error_code or e.status}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unable to start chat session.")

    return await _start_session(agent, registry, settings, response)


@router.post("/session/restore", response_model=SessionCreated)
async def restore_session(
    request: Request,
    response: Response,
    body: Optional[RestoreSessionRequest] = None,
    settings: Settings = Depends(get_settings),
    registry: SessionRegistry = Depends(get_registry),
):
    """Open a session from upstream credentials the browser already holds."""
    payload = body.session if body else None
    if not payload or not payload.access_jwt or not payload.refresh_jwt or not payload.did:
        raise _bad_request("Invalid session payload.")

    agent = _new_agent(request, settings)
    try:
        await agent.resume_session(payload.model_dump(by_alias=True))
    except UpstreamError as e:
        if e.kind != UpstreamErrorKind.AUTH:
            raise
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unable to restore chat session.")

    return await _start_session(agent, registry, settings, response)


@router.get("/session", response_model=SessionStatus)
async def get_session(session: SessionRecord = Depends(require_session)):
    return SessionStatus(active=True, did=session.did, handle=session.handle)


@router.post("/delete-session")
async def delete_session(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    registry: SessionRegistry = Depends(get_registry),
):
    """Log out locally. The upstream session is not touched."""
    await registry.destroy(get_session_token(request))
    response.headers.append(
        "set-cookie",
        serialize_cleared_cookie(settings.cookie_domain, settings.is_production),
    )
    return {"success": True}


@router.get("/convos")
async def list_convos(
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    read_state: Optional[str] = Query(None, alias="readState"),
    status_filter: Optional[str] = Query(None, alias="status"),
    chat: ChatClient = Depends(get_chat_client),
):
    return await chat.list_convos(limit=limit, cursor=cursor, read_state=read_state, status=status_filter)


@router.post("/convo/for-members")
async def get_convo_for_members(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, MembersRequest)
    if not body or not body.members:
        raise _bad_request("Missing members array.")
    return await chat.get_convo_for_members(body.members)


@router.post("/convo/availability")
async def get_convo_availability(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, MembersRequest)
    if not body or not body.members:
        raise _bad_request("Missing members array.")
    return await chat.get_convo_availability(body.members)


@router.get("/convo")
async def get_convo(
    convo_id: Optional[str] = Query(None, alias="convoId"),
    chat: ChatClient = Depends(get_chat_client),
):
    if not convo_id:
        raise _bad_request("Missing convoId query parameter.")
    return await chat.get_convo(convo_id)


@router.get("/messages")
async def get_messages(
    convo_id: Optional[str] = Query(None, alias="convoId"),
    cursor: Optional[str] = None,
    limit: Optional[int] = None,
    chat: ChatClient = Depends(get_chat_client),
):
    if not convo_id:
        raise _bad_request("Missing convoId query parameter.")
    return await chat.get_messages(convo_id, cursor=cursor, limit=limit)


@router.post("/message")
async def send_message(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, SendMessageRequest)
    text = ((body.text if body else None) or "").strip()
    if not body or not body.convo_id or not text:
        raise _bad_request("Missing convoId or text.")
    return await chat.send_message(body.convo_id, text)


@router.post("/delete-message")
async def delete_message(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, MessageRefRequest)
    if not body or not body.convo_id or not body.message_id:
        raise _bad_request("Missing convoId or messageId.")
    return await chat.delete_message(body.convo_id, body.message_id)


@router.post("/leave-convo")
async def leave_convo(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, ConvoRequest)
    if not body or not body.convo_id:
        raise _bad_request("Missing convoId.")
    return await chat.leave_convo(body.convo_id)


@router.post("/mark-read")
async def mark_read(
    request: Request,
    chat: ChatClient = Depends(get_chat_client),
):
    body = await read_json_body(request, MessageRefRequest)
    if not body or not body.convo_id or not body.message_id:
        raise _bad_request("Missing convoId or messageId.")
    return await chat.update_read(body.convo_id, body.message_id)
