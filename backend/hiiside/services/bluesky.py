"""
Bluesky XRPC clients.

- PublicApiClient: unauthenticated, best-effort reads from the public AppView
  used to build link-preview metadata. Failures resolve to None.
- BlueskyAgent: authenticated PDS session (login, resume, token refresh).
- ChatClient: the agent's capability scoped to the chat service through the
  atproto-proxy header.

All failures of the authenticated clients surface as UpstreamError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.errors import UpstreamError, UpstreamErrorKind

logger = logging.getLogger(__name__)


def _drop_empty(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None and value != ""}


class XrpcClient:
    """Minimal XRPC transport on top of a shared httpx.AsyncClient."""

    def __init__(self, http_client: httpx.AsyncClient, service: str, user_agent: str):
        """
        Args:
            http_client: Shared async HTTP client (owned by the application)
            service: Service origin, e.g. "https://bsky.social"
            user_agent: User-Agent sent with every request
        """
        self.http_client = http_client
        self.service = service.rstrip("/")
        self.user_agent = user_agent

    def _url(self, nsid: str) -> str:
        return f"{self.service}/xrpc/{nsid}"

    async def _send(
        self,
        method: str,
        nsid: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Perform one XRPC call and translate every failure into UpstreamError.

        Returns:
            Decoded JSON payload ({} for an empty body)
        """
        request_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            resp = await self.http_client.request(
                method,
                self._url(nsid),
                params=_drop_empty(params),
                json=body,
                headers=request_headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"XRPC {nsid} failed: {e!r}")
            raise UpstreamError(UpstreamErrorKind.UNEXPECTED, f"{nsid} request failed") from e

        if resp.status_code >= 400:
            error_code = None
            message = resp.reason_phrase or f"HTTP {resp.status_code}"
            try:
                payload = resp.json()
                if isinstance(payload, dict):
                    error_code = payload.get("error")
                    message = payload.get("message") or error_code or message
            except ValueError:
                pass
            logger.info(f"XRPC {nsid} returned {resp.status_code} ({error_code or '-'})")
            raise UpstreamError.from_status(resp.status_code, message, error_code)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(
                UpstreamErrorKind.UNEXPECTED,
                f"{nsid} returned an invalid JSON body",
                status=resp.status_code,
            ) from e


class PublicApiClient(XrpcClient):
    """Read-only client for the public AppView. Every call is best effort."""

    async def fetch_json(self, nsid: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the decoded payload, or None on any failure."""
        try:
            data = await self._send("GET", nsid, params=params)
        except UpstreamError as e:
            logger.debug(f"Public API lookup {nsid} unavailable: {e.message}")
            return None
        return data if isinstance(data, dict) else None

    async def get_profile(self, actor: str) -> Optional[Dict[str, Any]]:
        return await self.fetch_json("app.bsky.actor.getProfile", {"actor": actor})

    async def resolve_handle(self, handle: str) -> Optional[str]:
        data = await self.fetch_json("com.atproto.identity.resolveHandle", {"handle": handle})
        if not data:
            return None
        return data.get("did") or None

    async def get_post_thread(
        self,
        uri: str,
        depth: int = 0,
        parent_height: int = 0,
    ) -> Optional[Dict[str, Any]]:
        return await self.fetch_json(
            "app.bsky.feed.getPostThread",
            {"uri": uri, "depth": str(depth), "parentHeight": str(parent_height)},
        )


class BlueskyAgent(XrpcClient):
    """
    Authenticated session against a PDS.

    The agent keeps the upstream credential bundle (did, handle, accessJwt,
    refreshJwt) and refreshes it in place when the PDS answers ExpiredToken.
    """

    def __init__(self, http_client: httpx.AsyncClient, service: str, user_agent: str):
        super().__init__(http_client, service, user_agent)
        self.session: Optional[Dict[str, Any]] = None

    @property
    def did(self) -> Optional[str]:
        return self.session.get("did") if self.session else None

    @property
    def handle(self) -> Optional[str]:
        return self.session.get("handle") if self.session else None

    async def login(self, identifier: str, password: str) -> Dict[str, Any]:
        """Exchange an identifier and app password for a session."""
        data = await self._send(
            "POST",
            "com.atproto.server.createSession",
            body={"identifier": identifier, "password": password},
        )
        self._store_session(data)
        return data

    async def resume_session(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Resume a previously issued session and confirm it with getSession.

        An expired access token is refreshed on the way.
        """
        self.session = {
            "did": session_data.get("did"),
            "handle": session_data.get("handle"),
            "accessJwt": session_data.get("accessJwt"),
            "refreshJwt": session_data.get("refreshJwt"),
        }
        try:
            info = await self.call("GET", "com.atproto.server.getSession")
        except UpstreamError:
            self.session = None
            raise
        if info.get("did"):
            self.session["did"] = info["did"]
        if info.get("handle"):
            self.session["handle"] = info["handle"]
        return info

    async def refresh_session(self) -> None:
        """Rotate the access and refresh tokens. Any failure is an AUTH error."""
        refresh_jwt = self.session.get("refreshJwt") if self.session else None
        if not refresh_jwt:
            raise UpstreamError(UpstreamErrorKind.AUTH, "No refresh token available")
        try:
            data = await self._send(
                "POST",
                "com.atproto.server.refreshSession",
                headers={"Authorization": f"Bearer {refresh_jwt}"},
            )
        except UpstreamError as e:
            # 400 here means the refresh token itself expired or was revoked
            if e.status not in (400, 401):
                raise
            raise UpstreamError(
                UpstreamErrorKind.AUTH, e.message, status=e.status, error_code=e.error_code
            ) from e
        self._store_session(data)
        logger.info(f"Refreshed upstream session for {self.did}")

    async def call(
        self,
        method: str,
        nsid: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        proxy: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Authenticated XRPC call, retried once after an ExpiredToken refresh."""
        if not self.session or not self.session.get("accessJwt"):
            raise UpstreamError(UpstreamErrorKind.AUTH, "Agent has no active session")
        try:
            return await self._send(method, nsid, params=params, body=body,
                                    headers=self._auth_headers(proxy))
        except UpstreamError as e:
            if not e.is_expired_token:
                raise
        await self.refresh_session()
        return await self._send(method, nsid, params=params, body=body,
                                headers=self._auth_headers(proxy))

    def with_proxy(self, service_type: str, service_did: str) -> "ChatClient":
        """Capability bound to this session and routed to another service."""
        return ChatClient(self, f"{service_did}#{service_type}")

    def _auth_headers(self, proxy: Optional[str]) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.session['accessJwt']}"}
        if proxy:
            headers["atproto-proxy"] = proxy
        return headers

    def _store_session(self, data: Dict[str, Any]) -> None:
        if not data.get("did") or not data.get("accessJwt"):
            raise UpstreamError(UpstreamErrorKind.AUTH, "Upstream did not return a session")
        previous = self.session or {}
        self.session = {
            "did": data["did"],
            "handle": data.get("handle") or previous.get("handle"),
            "accessJwt": data["accessJwt"],
            "refreshJwt": data.get("refreshJwt") or previous.get("refreshJwt"),
        }


class ChatClient:
    """chat.bsky.convo.* operations for one session."""

    def __init__(self, agent: BlueskyAgent, proxy: str):
        self.agent = agent
        self.proxy = proxy

    async def _query(self, nsid: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.call("GET", nsid, params=params, proxy=self.proxy)

    async def _procedure(self, nsid: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.call("POST", nsid, body=body, proxy=self.proxy)

    async def list_convos(
        self,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        read_state: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._query("chat.bsky.convo.listConvos", {
            "limit": limit,
            "cursor": cursor,
            "readState": read_state,
            "status": status,
        })

    async def get_convo_for_members(self, members: List[str]) -> Dict[str, Any]:
        return await self._query("chat.bsky.convo.getConvoForMembers", {"members": members})

    async def get_convo_availability(self, members: List[str]) -> Dict[str, Any]:
        return await self._query("chat.bsky.convo.getConvoAvailability", {"members": members})

    async def get_convo(self, convo_id: str) -> Dict[str, Any]:
        return await self._query("chat.bsky.convo.getConvo", {"convoId": convo_id})

    async def get_messages(
        self,
        convo_id: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._query("chat.bsky.convo.getMessages", {
            "convoId": convo_id,
            "cursor": cursor,
            "limit": limit,
        })

    async def send_message(self, convo_id: str, text: str) -> Dict[str, Any]:
        return await self._procedure("chat.bsky.convo.sendMessage", {
            "convoId": convo_id,
            "message": {"text": text},
        })

    async def delete_message(self, convo_id: str, message_id: str) -> Dict[str, Any]:
        return await self._procedure("chat.bsky.convo.deleteMessageForSelf", {
            "convoId": convo_id,
            "messageId": message_id,
        })

    async def leave_convo(self, convo_id: str) -> Dict[str, Any]:
        return await self._procedure("chat.bsky.convo.leaveConvo", {"convoId": convo_id})

    async def update_read(self, convo_id: str, message_id: str) -> Dict[str, Any]:
        return await self._procedure("chat.bsky.convo.updateRead", {
            "convoId": convo_id,
            "messageId": message_id,
        })
