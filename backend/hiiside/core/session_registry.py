"""
Session Registry - owns every SessionRecord.

Tokens are 256-bit URL-safe random strings. There is no collision check: a
collision would overwrite the earlier record, which is accepted at this
entropy. Records have no TTL and live until destroyed or the process exits.
Concurrent logins for the same identity get independent tokens.
"""

import logging
import secrets
from typing import Any, Optional

from ..models import SessionRecord
from ..storage import SessionStore, InMemorySessionStore

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class SessionRegistry:
    """Creates, looks up and destroys sessions on top of a SessionStore."""

    def __init__(self, store: Optional[SessionStore] = None):
        """
        Args:
            store: Backing store, an InMemorySessionStore when omitted
        """
        self.store = store if store is not None else InMemorySessionStore()

    async def create(self, did: str, handle: Optional[str] = None, agent: Any = None) -> str:
        """
        Register a new session.

        Args:
            did: Upstream identity
            handle: Display handle, if known
            agent: Authenticated upstream client bound to the identity

        Returns:
            str: The new session token
        """
        token = secrets.token_urlsafe(TOKEN_BYTES)
        record = SessionRecord(token=token, did=did, handle=handle, agent=agent)
        await self.store.set(token, record)
        logger.info(f"Session created for {did}")
        return token

    async def lookup(self, token: Optional[str]) -> Optional[SessionRecord]:
        if not token:
            return None
        return await self.store.get(token)

    async def destroy(self, token: Optional[str]) -> None:
        """Remove a session. Unknown or empty tokens are a no-op."""
        if not token:
            return
        await self.store.delete(token)
