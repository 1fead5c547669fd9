"""
Unit tests for the session registry and store.
"""

import pytest
from unittest.mock import MagicMock

from hiiside.core.session_registry import SessionRegistry
from hiiside.storage import InMemorySessionStore, SessionStore


class TestSessionRegistry:
    """Tests for SessionRegistry."""

    @pytest.mark.asyncio
    async def test_create_then_lookup(self):
        registry = SessionRegistry()
        agent = MagicMock()

        token = await registry.create("did:plc:alice", "alice.test", agent)
        record = await registry.lookup(token)

        assert record is not None
        assert record.token == token
        assert record.did == "did:plc:alice"
        assert record.handle == "alice.test"
        assert record.agent is agent
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_destroy_then_lookup(self):
        registry = SessionRegistry()
        token = await registry.create("did:plc:alice")

        await registry.destroy(token)

        assert await registry.lookup(token) is None

    @pytest.mark.asyncio
    async def test_destroy_unknown_token(self):
        registry = SessionRegistry()
        await registry.destroy("does-not-exist")
        await registry.destroy("")
        await registry.destroy(None)

    @pytest.mark.asyncio
    async def test_lookup_empty_token(self):
        registry = SessionRegistry()
        assert await registry.lookup("") is None
        assert await registry.lookup(None) is None

    @pytest.mark.asyncio
    async def test_tokens_are_unique_per_login(self):
        """The same identity logging in twice gets two independent sessions."""
        registry = SessionRegistry()
        first = await registry.create("did:plc:alice", "alice.test")
        second = await registry.create("did:plc:alice", "alice.test")

        assert first != second
        assert len(first) >= 43
        assert (await registry.lookup(first)).did == "did:plc:alice"
        assert (await registry.lookup(second)).did == "did:plc:alice"

        await registry.destroy(first)
        assert await registry.lookup(first) is None
        assert await registry.lookup(second) is not None

    @pytest.mark.asyncio
    async def test_uses_injected_store(self):
        store = InMemorySessionStore()
        registry = SessionRegistry(store)

        token = await registry.create("did:plc:bob")

        assert len(store) == 1
        assert (await store.get(token)).did == "did:plc:bob"


class RecordingStore(SessionStore):
    """Store double that records every call."""

    def __init__(self):
        self.calls = []
        self.data = {}

    async def get(self, token):
        self.calls.append(("get", token))
        return self.data.get(token)

    async def set(self, token, record):
        self.calls.append(("set", token))
        self.data[token] = record

    async def delete(self, token):
        self.calls.append(("delete", token))
        self.data.pop(token, None)


class TestSessionStoreContract:
    """The registry only talks to the store through get/set/delete."""

    @pytest.mark.asyncio
    async def test_lifecycle_calls(self):
        store = RecordingStore()
        registry = SessionRegistry(store)

        token = await registry.create("did:plc:carol")
        await registry.lookup(token)
        await registry.destroy(token)

        assert store.calls == [("set", token), ("get", token), ("delete", token)]
