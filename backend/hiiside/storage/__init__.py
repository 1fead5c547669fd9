"""Storage module - provides the session store interface and implementations."""

from .interface import SessionStore
from .memory_store import InMemorySessionStore

__all__ = ['SessionStore', 'InMemorySessionStore']
