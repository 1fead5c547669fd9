"""
In-process session store.
Lives for the lifetime of the process; nothing is persisted.
"""

from typing import Dict, Optional

from ..models import SessionRecord
from .interface import SessionStore


class InMemorySessionStore(SessionStore):
    """Dict-backed store. Safe without locks on a single event loop."""

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}

    async def get(self, token: str) -> Optional[SessionRecord]:
        return self._records.get(token)

    async def set(self, token: str, record: SessionRecord) -> None:
        self._records[token] = record

    async def delete(self, token: str) -> None:
        self._records.pop(token, None)

    def __len__(self) -> int:
        return len(self._records)
