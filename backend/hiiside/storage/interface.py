"""
Session Store Interface - Abstract base class for session storage backends.
This interface enables switching between the in-process map and an external
keyed store without touching the request handlers.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import SessionRecord


class SessionStore(ABC):
    """
    Keyed storage for SessionRecords.
    Implementations only store and return records; token generation and
    lifecycle rules live in SessionRegistry.
    """

    @abstractmethod
    async def get(self, token: str) -> Optional[SessionRecord]:
        """
        Fetch the record stored under a token.

        Args:
            token: Session token

        Returns:
            Optional[SessionRecord]: The record, or None if the token is unknown
        """
        pass

    @abstractmethod
    async def set(self, token: str, record: SessionRecord) -> None:
        """
        Store a record under a token, replacing any previous record.

        Args:
            token: Session token
            record: Record to store
        """
        pass

    @abstractmethod
    async def delete(self, token: str) -> None:
        """
        Remove the record stored under a token. Unknown tokens are ignored.

        Args:
            token: Session token
        """
        pass
