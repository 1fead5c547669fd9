"""
Session Models - Defines structures for browser chat sessions.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class SessionRecord(BaseModel):
    """Server-side state behind one session-token cookie."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: str
    did: str
    handle: Optional[str] = None
    agent: Any = Field(default=None, repr=False)  # authenticated BlueskyAgent
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStatus(BaseModel):
    """Response body of the session status endpoint."""
    active: bool
    did: Optional[str] = None
    handle: Optional[str] = None


class SessionCreated(BaseModel):
    """Response body of login and restore."""
    success: bool = True
    did: str
    handle: Optional[str] = None
