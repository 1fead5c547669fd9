"""Models module."""

from .session import SessionRecord, SessionStatus, SessionCreated
from .meta import PageMeta
from .chat import (
    LoginRequest, RestoreSessionRequest, UpstreamSessionPayload, MembersRequest,
    SendMessageRequest, MessageRefRequest, ConvoRequest,
)

__all__ = [
    'SessionRecord', 'SessionStatus', 'SessionCreated',
    'PageMeta',
    'LoginRequest', 'RestoreSessionRequest', 'UpstreamSessionPayload', 'MembersRequest',
    'SendMessageRequest', 'MessageRefRequest', 'ConvoRequest',
]
