"""
Chat request bodies.

Fields are optional on purpose: missing values are reported by the handlers
with endpoint-specific messages instead of generic validation output.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts the browser's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    identifier: Optional[str] = None
    app_password: Optional[str] = None


class UpstreamSessionPayload(CamelModel):
    did: Optional[str] = None
    handle: Optional[str] = None
    access_jwt: Optional[str] = None
    refresh_jwt: Optional[str] = None


class RestoreSessionRequest(CamelModel):
    session: Optional[UpstreamSessionPayload] = None


class MembersRequest(CamelModel):
    members: Optional[List[str]] = None


class SendMessageRequest(CamelModel):
    convo_id: Optional[str] = None
    text: Optional[str] = None


class MessageRefRequest(CamelModel):
    """Body shared by delete-message and mark-read."""
    convo_id: Optional[str] = None
    message_id: Optional[str] = None


class ConvoRequest(CamelModel):
    convo_id: Optional[str] = None
