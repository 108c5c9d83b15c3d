from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from alumnet.schemas.base import BaseSchema
from alumnet.schemas.enums import ErrorKind, ConnectionStatus


class MessageSendRequest(BaseModel):
    content: str


class MessageOut(BaseSchema):
    id: int
    connection_id: Optional[int]
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime


class PartyName(BaseSchema):
    first_name: str
    last_name: str
    photo_url: Optional[str] = None


class ConversationOut(BaseSchema):
    id: int
    requester_id: str
    addressee_id: str
    status: ConnectionStatus
    created_at: datetime
    updated_at: datetime
    requester: Optional[PartyName] = None
    addressee: Optional[PartyName] = None


class OperationResult(BaseModel):
    """Outcome of a messaging operation; failures never raise."""

    success: bool
    error: Optional[str] = None
    code: Optional[ErrorKind] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: ErrorKind) -> "OperationResult":
        return cls(success=False, error=error, code=code)
