from typing import List, Optional

from alumnet.schemas.base import BaseSchema, TimestampedSchema
from alumnet.schemas.enums import ConnectionState, ConnectionStatus


# ---------- shared ----------
class ProfilePreview(BaseSchema):
    id: str
    first_name: str
    last_name: str
    photo_url: Optional[str] = None


# ---------- single connection, from the viewer's side ----------
class ConnectionOut(TimestampedSchema):
    id: int
    requester_id: str
    addressee_id: str
    status: ConnectionStatus
    state: ConnectionState
    other: Optional[ProfilePreview] = None


class ConnectionStatusOut(BaseSchema):
    user_id: str
    state: ConnectionState
    connection_id: Optional[int] = None


class ConnectionMineOut(BaseSchema):
    incoming_pending: List[ConnectionOut]
    outgoing_pending: List[ConnectionOut]
    accepted: List[ConnectionOut]
