from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from alumnet.core.db import Base
from alumnet.schemas.enums import ConnectionStatus


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(String, nullable=False, index=True)
    addressee_id = Column(String, nullable=False, index=True)

    # ordered copy of the pair, one row per unordered {requester, addressee}
    user_low = Column(String, nullable=False)
    user_high = Column(String, nullable=False)

    status = Column(
        Enum(ConnectionStatus, name="connection_status_enum", native_enum=False),
        nullable=False,
        default=ConnectionStatus.pending,
        index=True,
    )
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_low", "user_high", name="uq_connections_pair"),
        CheckConstraint("requester_id != addressee_id", name="ck_connections_not_self"),
        {"sqlite_autoincrement": True},
    )

    def other_party(self, user_id: str) -> str:
        return self.addressee_id if self.requester_id == user_id else self.requester_id


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    # kept after the connection is removed, but no longer reachable
    connection_id = Column(
        Integer,
        ForeignKey("connections.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sender_id = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )
