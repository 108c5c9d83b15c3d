from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumnet.core.db import commit_or_raise
from alumnet.core.errors import Conflict, NotFound, ValidationFailed
from alumnet.models.profile import Profile
from alumnet.schemas.enums import ConnectionAction, ConnectionState, ConnectionStatus
from .models import Connection
from .state import next_status, state_for


def pair_low_high(a, b) -> tuple[str, str]:
    a_str = str(a)
    b_str = str(b)
    return (a_str, b_str) if a_str < b_str else (b_str, a_str)


class ConnectionManager:
    """Connection transitions between the caller and one other user."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = str(user_id)

    # ---------- lookups ----------

    def pair(self, other_id: str) -> Optional[Connection]:
        low, high = pair_low_high(self.user_id, other_id)
        return (
            self.db.query(Connection)
            .filter(Connection.user_low == low, Connection.user_high == high)
            .first()
        )

    def status(self, other_id: str) -> ConnectionState:
        return state_for(self.pair(other_id), self.user_id)

    def _transition(self, other_id: str, action: ConnectionAction):
        conn = self.pair(other_id)
        current = state_for(conn, self.user_id)
        target = next_status(current, action)
        logger.info(
            f"[connections] {action.value} | user={self.user_id} other={other_id} "
            f"{current.value} -> {target.value if target else 'deleted'}"
        )
        return conn, target

    # ---------- transitions ----------

    def connect(self, target_id: str) -> Connection:
        target_id = str(target_id)
        if target_id == self.user_id:
            raise ValidationFailed("Cannot connect to self")

        if self.db.get(Profile, target_id) is None:
            raise NotFound("Target profile not found")

        conn, status = self._transition(target_id, ConnectionAction.connect)
        low, high = pair_low_high(self.user_id, target_id)

        if conn is None:
            conn = Connection(
                requester_id=self.user_id,
                addressee_id=target_id,
                user_low=low,
                user_high=high,
                status=status,
            )
            self.db.add(conn)
        else:
            # previously rejected row is reused, direction follows the new request
            conn.requester_id = self.user_id
            conn.addressee_id = target_id
            conn.status = status

        try:
            commit_or_raise(self.db, "creating connection")
        except IntegrityError:
            raise Conflict("A connection between these users already exists")

        self.db.refresh(conn)
        return conn

    def accept(self, requester_id: str) -> Connection:
        conn, status = self._transition(requester_id, ConnectionAction.accept)
        conn.status = status
        commit_or_raise(self.db, "accepting connection")
        self.db.refresh(conn)
        return conn

    def reject(self, other_id: str) -> Connection:
        conn, status = self._transition(other_id, ConnectionAction.reject)
        conn.status = status
        commit_or_raise(self.db, "rejecting connection")
        self.db.refresh(conn)
        return conn

    def remove(self, other_id: str) -> None:
        conn, _ = self._transition(other_id, ConnectionAction.remove)
        self.db.delete(conn)
        commit_or_raise(self.db, "removing connection")

    # ---------- listing ----------

    def list_mine(self) -> dict[str, list[Connection]]:
        rows = (
            self.db.query(Connection)
            .filter(
                (Connection.requester_id == self.user_id)
                | (Connection.addressee_id == self.user_id),
                Connection.status != ConnectionStatus.rejected,
            )
            .order_by(Connection.updated_at.desc(), Connection.id.desc())
            .all()
        )

        mine = {"incoming_pending": [], "outgoing_pending": [], "accepted": []}
        for conn in rows:
            state = state_for(conn, self.user_id)
            if state == ConnectionState.pending_received:
                mine["incoming_pending"].append(conn)
            elif state == ConnectionState.pending_sent:
                mine["outgoing_pending"].append(conn)
            else:
                mine["accepted"].append(conn)
        return mine
