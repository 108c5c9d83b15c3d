from typing import Optional

from alumnet.core.errors import InvalidTransition
from alumnet.schemas.enums import ConnectionAction, ConnectionState, ConnectionStatus
from .models import Connection


# (viewer state, action) -> stored status afterwards; None means the row is deleted.
# Pairs missing from the table are invalid transitions.
TRANSITIONS: dict[tuple[ConnectionState, ConnectionAction], Optional[ConnectionStatus]] = {
    (ConnectionState.none, ConnectionAction.connect): ConnectionStatus.pending,
    (ConnectionState.pending_received, ConnectionAction.accept): ConnectionStatus.accepted,
    (ConnectionState.pending_received, ConnectionAction.reject): ConnectionStatus.rejected,
    (ConnectionState.pending_sent, ConnectionAction.reject): ConnectionStatus.rejected,
    (ConnectionState.pending_sent, ConnectionAction.remove): None,
    (ConnectionState.pending_received, ConnectionAction.remove): None,
    (ConnectionState.accepted, ConnectionAction.remove): None,
}

_MESSAGES = {
    ConnectionAction.connect: {
        ConnectionState.pending_sent: "Request already sent",
        ConnectionState.pending_received: "This user has already sent you a request",
        ConnectionState.accepted: "Already connected",
    },
    ConnectionAction.accept: {
        ConnectionState.pending_sent: "Only the addressee can accept this request",
        ConnectionState.accepted: "Already connected",
    },
}


def state_for(conn: Optional[Connection], viewer_id: str) -> ConnectionState:
    if conn is None or conn.status == ConnectionStatus.rejected:
        return ConnectionState.none

    if conn.status == ConnectionStatus.accepted:
        return ConnectionState.accepted

    if conn.requester_id == viewer_id:
        return ConnectionState.pending_sent
    return ConnectionState.pending_received


def next_status(
    current: ConnectionState,
    action: ConnectionAction,
) -> Optional[ConnectionStatus]:
    key = (current, action)
    if key not in TRANSITIONS:
        detail = _MESSAGES.get(action, {}).get(
            current,
            f"Cannot {action.value} a connection in state {current.value}",
        )
        raise InvalidTransition(detail)
    return TRANSITIONS[key]
