from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumnet.api.deps import get_current_user_id
from alumnet.core.db import get_db
from alumnet.core.errors import AlumnetError, to_http
from alumnet.models.profile import Profile
from alumnet.schemas.enums import ConnectionState
from alumnet.schemas.connection import (
    ConnectionMineOut,
    ConnectionOut,
    ConnectionStatusOut,
    ProfilePreview,
)
from .models import Connection
from .service import ConnectionManager
from .state import state_for

router = APIRouter(prefix="/connections", tags=["connections"])


# --------------------------------------------------
# SERIALISER
# --------------------------------------------------
def build_connection_out(conn: Connection, viewer_id: str, db: Session) -> ConnectionOut:
    other = db.get(Profile, conn.other_party(viewer_id))
    return ConnectionOut(
        id=conn.id,
        requester_id=conn.requester_id,
        addressee_id=conn.addressee_id,
        status=conn.status,
        state=state_for(conn, viewer_id),
        other=ProfilePreview.model_validate(other) if other is not None else None,
        created_at=conn.created_at,
        updated_at=conn.updated_at,
    )


@router.get("/mine", response_model=ConnectionMineOut)
def my_connections(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    mine = ConnectionManager(db, user_id).list_mine()
    return {
        key: [build_connection_out(c, user_id, db) for c in conns]
        for key, conns in mine.items()
    }


@router.get("/status/{other_id}", response_model=ConnectionStatusOut)
def connection_status(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    manager = ConnectionManager(db, user_id)
    state = manager.status(other_id)
    return ConnectionStatusOut(
        user_id=other_id,
        state=state,
        connection_id=manager.pair(other_id).id if state != ConnectionState.none else None,
    )


@router.post("/{other_id}/request", response_model=ConnectionOut)
def connect_request(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        conn = ConnectionManager(db, user_id).connect(other_id)
    except AlumnetError as e:
        raise to_http(e)
    return build_connection_out(conn, user_id, db)


@router.post("/{other_id}/accept", response_model=ConnectionOut)
def connect_accept(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        conn = ConnectionManager(db, user_id).accept(other_id)
    except AlumnetError as e:
        raise to_http(e)
    return build_connection_out(conn, user_id, db)


@router.post("/{other_id}/reject", response_model=ConnectionOut)
def connect_reject(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        conn = ConnectionManager(db, user_id).reject(other_id)
    except AlumnetError as e:
        raise to_http(e)
    return build_connection_out(conn, user_id, db)


@router.delete("/{other_id}")
def connect_remove(
    other_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        ConnectionManager(db, user_id).remove(other_id)
    except AlumnetError as e:
        raise to_http(e)
    return {"removed": True}
