from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from alumnet.api.deps import get_session_provider
from alumnet.core.db import get_db
from alumnet.core.errors import HTTP_STATUS_BY_KIND
from alumnet.schemas.message import MessageSendRequest, OperationResult
from alumnet.services.session_provider import SessionProvider
from .service import MessagingService

router = APIRouter(prefix="/messages", tags=["messages"])


def get_messaging_service(
    db: Session = Depends(get_db),
    sessions: SessionProvider = Depends(get_session_provider),
) -> MessagingService:
    return MessagingService(db, sessions)


def _unwrap(result: OperationResult):
    if not result.success:
        raise HTTPException(
            status_code=HTTP_STATUS_BY_KIND[result.code],
            detail=result.error,
        )
    return result.data


@router.get("/connections")
def list_conversations(service: MessagingService = Depends(get_messaging_service)):
    return _unwrap(service.fetch_connections())


@router.get("/{connection_id}")
def list_messages(
    connection_id: int,
    service: MessagingService = Depends(get_messaging_service),
):
    return _unwrap(service.fetch_messages(connection_id))


@router.post("/{connection_id}")
def send_message(
    connection_id: int,
    payload: MessageSendRequest,
    service: MessagingService = Depends(get_messaging_service),
):
    return _unwrap(service.send_message(connection_id, payload.content))


@router.post("/{connection_id}/read")
def mark_read(
    connection_id: int,
    service: MessagingService = Depends(get_messaging_service),
):
    return _unwrap(service.mark_messages_as_read(connection_id))
