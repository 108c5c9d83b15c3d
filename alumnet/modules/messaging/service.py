from typing import Any, Callable

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from alumnet.core.errors import AlumnetError, NotAuthenticated, Unauthorized, ValidationFailed
from alumnet.models.profile import Profile
from alumnet.modules.connections.models import Connection, Message
from alumnet.schemas.enums import ConnectionStatus, ErrorKind
from alumnet.schemas.message import ConversationOut, MessageOut, OperationResult, PartyName
from alumnet.services.session_provider import SessionProvider

NOT_A_PARTY = "Unauthorized: You are not part of this connection"


class MessagingService:
    """
    Direct messages between two users with an accepted connection.

    Every operation re-validates the session and re-runs the connection
    gate, so a connection removed mid-session blocks the next call.
    Operations return an OperationResult and never raise.
    """

    def __init__(self, db: Session, sessions: SessionProvider):
        self.db = db
        self.sessions = sessions

    # ------------------------------------------------------------------
    # session + gate
    # ------------------------------------------------------------------

    def validate_auth(self) -> str:
        token = self.sessions.get_valid_token()
        if not token:
            raise NotAuthenticated("No valid authentication token found")

        if not self.sessions.verify_token(token):
            raise NotAuthenticated("Invalid or expired authentication token")

        user = self.sessions.get_current_user()
        if user is None:
            raise NotAuthenticated("User not authenticated")

        return user.id

    def authorize_connection(self, connection_id: int, caller_id: str) -> Connection:
        conn = (
            self.db.query(Connection)
            .filter(
                Connection.id == connection_id,
                Connection.status == ConnectionStatus.accepted,
                (Connection.requester_id == caller_id)
                | (Connection.addressee_id == caller_id),
            )
            .first()
        )
        if conn is None:
            logger.info(f"[messaging] gate denied | connection={connection_id} user={caller_id}")
            raise Unauthorized(NOT_A_PARTY)
        return conn

    def _run(self, action: str, op: Callable[[], Any]) -> OperationResult:
        try:
            return OperationResult.ok(op())
        except AlumnetError as e:
            return OperationResult.fail(e.message, e.kind)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"[messaging] backend error while {action}")
            return OperationResult.fail(f"Failed to {action}", ErrorKind.backend)
        except Exception:
            self.db.rollback()
            logger.exception(f"[messaging] unexpected error while {action}")
            return OperationResult.fail(
                f"An unexpected error occurred while trying to {action}",
                ErrorKind.backend,
            )

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def send_message(self, connection_id: int, content: str) -> OperationResult:
        def op():
            body = (content or "").strip()
            if not body:
                raise ValidationFailed("Message content cannot be empty")

            user_id = self.validate_auth()
            self.authorize_connection(connection_id, user_id)

            msg = Message(
                connection_id=connection_id,
                sender_id=user_id,
                content=body,
                is_read=False,
            )
            self.db.add(msg)
            self.db.commit()
            self.db.refresh(msg)

            logger.info(f"[messaging] sent | connection={connection_id} message={msg.id}")
            return MessageOut.model_validate(msg)

        return self._run("send message", op)

    def fetch_messages(self, connection_id: int) -> OperationResult:
        def op():
            user_id = self.validate_auth()
            self.authorize_connection(connection_id, user_id)

            rows = (
                self.db.query(Message)
                .filter(Message.connection_id == connection_id)
                .order_by(Message.created_at.asc(), Message.id.asc())
                .all()
            )
            return [MessageOut.model_validate(m) for m in rows]

        return self._run("fetch messages", op)

    def mark_messages_as_read(self, connection_id: int) -> OperationResult:
        def op():
            user_id = self.validate_auth()
            self.authorize_connection(connection_id, user_id)

            updated = (
                self.db.query(Message)
                .filter(
                    Message.connection_id == connection_id,
                    Message.sender_id != user_id,
                    Message.is_read.is_(False),
                )
                .update({Message.is_read: True}, synchronize_session=False)
            )
            self.db.commit()

            logger.debug(f"[messaging] marked read | connection={connection_id} count={updated}")
            return {"updated": updated}

        return self._run("mark messages as read", op)

    def fetch_connections(self) -> OperationResult:
        def op():
            user_id = self.validate_auth()

            requester = aliased(Profile)
            addressee = aliased(Profile)
            rows = (
                self.db.query(Connection, requester, addressee)
                .outerjoin(requester, requester.id == Connection.requester_id)
                .outerjoin(addressee, addressee.id == Connection.addressee_id)
                .filter(
                    Connection.status == ConnectionStatus.accepted,
                    (Connection.requester_id == user_id)
                    | (Connection.addressee_id == user_id),
                )
                .order_by(Connection.updated_at.desc(), Connection.id.desc())
                .all()
            )

            return [
                ConversationOut(
                    id=conn.id,
                    requester_id=conn.requester_id,
                    addressee_id=conn.addressee_id,
                    status=conn.status,
                    created_at=conn.created_at,
                    updated_at=conn.updated_at,
                    requester=PartyName.model_validate(req) if req else None,
                    addressee=PartyName.model_validate(addr) if addr else None,
                )
                for conn, req, addr in rows
            ]

        return self._run("fetch connections", op)
