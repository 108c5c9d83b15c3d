from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from loguru import logger
from supabase import Client


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: Optional[int]
    user: Optional[AuthUser] = None


class AuthClient(Protocol):
    """What the app needs from the hosted auth service."""

    def get_session(self) -> Optional[AuthSession]: ...

    def refresh_session(self) -> Optional[AuthSession]: ...

    def get_user(self, token: Optional[str] = None) -> Optional[AuthUser]: ...

    def sign_up(
        self, email: str, password: str, metadata: dict[str, Any]
    ) -> tuple[Optional[AuthUser], Optional[AuthSession]]: ...

    def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    def sign_out(self) -> None: ...

    def reset_password_for_email(self, email: str, redirect_to: str) -> None: ...


# ------------------------------------------------------------
# gotrue -> plain objects
# ------------------------------------------------------------
def _user_from_gotrue(user) -> Optional[AuthUser]:
    if user is None:
        return None
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def _session_from_gotrue(session) -> Optional[AuthSession]:
    if session is None:
        return None
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user=_user_from_gotrue(getattr(session, "user", None)),
    )


class SupabaseAuthClient:
    """AuthClient backed by a supabase-py client (`client.auth`)."""

    def __init__(self, client: Client):
        self._client = client

    def restore(self, access_token: str, refresh_token: str = "") -> None:
        # raises AuthApiError when the token cannot be turned into a session
        self._client.auth.set_session(access_token, refresh_token)

    def get_session(self) -> Optional[AuthSession]:
        return _session_from_gotrue(self._client.auth.get_session())

    def refresh_session(self) -> Optional[AuthSession]:
        resp = self._client.auth.refresh_session()
        return _session_from_gotrue(resp.session)

    def get_user(self, token: Optional[str] = None) -> Optional[AuthUser]:
        resp = self._client.auth.get_user(token)
        if resp is None:
            return None
        return _user_from_gotrue(resp.user)

    def sign_up(self, email: str, password: str, metadata: dict[str, Any]):
        resp = self._client.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": metadata},
            }
        )
        # session is None when email confirmation is enabled
        return _user_from_gotrue(resp.user), _session_from_gotrue(resp.session)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        resp = self._client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        return _session_from_gotrue(resp.session)

    def sign_out(self) -> None:
        self._client.auth.sign_out()

    def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        logger.info(f"[auth] password reset requested email={email}")
        self._client.auth.reset_password_for_email(
            email, {"redirect_to": redirect_to}
        )
