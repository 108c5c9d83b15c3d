"""Shared fixtures: in-memory SQLite, a fake Supabase auth client, and
a TestClient whose callers are picked with `Authorization: Bearer <user id>`.
"""

import os
import time

# must be set before alumnet.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "INFO"
os.environ["AUTH_VERIFY_MODE"] = "remote"
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from typing import Optional

import pytest
from fastapi import Header
from fastapi.testclient import TestClient

from alumnet.core.auth import get_bearer_token
from alumnet.core.db import Base, SessionLocal, engine, get_db
from alumnet.core.init_db import init_db
from alumnet.models.profile import Profile
from alumnet.schemas.enums import Role
from alumnet.services.auth_client import AuthSession, AuthUser
from alumnet.services.session_provider import SessionProvider


FAR_FUTURE = int(time.time()) + 3600


class FakeAuthClient:
    """In-memory stand-in for SupabaseAuthClient."""

    def __init__(self, user_id: Optional[str] = "user-x", expires_at: Optional[int] = FAR_FUTURE):
        self.user = AuthUser(id=user_id, email=f"{user_id}@example.com") if user_id else None
        self.session = (
            AuthSession(
                access_token=f"token-{user_id}",
                refresh_token="refresh-1",
                expires_at=expires_at,
                user=self.user,
            )
            if user_id
            else None
        )
        self.refreshed = (
            AuthSession(
                access_token=f"token-{user_id}-refreshed",
                refresh_token="refresh-2",
                expires_at=FAR_FUTURE,
                user=self.user,
            )
            if user_id
            else None
        )
        self.fail: set[str] = set()
        self.calls: list[str] = []
        self.passwords: dict[str, str] = {}
        self.reset_requests: list[tuple[str, str]] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    def _valid_tokens(self) -> set[str]:
        return {s.access_token for s in (self.session, self.refreshed) if s is not None}

    def get_session(self):
        self._call("get_session")
        return self.session

    def refresh_session(self):
        self._call("refresh_session")
        return self.refreshed

    def get_user(self, token=None):
        self._call("get_user")
        if token is not None and token not in self._valid_tokens():
            return None
        return self.user

    def sign_up(self, email, password, metadata):
        self._call("sign_up")
        user = AuthUser(id=f"uid-{email.split('@')[0]}", email=email, metadata=metadata)
        self.passwords[email] = password
        session = AuthSession(
            access_token=f"token-{user.id}",
            refresh_token="refresh-1",
            expires_at=FAR_FUTURE,
            user=user,
        )
        return user, session

    def sign_in_with_password(self, email, password):
        self._call("sign_in_with_password")
        if self.passwords.get(email) != password:
            raise RuntimeError("Invalid login credentials")
        user = AuthUser(id=f"uid-{email.split('@')[0]}", email=email)
        return AuthSession(
            access_token=f"token-{user.id}",
            refresh_token="refresh-1",
            expires_at=FAR_FUTURE,
            user=user,
        )

    def sign_out(self):
        self._call("sign_out")

    def reset_password_for_email(self, email, redirect_to):
        self._call("reset_password_for_email")
        self.reset_requests.append((email, redirect_to))


# ----------------------------------------------------------------------
# database
# ----------------------------------------------------------------------

@pytest.fixture
def db():
    init_db(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_profile(db):
    def _make(user_id: str, first_name: str = "Ada", last_name: str = "Lovelace", **fields):
        fields.setdefault("role", Role.alumni)
        fields.setdefault("email", f"{user_id}@example.com")
        profile = Profile(id=user_id, first_name=first_name, last_name=last_name, **fields)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


# ----------------------------------------------------------------------
# auth
# ----------------------------------------------------------------------

@pytest.fixture
def fake_auth():
    return FakeAuthClient


@pytest.fixture
def sessions_for():
    def _sessions(user_id: Optional[str], **kwargs) -> SessionProvider:
        return SessionProvider(FakeAuthClient(user_id, **kwargs))

    return _sessions


# ----------------------------------------------------------------------
# HTTP
# ----------------------------------------------------------------------

@pytest.fixture
def public_auth():
    return FakeAuthClient(user_id=None)


@pytest.fixture
def client(db, public_auth):
    from alumnet.api import deps
    from alumnet.main import app

    def _db_override():
        yield db

    def _auth_override(authorization: Optional[str] = Header(default=None)):
        return FakeAuthClient(get_bearer_token(authorization))

    def _optional_auth_override(authorization: Optional[str] = Header(default=None)):
        if not authorization:
            return None
        return FakeAuthClient(get_bearer_token(authorization))

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[deps.get_auth_client] = _auth_override
    app.dependency_overrides[deps.get_optional_auth_client] = _optional_auth_override
    app.dependency_overrides[deps.get_public_auth_client] = lambda: public_auth

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
