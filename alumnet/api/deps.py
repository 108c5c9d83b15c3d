from typing import Optional

from fastapi import Depends, Header, HTTPException
from loguru import logger

from alumnet.core.auth import get_bearer_token, precheck_token
from alumnet.services.auth_client import AuthClient, SupabaseAuthClient
from alumnet.services.session_provider import SessionProvider
from alumnet.services.supabase_client import supabase_anon


def _restore_auth_client(authorization: str, refresh_token: Optional[str]) -> AuthClient:
    token = get_bearer_token(authorization)
    precheck_token(token)

    auth = SupabaseAuthClient(supabase_anon())
    try:
        auth.restore(token, refresh_token or "")
    except Exception as e:
        logger.warning(f"[auth] could not restore session: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return auth


# ------------------------------------------------------------------
# Auth collaborators (overridden in tests)
# ------------------------------------------------------------------

def get_public_auth_client() -> AuthClient:
    return SupabaseAuthClient(supabase_anon())


def get_auth_client(
    authorization: Optional[str] = Header(default=None),
    x_refresh_token: Optional[str] = Header(default=None),
) -> AuthClient:
    return _restore_auth_client(authorization, x_refresh_token)


def get_optional_auth_client(
    authorization: Optional[str] = Header(default=None),
    x_refresh_token: Optional[str] = Header(default=None),
) -> Optional[AuthClient]:
    if not authorization:
        return None
    return _restore_auth_client(authorization, x_refresh_token)


# ------------------------------------------------------------------
# Session + identity
# ------------------------------------------------------------------

def get_session_provider(auth: AuthClient = Depends(get_auth_client)) -> SessionProvider:
    return SessionProvider(auth)


def get_current_user_id(sessions: SessionProvider = Depends(get_session_provider)) -> str:
    user = sessions.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return user.id


def get_optional_user_id(
    auth: Optional[AuthClient] = Depends(get_optional_auth_client),
) -> Optional[str]:
    if auth is None:
        return None
    user = SessionProvider(auth).get_current_user()
    return user.id if user else None
