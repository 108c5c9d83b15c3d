from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumnet.core.config import SITE_URL
from alumnet.core.db import commit_or_raise
from alumnet.core.errors import BackendFailure, Conflict, NotAuthenticated, ValidationFailed
from alumnet.models.profile import Profile
from alumnet.schemas.account import RegisterOut, RegisterRequest, TokenOut
from alumnet.schemas.enums import Role, Visibility
from alumnet.services.auth_client import AuthClient, AuthSession


def _token_out(session: Optional[AuthSession], user_id: str) -> Optional[TokenOut]:
    if session is None:
        return None
    return TokenOut(
        user_id=user_id,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )


def build_initial_profile(user_id: str, payload: RegisterRequest) -> Profile:
    profile = Profile(
        id=user_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        role=payload.role,
        phone=payload.phone or None,
        date_of_birth=payload.date_of_birth,
        gender=payload.gender or None,
        degree=payload.degree or "",
        department=payload.department or "",
        phone_visibility=Visibility.alumni,
        email_visibility=Visibility.alumni,
        location_visibility=Visibility.alumni,
        hidden_from_search=False,
    )

    # role-specific fields
    if payload.role == Role.student:
        profile.roll_number = payload.roll_number or None
    elif payload.role == Role.alumni:
        profile.graduation_year = payload.graduation_year
        profile.job_title = payload.job_title or None
        profile.company = payload.company or None
        profile.location = payload.location or None

    return profile


def register(db: Session, auth: AuthClient, payload: RegisterRequest) -> RegisterOut:
    try:
        user, session = auth.sign_up(
            payload.email,
            payload.password,
            {"first_name": payload.first_name, "last_name": payload.last_name},
        )
    except Exception as e:
        logger.warning(f"[accounts] sign up failed email={payload.email}: {e}")
        raise ValidationFailed(f"Sign up failed: {e}")

    if user is None:
        raise ValidationFailed("Sign up failed: no user returned")

    db.add(build_initial_profile(user.id, payload))
    try:
        commit_or_raise(db, "creating profile")
    except IntegrityError:
        raise Conflict("A profile already exists for this account")

    logger.info(f"[accounts] registered | user={user.id} role={payload.role.value}")
    return RegisterOut(user_id=user.id, session=_token_out(session, user.id))


def login(auth: AuthClient, email: str, password: str) -> TokenOut:
    try:
        session = auth.sign_in_with_password(email, password)
    except Exception as e:
        logger.info(f"[accounts] login failed email={email}: {e}")
        raise NotAuthenticated("Invalid email or password")

    if session is None or session.user is None:
        raise NotAuthenticated("Invalid email or password")

    return _token_out(session, session.user.id)


def logout(auth: AuthClient) -> None:
    try:
        auth.sign_out()
    except Exception:
        logger.exception("[accounts] sign out failed")
        raise BackendFailure("Failed to sign out")


def request_password_reset(auth: AuthClient, email: str) -> None:
    try:
        auth.reset_password_for_email(email, f"{SITE_URL}/reset-password")
    except Exception:
        logger.exception("[accounts] password reset failed")
        raise BackendFailure("Failed to send password reset email")
