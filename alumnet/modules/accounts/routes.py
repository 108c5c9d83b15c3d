from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumnet.api.deps import get_auth_client, get_public_auth_client
from alumnet.core.db import get_db
from alumnet.core.errors import AlumnetError, to_http
from alumnet.schemas.account import (
    LoginRequest,
    PasswordResetRequest,
    RegisterOut,
    RegisterRequest,
    TokenOut,
)
from alumnet.services.auth_client import AuthClient
from . import service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterOut, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    auth: AuthClient = Depends(get_public_auth_client),
):
    try:
        return service.register(db, auth, payload)
    except AlumnetError as e:
        raise to_http(e)


@router.post("/login", response_model=TokenOut)
def login(
    payload: LoginRequest,
    auth: AuthClient = Depends(get_public_auth_client),
):
    try:
        return service.login(auth, payload.email, payload.password)
    except AlumnetError as e:
        raise to_http(e)


@router.post("/logout")
def logout(auth: AuthClient = Depends(get_auth_client)):
    try:
        service.logout(auth)
    except AlumnetError as e:
        raise to_http(e)
    return {"signed_out": True}


@router.post("/reset-password")
def reset_password(
    payload: PasswordResetRequest,
    auth: AuthClient = Depends(get_public_auth_client),
):
    try:
        service.request_password_reset(auth, payload.email)
    except AlumnetError as e:
        raise to_http(e)
    return {"sent": True}
