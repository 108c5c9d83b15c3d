import time
from typing import Optional, Dict, Any

import requests
from fastapi import HTTPException
from jose import jwt, JWTError
from jose.utils import base64url_decode
from loguru import logger

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.backends import default_backend

from alumnet.core.config import (
    SUPABASE_URL,
    SUPABASE_ANON_KEY,
    SUPABASE_JWT_SECRET,
    AUTH_VERIFY_MODE,
    JWKS_TTL_SECONDS,
)


# JWKS cache (simple in-memory cache)
_JWKS_CACHE: Dict[str, Any] = {"ts": 0, "jwks": None}

# expiry is handled by the session refresh, not here
_DECODE_OPTIONS = {"verify_aud": False, "verify_exp": False}


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def get_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header format")

    token = parts[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    return token


# ------------------------------------------------------------
# JWKS Fetch + Cache
# ------------------------------------------------------------
def _fetch_jwks() -> Dict[str, Any]:
    """
    Fetch Supabase JWKS.
    Supabase requires apikey header (anon or service_role).
    """
    if not SUPABASE_ANON_KEY:
        raise HTTPException(
            status_code=500,
            detail="SUPABASE_ANON_KEY not set (required for JWKS mode)",
        )

    url = f"{SUPABASE_URL}/auth/v1/.well-known/jwks.json"

    resp = requests.get(
        url,
        headers={"apikey": SUPABASE_ANON_KEY},
        timeout=10,
    )

    try:
        data = resp.json()
    except ValueError:
        raise HTTPException(
            status_code=500,
            detail=f"Invalid JWKS JSON response: HTTP {resp.status_code}",
        )

    if resp.status_code != 200 or "keys" not in data:
        raise HTTPException(
            status_code=500,
            detail=f"Invalid JWKS response: {data}",
        )

    return data


def _get_cached_jwks() -> Dict[str, Any]:
    now = time.time()

    if (
        _JWKS_CACHE["jwks"]
        and now - _JWKS_CACHE["ts"] < JWKS_TTL_SECONDS
    ):
        return _JWKS_CACHE["jwks"]

    jwks = _fetch_jwks()
    _JWKS_CACHE["jwks"] = jwks
    _JWKS_CACHE["ts"] = now

    return jwks


# ------------------------------------------------------------
# JWK → Public Key
# ------------------------------------------------------------
def _public_key_from_jwk(jwk: Dict[str, Any]):
    """
    Supabase ES256 JWK contains x/y coordinates.
    Build EC public key for verification.
    """

    x = base64url_decode(jwk["x"].encode())
    y = base64url_decode(jwk["y"].encode())

    public_numbers = ec.EllipticCurvePublicNumbers(
        int.from_bytes(x, "big"),
        int.from_bytes(y, "big"),
        ec.SECP256R1(),
    )

    return public_numbers.public_key(default_backend())


def _find_jwk(jwks: Dict[str, Any], kid: str) -> Optional[Dict[str, Any]]:
    return next((k for k in jwks["keys"] if k.get("kid") == kid), None)


def _public_key_for_kid(kid: str):
    key_data = _find_jwk(_get_cached_jwks(), kid)

    if key_data is None:
        # unknown kid: the signing key may have rotated, refetch once
        logger.info(f"[auth] kid={kid} not in cached JWKS, refetching")
        _JWKS_CACHE["jwks"] = None
        key_data = _find_jwk(_get_cached_jwks(), kid)

    if key_data is None:
        raise HTTPException(status_code=401, detail="Public key not found for kid")

    return _public_key_from_jwk(key_data)


# ------------------------------------------------------------
# Verification Modes
# ------------------------------------------------------------
def verify_jwt_hs256(token: str, secret: str = SUPABASE_JWT_SECRET) -> Dict[str, Any]:
    """
    Legacy HS256 verification using SUPABASE_JWT_SECRET
    """
    if not secret:
        raise HTTPException(status_code=500, detail="SUPABASE_JWT_SECRET not set")

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options=_DECODE_OPTIONS,
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token signature")


def verify_jwt_jwks(token: str) -> Dict[str, Any]:
    """
    ES256 verification using Supabase JWKS
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token header")

    alg = header.get("alg")
    kid = header.get("kid")

    logger.debug(f"[auth] header.alg={alg} header.kid={kid}")

    if not kid:
        raise HTTPException(status_code=401, detail="Token missing kid")

    if alg != "ES256":
        raise HTTPException(status_code=401, detail=f"Unsupported JWT alg: {alg}")

    try:
        return jwt.decode(
            token,
            _public_key_for_kid(kid),
            algorithms=["ES256"],
            options=_DECODE_OPTIONS,
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token signature")


def precheck_token(token: str, mode: str = AUTH_VERIFY_MODE) -> Optional[Dict[str, Any]]:
    """
    Local signature check before any Supabase round trip.
    Returns the claims, or None in "remote" mode where Supabase is the
    only judge of the token.
    """
    if mode == "remote":
        return None

    if mode == "hs256":
        payload = verify_jwt_hs256(token)
    elif mode == "jwks":
        payload = verify_jwt_jwks(token)
    else:
        raise HTTPException(
            status_code=500,
            detail=f"Invalid AUTH_VERIFY_MODE: {mode}",
        )

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Token missing sub claim")

    return payload
