import base64
import time
from types import SimpleNamespace

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi import HTTPException
from jose import jwt

from alumnet.core import auth
from alumnet.core.auth import get_bearer_token, precheck_token, verify_jwt_hs256

SECRET = "test-jwt-secret"


def _token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.mark.parametrize(
    "header",
    [None, "", "Token abc", "Bearer", "Bearer    "],
)
def test_bad_authorization_headers(header):
    with pytest.raises(HTTPException) as exc:
        get_bearer_token(header)
    assert exc.value.status_code == 401


def test_bearer_token_is_extracted():
    assert get_bearer_token("bearer abc.def") == "abc.def"
    assert get_bearer_token("Bearer  abc.def ") == "abc.def"


def test_hs256_accepts_valid_signature_even_when_expired():
    token = _token({"sub": "user-1", "exp": int(time.time()) - 60})

    claims = verify_jwt_hs256(token, secret=SECRET)
    assert claims["sub"] == "user-1"


def test_hs256_rejects_wrong_secret():
    token = _token({"sub": "user-1"}, secret="someone-else")

    with pytest.raises(HTTPException) as exc:
        verify_jwt_hs256(token, secret=SECRET)
    assert exc.value.status_code == 401


def test_hs256_without_secret_is_a_server_error():
    with pytest.raises(HTTPException) as exc:
        verify_jwt_hs256(_token({"sub": "user-1"}), secret="")
    assert exc.value.status_code == 500


def test_precheck_remote_mode_skips_local_verification():
    assert precheck_token("not-even-a-jwt", mode="remote") is None


def test_precheck_unknown_mode():
    with pytest.raises(HTTPException) as exc:
        precheck_token("x", mode="magic")
    assert exc.value.status_code == 500


def test_precheck_hs256_requires_sub(monkeypatch):
    monkeypatch.setattr(auth, "verify_jwt_hs256", lambda token: {"role": "authenticated"})

    with pytest.raises(HTTPException) as exc:
        precheck_token("x", mode="hs256")
    assert exc.value.status_code == 401


def test_precheck_hs256_returns_claims(monkeypatch):
    monkeypatch.setattr(auth, "verify_jwt_hs256", lambda token: verify_jwt_hs256(token, secret=SECRET))

    claims = precheck_token(_token({"sub": "user-9"}), mode="hs256")
    assert claims["sub"] == "user-9"


def test_jwks_rejects_non_es256_tokens():
    token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256", headers={"kid": "k1"})

    with pytest.raises(HTTPException) as exc:
        auth.verify_jwt_jwks(token)
    assert exc.value.status_code == 401
    assert "Unsupported JWT alg" in exc.value.detail


# ------------------------------------------------------------
# JWKS (ES256)
# ------------------------------------------------------------
def _b64url(n: int) -> str:
    return base64.urlsafe_b64encode(n.to_bytes(32, "big")).rstrip(b"=").decode()


def _es256_key():
    return ec.generate_private_key(ec.SECP256R1())


def _jwk(private_key, kid):
    numbers = private_key.public_key().public_numbers()
    return {
        "kty": "EC",
        "crv": "P-256",
        "alg": "ES256",
        "use": "sig",
        "kid": kid,
        "x": _b64url(numbers.x),
        "y": _b64url(numbers.y),
    }


def _es256_token(private_key, kid, claims):
    pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    return jwt.encode(claims, pem, algorithm="ES256", headers={"kid": kid})


class _JwksResponse:
    status_code = 200

    def __init__(self, payload):
        self._payload = payload

    def json(self):
        return self._payload


@pytest.fixture
def jwks_server(monkeypatch):
    """Serves whatever is in `server.keys` at call time and records each fetch."""
    server = SimpleNamespace(keys=[], calls=[])

    def fake_get(url, headers=None, timeout=None):
        server.calls.append((url, headers))
        return _JwksResponse({"keys": list(server.keys)})

    monkeypatch.setattr(auth.requests, "get", fake_get)
    monkeypatch.setattr(auth, "SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setattr(auth, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setitem(auth._JWKS_CACHE, "jwks", None)
    monkeypatch.setitem(auth._JWKS_CACHE, "ts", 0)
    return server


def test_jwks_verifies_es256_signature(jwks_server):
    key = _es256_key()
    jwks_server.keys = [_jwk(key, "k1")]

    claims = precheck_token(_es256_token(key, "k1", {"sub": "user-1"}), mode="jwks")

    assert claims["sub"] == "user-1"
    url, headers = jwks_server.calls[0]
    assert url == "https://project.supabase.co/auth/v1/.well-known/jwks.json"
    assert headers == {"apikey": "anon-key"}


def test_jwks_is_fetched_once_while_cached(jwks_server):
    key = _es256_key()
    jwks_server.keys = [_jwk(key, "k1")]
    token = _es256_token(key, "k1", {"sub": "user-1"})

    assert precheck_token(token, mode="jwks")["sub"] == "user-1"
    assert precheck_token(token, mode="jwks")["sub"] == "user-1"

    assert len(jwks_server.calls) == 1


def test_jwks_unknown_kid_refetches_once(jwks_server):
    old, new = _es256_key(), _es256_key()
    jwks_server.keys = [_jwk(old, "old")]
    auth._get_cached_jwks()

    # signing key rotated after the cache was filled
    jwks_server.keys = [_jwk(old, "old"), _jwk(new, "new")]
    claims = precheck_token(_es256_token(new, "new", {"sub": "user-2"}), mode="jwks")

    assert claims["sub"] == "user-2"
    assert len(jwks_server.calls) == 2


def test_jwks_kid_missing_after_refetch(jwks_server):
    key = _es256_key()
    jwks_server.keys = [_jwk(key, "k1")]

    with pytest.raises(HTTPException) as exc:
        auth.verify_jwt_jwks(_es256_token(key, "gone", {"sub": "user-1"}))

    assert exc.value.status_code == 401
    assert exc.value.detail == "Public key not found for kid"
    assert len(jwks_server.calls) == 2


def test_jwks_rejects_token_signed_by_another_key(jwks_server):
    published, attacker = _es256_key(), _es256_key()
    jwks_server.keys = [_jwk(published, "k1")]

    with pytest.raises(HTTPException) as exc:
        auth.verify_jwt_jwks(_es256_token(attacker, "k1", {"sub": "user-1"}))

    assert exc.value.status_code == 401
    assert exc.value.detail == "Invalid token signature"
