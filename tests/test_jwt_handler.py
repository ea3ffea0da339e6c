"""
Unit tests — token issuer (jwt_handler.py).

Covers duration parsing, claim layout, signature/expiry verification,
unverified decoding and password hashing.
"""

import time
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from tournament_registration.api.auth.jwt_handler import JWTHandler, parse_expiration
from tournament_registration.errors import AuthenticationError

SECRET = "unit-test-secret-key-0123456789abcdef"


@pytest.fixture
def handler() -> JWTHandler:
    return JWTHandler(secret_key=SECRET, expires_in="30d")


@pytest.fixture
def user():
    return SimpleNamespace(id="u-1", username="usa_delegate", country="USA", role="DELEGATE")


# ─────────────────────────── Expiration parsing ──────────────────────────────

@pytest.mark.parametrize("value,expected", [
    ("30d", timedelta(days=30)),
    ("12h", timedelta(hours=12)),
    ("15m", timedelta(minutes=15)),
    ("45s", timedelta(seconds=45)),
    ("7", timedelta(days=7)),       # no unit -> days
    ("3w", timedelta(days=3)),      # unknown unit -> days
])
def test_parse_expiration(value, expected):
    assert parse_expiration(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "d30", "-5d"])
def test_parse_expiration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_expiration(value)


# ─────────────────────────── Issue / verify ──────────────────────────────────

def test_issue_carries_identity_claims(handler, user):
    issued = handler.issue(user)
    claims = handler.verify(issued.token)

    assert claims["sub"] == "u-1"
    assert claims["username"] == "usa_delegate"
    assert claims["country"] == "USA"
    assert claims["role"] == "DELEGATE"
    assert claims["jti"] == issued.token_id
    assert claims["exp"] - claims["iat"] == 30 * 24 * 3600
    assert issued.expires_in == 30 * 24 * 3600


def test_each_token_gets_its_own_id(handler, user):
    assert handler.issue(user).token_id != handler.issue(user).token_id


def test_verify_rejects_wrong_secret(handler, user):
    token = JWTHandler(secret_key="another-secret-key-0123456789abcdef").issue(user).token
    with pytest.raises(AuthenticationError) as exc_info:
        handler.verify(token)
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid or expired token"


def test_verify_rejects_tampered_token(handler, user):
    token = handler.issue(user).token
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(AuthenticationError):
        handler.verify(tampered)


def test_verify_rejects_expired_token(handler):
    now = int(time.time())
    token = jwt.encode(
        {"sub": "u-1", "username": "x", "country": "USA", "role": "DELEGATE", "iat": now - 120, "exp": now - 60},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(AuthenticationError):
        handler.verify(token)
    assert handler.is_expired(token)


def test_verify_rejects_garbage(handler):
    with pytest.raises(AuthenticationError):
        handler.verify("not-a-token")


# ─────────────────────────── Unverified helpers ──────────────────────────────

def test_decode_reads_claims_without_verifying(handler, user):
    token = JWTHandler(secret_key="another-secret-key-0123456789abcdef").issue(user).token
    claims = handler.decode(token)
    assert claims["username"] == "usa_delegate"


def test_decode_returns_none_for_malformed_token(handler):
    assert handler.decode("garbage") is None
    assert handler.expiration("garbage") is None
    assert handler.token_id("garbage") is None
    assert handler.is_expired("garbage")


def test_fresh_token_is_not_expired(handler, user):
    issued = handler.issue(user)
    assert not handler.is_expired(issued.token)
    assert handler.token_id(issued.token) == issued.token_id


# ─────────────────────────── Passwords ───────────────────────────────────────

def test_password_hash_roundtrip(handler):
    hashed = handler.hash_password("USA2024!")
    assert hashed != "USA2024!"
    assert handler.verify_password("USA2024!", hashed)
    assert not handler.verify_password("wrong", hashed)


def test_verify_password_with_unknown_hash_format(handler):
    assert handler.verify_password("USA2024!", "plaintext-not-a-hash") is False
