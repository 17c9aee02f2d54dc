"""Tests for JWT issue/verify and bcrypt helpers."""

import time

import jwt
import pytest

from pipboy_server.auth.identity import Identity
from pipboy_server.auth.passwords import hash_password, verify_password
from pipboy_server.auth.tokens import ISSUER, decode_token, issue_token
from pipboy_server.config import AuthSettings
from pipboy_server.errors import Unauthenticated
from tests.constants import TEST_JWT_SECRET

SETTINGS = AuthSettings(jwt_secret=TEST_JWT_SECRET, token_ttl_minutes=5, bcrypt_rounds=4)
NATE = Identity(account_id=7, username="nate")


def _encode(claims: dict, secret: str = TEST_JWT_SECRET) -> str:
    return jwt.encode(claims, secret, algorithm="HS256")


def _claims(**overrides) -> dict:
    now = int(time.time())
    claims = {
        "iss": ISSUER,
        "sub": "7",
        "username": "nate",
        "is_admin": False,
        "iat": now,
        "exp": now + 60,
    }
    claims.update(overrides)
    return claims


@pytest.mark.unit
def test_issue_and_decode():
    token, expires_in = issue_token(NATE, SETTINGS)

    assert expires_in == 300
    assert decode_token(token, SETTINGS) == NATE


@pytest.mark.unit
def test_admin_flag_survives_round_trip():
    overseer = Identity(account_id=1, username="overseer", is_admin=True)
    token, _ = issue_token(overseer, SETTINGS)

    assert decode_token(token, SETTINGS).is_admin is True


@pytest.mark.unit
def test_wrong_secret_is_rejected():
    token = _encode(_claims(), secret="someone-elses-secret")

    with pytest.raises(Unauthenticated, match="Invalid token"):
        decode_token(token, SETTINGS)


@pytest.mark.unit
def test_tampered_token_is_rejected():
    token, _ = issue_token(NATE, SETTINGS)
    header, payload, signature = token.split(".")
    tampered = ".".join((header, payload, signature[::-1]))

    with pytest.raises(Unauthenticated):
        decode_token(tampered, SETTINGS)


@pytest.mark.unit
def test_expired_token_is_rejected():
    now = int(time.time())
    token = _encode(_claims(iat=now - 120, exp=now - 60))

    with pytest.raises(Unauthenticated, match="Token expired"):
        decode_token(token, SETTINGS)


@pytest.mark.unit
def test_wrong_issuer_is_rejected():
    with pytest.raises(Unauthenticated):
        decode_token(_encode(_claims(iss="vault-tec")), SETTINGS)


@pytest.mark.unit
def test_missing_subject_is_rejected():
    claims = _claims()
    del claims["sub"]

    with pytest.raises(Unauthenticated):
        decode_token(_encode(claims), SETTINGS)


@pytest.mark.unit
def test_non_numeric_subject_is_rejected():
    with pytest.raises(Unauthenticated, match="Invalid token subject"):
        decode_token(_encode(_claims(sub="nate")), SETTINGS)


@pytest.mark.unit
def test_missing_username_is_rejected():
    with pytest.raises(Unauthenticated, match="Invalid token claims"):
        decode_token(_encode(_claims(username="")), SETTINGS)


@pytest.mark.unit
def test_garbage_is_rejected():
    with pytest.raises(Unauthenticated):
        decode_token("not-a-jwt", SETTINGS)


# ============================================================================
# PASSWORDS
# ============================================================================


@pytest.mark.unit
def test_hash_and_verify_password():
    password_hash = hash_password("war never changes", rounds=4)

    assert password_hash != "war never changes"
    assert verify_password("war never changes", password_hash)
    assert not verify_password("war always changes", password_hash)


@pytest.mark.unit
def test_hashes_are_salted():
    assert hash_password("same", rounds=4) != hash_password("same", rounds=4)


@pytest.mark.unit
def test_missing_or_malformed_hash_never_verifies():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "not-a-bcrypt-hash")
