# tests/unit/infra/test_pyjwt_token_codec.py
"""
Unit tests for PyJWTTokenCodec.

Covered:
- issue/verify for both token classes (claims survive, secrets stay in refresh tokens)
- class isolation (separate keys + signed ``type`` claim)
- expiry against the injected clock
- tamper, wrong key, wrong issuer, ``alg=none`` and garbage input
"""

from __future__ import annotations

import base64
import json
from datetime import timedelta

import jwt
import pytest
from authcore.infra.jwt import PyJWTTokenCodec, SigningKey
from authcore.services._shared.errors import AuthErrorKind
from authcore.services._shared.ports import (
    AccessClaims,
    AccessGrant,
    RefreshClaims,
    RefreshGrant,
    TokenClass,
)

from tests.helpers.settings import ACCESS_SECRET, REFRESH_SECRET

TTL = timedelta(minutes=15)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _payload(token: str) -> dict:
    return jwt.decode(token, options={"verify_signature": False})


# ------------------------------ round trip -------------------------------- #


def test_access_token_verifies_with_claims(codec, clock):
    token = codec.issue(AccessGrant(subject="u1", role="admin", extra={"tenant": "t9"}), TTL)

    outcome = codec.verify(token, expected=TokenClass.ACCESS)

    assert outcome.ok
    claims = outcome.value
    assert isinstance(claims, AccessClaims)
    assert claims.subject == "u1"
    assert claims.role == "admin"
    assert claims.extra == {"tenant": "t9"}
    assert claims.issued_at == clock.now
    assert claims.expires_at == clock.now + TTL
    assert claims.jti


def test_refresh_token_carries_secret(codec):
    token = codec.issue(RefreshGrant(subject="u1", secret="s3cr3t", role="member"), TTL)

    outcome = codec.verify(token, expected=TokenClass.REFRESH)

    assert outcome.ok
    assert isinstance(outcome.value, RefreshClaims)
    assert outcome.value.secret == "s3cr3t"
    assert outcome.value.role == "member"


def test_each_token_gets_unique_jti(codec):
    a = codec.issue(AccessGrant(subject="u1"), TTL)
    b = codec.issue(AccessGrant(subject="u1"), TTL)
    assert a != b
    assert _payload(a)["jti"] != _payload(b)["jti"]


def test_issuer_claim_is_stamped(codec):
    token = codec.issue(AccessGrant(subject="u1"), TTL)
    assert _payload(token)["iss"] == "authcore-tests"


def test_extra_claims_cannot_shadow_reserved_names(codec):
    with pytest.raises(ValueError, match="reserved"):
        codec.issue(AccessGrant(subject="u1", extra={"type": "refresh"}), TTL)


# ---------------------------- class isolation ----------------------------- #


def test_refresh_token_rejected_where_access_expected(codec):
    token = codec.issue(RefreshGrant(subject="u1", secret="s"), TTL)
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.TOKEN_TYPE_MISMATCH


def test_access_token_rejected_where_refresh_expected(codec):
    token = codec.issue(AccessGrant(subject="u1"), TTL)
    assert codec.verify(token, expected=TokenClass.REFRESH).error is AuthErrorKind.TOKEN_TYPE_MISMATCH


def test_relabelled_token_fails_signature(codec):
    """A refresh token re-signed as 'access' with the refresh key does not verify."""
    token = codec.issue(RefreshGrant(subject="u1", secret="s"), TTL)
    payload = _payload(token)
    payload["type"] = "access"
    forged = jwt.encode(payload, REFRESH_SECRET, algorithm="HS256")

    assert codec.verify(forged, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


def test_identical_keys_are_refused():
    with pytest.raises(ValueError, match="distinct"):
        PyJWTTokenCodec(access_key=SigningKey("same-key"), refresh_key=SigningKey("same-key"))


# -------------------------------- expiry ---------------------------------- #


def test_token_valid_until_just_before_expiry(codec, clock):
    token = codec.issue(AccessGrant(subject="u1"), TTL)
    clock.advance(minutes=14, seconds=59)
    assert codec.verify(token, expected=TokenClass.ACCESS).ok


def test_token_expired_at_exact_expiry(codec, clock):
    token = codec.issue(AccessGrant(subject="u1"), TTL)
    clock.advance(minutes=15)
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.EXPIRED


def test_expired_check_runs_after_signature(codec, clock):
    """A forged, expired token is reported as a signature problem, not expiry."""
    token = codec.issue(AccessGrant(subject="u1"), TTL)
    forged = jwt.encode(_payload(token), "attacker-key-0123456789abcdef0123", algorithm="HS256")
    clock.advance(days=1)
    assert codec.verify(forged, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


# ------------------------------ bad input --------------------------------- #


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "....", "ey.ey.ey"])
def test_garbage_is_malformed(codec, garbage):
    assert codec.verify(garbage, expected=TokenClass.ACCESS).error is AuthErrorKind.MALFORMED


def test_tampered_payload_fails_signature(codec):
    token = codec.issue(AccessGrant(subject="u1", role="member"), TTL)
    header, _, signature = token.split(".")
    payload = _payload(token)
    payload["role"] = "admin"
    tampered = ".".join([header, _b64(payload), signature])

    assert codec.verify(tampered, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


def test_foreign_key_fails_signature(codec, clock):
    other = PyJWTTokenCodec(
        access_key=SigningKey("other-access-key-0123456789abcdef"),
        refresh_key=SigningKey("other-refresh-key-0123456789abcdef"),
        issuer="authcore-tests",
        clock=clock,
    )
    token = other.issue(AccessGrant(subject="u1"), TTL)
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


def test_wrong_issuer_is_rejected(codec, clock):
    other = PyJWTTokenCodec(
        access_key=SigningKey(ACCESS_SECRET),
        refresh_key=SigningKey(REFRESH_SECRET),
        issuer="someone-else",
        clock=clock,
    )
    token = other.issue(AccessGrant(subject="u1"), TTL)
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


def test_alg_none_is_rejected(codec, clock):
    now = int(clock.now.timestamp())
    claims = {
        "sub": "u1",
        "type": "access",
        "iat": now,
        "exp": now + 60,
        "jti": "x",
        "iss": "authcore-tests",
    }
    unsigned = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(claims)}."
    assert codec.verify(unsigned, expected=TokenClass.ACCESS).error is AuthErrorKind.SIGNATURE_INVALID


def test_unknown_type_claim_is_malformed(codec, clock):
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {"sub": "u1", "type": "id", "iat": now, "exp": now + 60, "jti": "x"},
        ACCESS_SECRET,
        algorithm="HS256",
    )
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.MALFORMED


def test_missing_required_claim_is_malformed(codec, clock):
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {"sub": "u1", "type": "access", "iat": now, "exp": now + 60, "iss": "authcore-tests"},
        ACCESS_SECRET,
        algorithm="HS256",
    )
    assert codec.verify(token, expected=TokenClass.ACCESS).error is AuthErrorKind.MALFORMED


def test_refresh_token_without_secret_is_malformed(codec, clock):
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {
            "sub": "u1",
            "type": "refresh",
            "iat": now,
            "exp": now + 60,
            "jti": "x",
            "iss": "authcore-tests",
        },
        REFRESH_SECRET,
        algorithm="HS256",
    )
    assert codec.verify(token, expected=TokenClass.REFRESH).error is AuthErrorKind.MALFORMED
