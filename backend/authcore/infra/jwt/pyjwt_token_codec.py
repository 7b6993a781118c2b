# authcore/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt
from jwt.exceptions import (
    DecodeError,
    InvalidAlgorithmError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
    MissingRequiredClaimError,
)

from authcore.services._shared.clock import Clock, utc_now
from authcore.services._shared.errors import AuthErrorKind
from authcore.services._shared.ports import (
    AccessClaims,
    AccessGrant,
    Claims,
    Grant,
    RefreshClaims,
    TokenClass,
    TokenCodec,
)
from authcore.services._shared.result import Outcome

# Claim names owned by the codec; application claims may not shadow them.
TYPE_CLAIM = "type"
ROLE_CLAIM = "role"
SECRET_CLAIM = "rts"
RESERVED_CLAIMS = frozenset({"sub", "iat", "exp", "jti", "iss", TYPE_CLAIM, ROLE_CLAIM, SECRET_CLAIM})
REQUIRED_CLAIMS = ["sub", "iat", "exp", "jti", TYPE_CLAIM]


@dataclass(frozen=True, slots=True)
class SigningKey:
    """
    Key material for one token class.

    :param secret: HMAC secret, or the private key for asymmetric algorithms.
    :param algorithm: JWS algorithm (``HS256`` by default).
    :param public_key: Verification key for asymmetric algorithms.
    """

    secret: str | bytes
    algorithm: str = "HS256"
    public_key: str | bytes | None = None

    @property
    def verifying_key(self) -> str | bytes:
        return self.public_key if self.public_key is not None else self.secret


class PyJWTTokenCodec(TokenCodec):
    """
    JWS token codec on top of PyJWT with one key per token class.

    The class discriminator (``type``) is a signed claim and selects the
    verification key, so a refresh token can never pass as an access token (or
    vice versa) even if both keys used the same algorithm. All time checks run
    against the injected clock, never against the wall clock PyJWT would use.
    """

    def __init__(
        self,
        *,
        access_key: SigningKey,
        refresh_key: SigningKey,
        issuer: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        if access_key.verifying_key == refresh_key.verifying_key:
            raise ValueError("Access and refresh tokens must use distinct signing keys.")
        self._keys = {TokenClass.ACCESS: access_key, TokenClass.REFRESH: refresh_key}
        self._issuer = issuer
        self._clock = clock or utc_now

    # -------------------------- issue ---------------------------

    def issue(self, grant: Grant, ttl: timedelta) -> str:
        now = self._clock()
        payload: dict[str, Any] = {}
        if isinstance(grant, AccessGrant):
            clash = RESERVED_CLAIMS.intersection(grant.extra)
            if clash:
                raise ValueError(f"Application claims shadow reserved names: {sorted(clash)}")
            payload.update(grant.extra)
        else:
            payload[SECRET_CLAIM] = grant.secret
        if grant.role is not None:
            payload[ROLE_CLAIM] = grant.role

        payload.update(
            {
                "sub": grant.subject,
                TYPE_CLAIM: grant.token_class.value,
                "iat": int(now.timestamp()),
                "exp": int((now + ttl).timestamp()),
                "jti": uuid4().hex,
            }
        )
        if self._issuer:
            payload["iss"] = self._issuer

        key = self._keys[grant.token_class]
        return jwt.encode(payload, key.secret, algorithm=key.algorithm)

    # -------------------------- verify --------------------------

    def verify(self, token: str, *, expected: TokenClass) -> Outcome[Claims]:
        # Read the (unverified) class only to pick the key; nothing else is trusted yet.
        try:
            unverified = jwt.decode(token, options={"verify_signature": False})
            token_class = TokenClass(unverified.get(TYPE_CLAIM))
        except (DecodeError, ValueError, TypeError, AttributeError):
            return Outcome.failure(AuthErrorKind.MALFORMED)

        key = self._keys[token_class]
        required = REQUIRED_CLAIMS + (["iss"] if self._issuer else [])
        try:
            payload = jwt.decode(
                token,
                key.verifying_key,
                algorithms=[key.algorithm],
                issuer=self._issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": required,
                },
            )
        except (InvalidSignatureError, InvalidAlgorithmError, InvalidIssuerError):
            return Outcome.failure(AuthErrorKind.SIGNATURE_INVALID)
        except (MissingRequiredClaimError, DecodeError, InvalidTokenError):
            return Outcome.failure(AuthErrorKind.MALFORMED)

        if token_class is not expected:
            return Outcome.failure(AuthErrorKind.TOKEN_TYPE_MISMATCH)

        claims = self._to_claims(token_class, payload)
        if claims is None:
            return Outcome.failure(AuthErrorKind.MALFORMED)
        if self._clock() >= claims.expires_at:
            return Outcome.failure(AuthErrorKind.EXPIRED)
        return Outcome.success(claims)

    # ------------------------- helpers --------------------------

    @staticmethod
    def _to_claims(token_class: TokenClass, payload: dict[str, Any]) -> Claims | None:
        """Build the closed claims structure; ``None`` if a field has the wrong shape."""
        subject, jti = payload.get("sub"), payload.get("jti")
        iat, exp = payload.get("iat"), payload.get("exp")
        role = payload.get(ROLE_CLAIM)
        if not isinstance(subject, str) or not subject or not isinstance(jti, str):
            return None
        if not isinstance(iat, int | float) or not isinstance(exp, int | float):
            return None
        if role is not None and not isinstance(role, str):
            return None
        issued_at = datetime.fromtimestamp(iat, tz=UTC)
        expires_at = datetime.fromtimestamp(exp, tz=UTC)

        if token_class is TokenClass.REFRESH:
            secret = payload.get(SECRET_CLAIM)
            if not isinstance(secret, str) or not secret:
                return None
            return RefreshClaims(
                subject=subject,
                issued_at=issued_at,
                expires_at=expires_at,
                jti=jti,
                secret=secret,
                role=role,
            )
        extra = {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
        return AccessClaims(
            subject=subject,
            issued_at=issued_at,
            expires_at=expires_at,
            jti=jti,
            role=role,
            extra=extra,
        )
