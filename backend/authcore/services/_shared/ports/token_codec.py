from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any, ClassVar, Protocol

from authcore.services._shared.result import Outcome


class TokenClass(StrEnum):
    """Bearer token classes; each one is signed with its own key."""

    ACCESS = "access"
    REFRESH = "refresh"


# ---------------------------- Issuance input ------------------------------ #


@dataclass(frozen=True, slots=True)
class AccessGrant:
    """
    Claims to embed in a new access token.

    :ivar subject: User identifier.
    :ivar role: Optional role consumed by downstream authorization.
    :ivar extra: Additional application claims (must not shadow reserved names).
    """

    token_class: ClassVar[TokenClass] = TokenClass.ACCESS

    subject: str
    role: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RefreshGrant:
    """
    Claims to embed in a new refresh token.

    :ivar subject: User identifier.
    :ivar secret: Random secret material whose digest is persisted.
    :ivar role: Role carried across rotations to re-mint access tokens.
    """

    token_class: ClassVar[TokenClass] = TokenClass.REFRESH

    subject: str
    secret: str
    role: str | None = None


# ------------------------------ Verified claims --------------------------- #


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Verified access-token claims; the sole identity source for a request."""

    token_class: ClassVar[TokenClass] = TokenClass.ACCESS

    subject: str
    issued_at: datetime
    expires_at: datetime
    jti: str
    role: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """Verified refresh-token claims."""

    token_class: ClassVar[TokenClass] = TokenClass.REFRESH

    subject: str
    issued_at: datetime
    expires_at: datetime
    jti: str
    secret: str
    role: str | None = None


Grant = AccessGrant | RefreshGrant
Claims = AccessClaims | RefreshClaims


class TokenCodec(Protocol):
    """
    Port for stateless signing and verification of bearer tokens.

    Implementations perform no network or storage I/O.
    """

    def issue(self, grant: Grant, ttl: timedelta) -> str:
        """Sign ``grant`` with ``issued_at = now`` and ``expires_at = now + ttl``."""
        ...

    def verify(self, token: str, *, expected: TokenClass) -> Outcome[Claims]:
        """
        Verify ``token`` and assert its class.

        Failure kinds: ``MALFORMED``, ``SIGNATURE_INVALID``,
        ``TOKEN_TYPE_MISMATCH``, ``EXPIRED``.
        """
        ...
