# authcore/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from authcore.services._shared.ports.token_codec import AccessClaims

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ClientContext:
    """
    Audit details about the client presenting a credential.

    :param device_info: Free-form device description (e.g. User-Agent).
    :type device_info: str | None
    :param client_address: Client network address.
    :type client_address: str | None
    """

    device_info: str | None = None
    client_address: str | None = None


@dataclass(frozen=True, slots=True)
class IssueIn:
    """
    Input DTO for starting a session after an external credential check.

    :param subject: Verified user identifier.
    :type subject: str
    :param role: Optional role embedded in access tokens.
    :type role: str | None
    :param context: Client audit details stored with the session record.
    :type context: ClientContext
    """

    subject: str
    role: str | None = None
    context: ClientContext = field(default_factory=ClientContext)


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh token.
    :type refresh_token: str
    :param context: Client audit details for the rotated session record.
    :type context: ClientContext
    """

    refresh_token: str
    context: ClientContext = field(default_factory=ClientContext)


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param user_id: Authenticated user identifier.
    :type user_id: str
    :param refresh_token: Specific refresh token to revoke; ``None`` revokes all.
    :type refresh_token: str | None
    """

    user_id: str
    refresh_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access token.
    :param refresh_token: Encoded refresh token.
    :param expires_in: Access token lifetime in seconds.
    :param session_id: Identifier of the persisted session record.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    session_id: str
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Request-scoped identity derived purely from a verified access token.

    :param subject: User identifier.
    :param role: Role claim, if any.
    :param raw_claims: The full verified claims for downstream policy checks.
    """

    subject: str
    role: str | None
    raw_claims: AccessClaims


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission and logout policy configuration.

    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token (and session record) lifetime.
    :type refresh_ttl: timedelta
    :param logout_unmatched_is_error: Report ``CREDENTIAL_NOT_FOUND`` instead of a
        silent no-op when logout receives a token matching no active session.
    :type logout_unmatched_is_error: bool
    """

    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    logout_unmatched_is_error: bool = False

    def __post_init__(self) -> None:
        if self.access_ttl <= timedelta(0) or self.refresh_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from a Flask-style config mapping (``*_TTL_SECONDS`` keys)."""
        return cls(
            access_ttl=timedelta(seconds=int(cfg.get("ACCESS_TOKEN_TTL_SECONDS", 900))),
            refresh_ttl=timedelta(seconds=int(cfg.get("REFRESH_TOKEN_TTL_SECONDS", 604800))),
            logout_unmatched_is_error=bool(cfg.get("LOGOUT_UNMATCHED_IS_ERROR", False)),
        )
