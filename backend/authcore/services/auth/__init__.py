"""Session-authentication services: issuance, rotation, verification, revocation."""

from __future__ import annotations

from .dto import (
    AuthTokenConfig,
    ClientContext,
    Identity,
    IssueIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from .guard import AuthGuard
from .issuance import SessionIssuer
from .revocation import RevocationService
from .rotation import RotationEngine
from .service import AuthService

__all__ = [
    "AuthGuard",
    "AuthService",
    "AuthTokenConfig",
    "ClientContext",
    "Identity",
    "IssueIn",
    "LogoutIn",
    "RefreshIn",
    "RevocationService",
    "RotationEngine",
    "SessionIssuer",
    "TokenPairOut",
]
