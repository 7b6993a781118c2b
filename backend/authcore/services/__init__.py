"""Service layer public API.

Re-exports
----------
- Result primitives (from ``authcore.services._shared``)
    * :class:`Outcome`
    * :class:`AuthErrorKind`

- Authentication services (from ``authcore.services.auth``)
    * :class:`AuthService` and its components
"""

from __future__ import annotations

from authcore.services._shared.errors import AuthErrorKind, AuthFailure, ServiceError
from authcore.services._shared.result import Outcome
from authcore.services.auth import (
    AuthGuard,
    AuthService,
    AuthTokenConfig,
    RevocationService,
    RotationEngine,
    SessionIssuer,
)

__all__ = [
    "AuthErrorKind",
    "AuthFailure",
    "AuthGuard",
    "AuthService",
    "AuthTokenConfig",
    "Outcome",
    "RevocationService",
    "RotationEngine",
    "ServiceError",
    "SessionIssuer",
]
