"""
Domain-level error kinds and exceptions used within the service layer.

These types are **framework-agnostic** and never import Flask or HTTP code.
Core operations report failures as :class:`AuthErrorKind` values carried by an
:class:`~authcore.services._shared.result.Outcome`; exceptions are reserved for
infrastructure faults (:class:`StorageUnavailableError`) and for callers that
explicitly ask to unwrap an outcome (:class:`AuthFailure`).

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AuthErrorKind(StrEnum):
    """Closed taxonomy of authentication failures."""

    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    TOKEN_TYPE_MISMATCH = "token_type_mismatch"
    REUSE_DETECTED = "reuse_detected"
    CREDENTIAL_NOT_FOUND = "credential_not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` instances.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class AuthFailure(ServiceError):
    """
    Raised by :meth:`Outcome.unwrap` when the outcome carries an error kind.

    :param kind: Failure kind reported by the core operation.
    :type kind: AuthErrorKind
    """

    kind: AuthErrorKind

    def __str__(self) -> str:  # pragma: no cover
        return f"Authentication failed: {self.kind.value}"


@dataclass(slots=True)
class StorageUnavailableError(ServiceError):
    """
    Raised by repository adapters when the backing store cannot be reached
    or rejects a write.

    :param operation: Repository operation that failed (e.g. ``"try_consume"``).
    :type operation: str
    """

    operation: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Session storage unavailable during {self.operation}"
