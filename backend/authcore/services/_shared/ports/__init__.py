"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
token signing, session persistence and login-time credential checks.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` plus the tagged grant/claims structures per
    token class.

- :mod:`session_repository`:
    Defines :class:`~.SessionRepository` and :class:`~.SessionRecord`, plus
    :class:`~.InMemorySessionRepository` for tests.

- :mod:`credential_verifier`:
    Defines :class:`~.CredentialVerifier`, the external login collaborator.

Design Notes
------------
Concrete adapters (PyJWT, SQLAlchemy, Redis) implement these interfaces under
``authcore.infra``.
"""

from __future__ import annotations

from .credential_verifier import CredentialVerifier, VerifiedPrincipal
from .session_repository import InMemorySessionRepository, SessionRecord, SessionRepository
from .token_codec import (
    AccessClaims,
    AccessGrant,
    Claims,
    Grant,
    RefreshClaims,
    RefreshGrant,
    TokenClass,
    TokenCodec,
)

__all__ = [
    "AccessClaims",
    "AccessGrant",
    "Claims",
    "CredentialVerifier",
    "Grant",
    "InMemorySessionRepository",
    "RefreshClaims",
    "RefreshGrant",
    "SessionRecord",
    "SessionRepository",
    "TokenClass",
    "TokenCodec",
    "VerifiedPrincipal",
]
