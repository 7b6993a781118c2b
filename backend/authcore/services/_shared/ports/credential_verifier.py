from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class VerifiedPrincipal:
    """Identity confirmed by a credential check at login time."""

    subject: str
    role: str | None = None


class CredentialVerifier(Protocol):
    """
    Port for the login-time credential check (password hashing, user lookup).

    Owned by the embedding application; the core only consumes its verdict.
    """

    def verify(self, username: str, password: str) -> VerifiedPrincipal | None: ...
