"""In-memory credential check for the login tests."""

from __future__ import annotations

import hmac

from authcore.services._shared.ports import CredentialVerifier, VerifiedPrincipal


class StaticCredentialVerifier(CredentialVerifier):
    """Fixed username/password table."""

    def __init__(self, accounts: dict[str, tuple[str, VerifiedPrincipal]]) -> None:
        self._accounts = dict(accounts)

    def verify(self, username: str, password: str) -> VerifiedPrincipal | None:
        entry = self._accounts.get(username)
        if entry is None or not hmac.compare_digest(entry[0].encode(), password.encode()):
            return None
        return entry[1]
