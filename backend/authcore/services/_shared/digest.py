"""Keyed one-way digests of refresh-token secret material."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from collections.abc import Iterable

from authcore.services._shared.ports.session_repository import SessionRecord


class CredentialDigester:
    """
    HMAC-SHA256 digests for refresh secrets plus constant-time matching.

    Only the digest is persisted; the raw secret lives exclusively inside the
    signed refresh token held by the client.

    :param key: Server-side digest key (distinct from the signing keys).
    """

    SECRET_BYTES = 32

    def __init__(self, key: str | bytes) -> None:
        if not key:
            raise ValueError("Credential digest key must not be empty.")
        self._key = key.encode("utf-8") if isinstance(key, str) else key

    @classmethod
    def new_secret(cls) -> str:
        """Generate fresh random secret material for a refresh token."""
        return secrets.token_urlsafe(cls.SECRET_BYTES)

    def digest(self, secret: str) -> str:
        return hmac.new(self._key, secret.encode("utf-8"), hashlib.sha256).hexdigest()

    def matches(self, secret: str, credential_digest: str) -> bool:
        return hmac.compare_digest(self.digest(secret), credential_digest)

    def find_match(
        self, secret: str, candidates: Iterable[SessionRecord]
    ) -> SessionRecord | None:
        """
        Return the candidate whose digest matches ``secret``.

        Every candidate is compared (no early exit) so timing depends on the
        number of active sessions, not on the position of the match.
        """
        expected = self.digest(secret)
        match: SessionRecord | None = None
        for record in candidates:
            if hmac.compare_digest(expected, record.credential_digest) and match is None:
                match = record
        return match
