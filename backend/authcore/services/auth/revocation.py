# authcore/services/auth/revocation.py
from __future__ import annotations

from datetime import timedelta
from typing import cast

from authcore.services._shared.base import BaseService
from authcore.services._shared.clock import Clock
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.errors import AuthErrorKind, StorageUnavailableError
from authcore.services._shared.ports.session_repository import SessionRecord, SessionRepository
from authcore.services._shared.ports.token_codec import RefreshClaims, TokenClass, TokenCodec
from authcore.services._shared.result import Outcome
from authcore.services.auth.dto import AuthTokenConfig, LogoutIn


class RevocationService(BaseService):
    """Logout of one device, "sign out everywhere", and the active-session view."""

    def __init__(
        self,
        *,
        codec: TokenCodec,
        repository: SessionRepository,
        digester: CredentialDigester,
        token_cfg: AuthTokenConfig,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(clock=clock)
        self.codec = codec
        self.repository = repository
        self.digester = digester
        self.cfg = token_cfg

    def logout(self, dto: LogoutIn) -> Outcome[int]:
        """
        Revoke the session bound to ``dto.refresh_token``, or all sessions.

        A token that fails verification or matches no active session of
        ``dto.user_id`` is a silent no-op (``0`` revoked) unless the
        ``logout_unmatched_is_error`` policy is set. The result never tells the
        caller *why* a token did not match.

        :returns: Number of records revoked by this call.
        """
        if dto.refresh_token is None:
            return self.logout_everywhere(dto.user_id)

        now = self.now_utc()
        match: SessionRecord | None = None
        try:
            verified = self.codec.verify(dto.refresh_token, expected=TokenClass.REFRESH)
            if verified.ok:
                claims = cast(RefreshClaims, verified.value)
                candidates = self.repository.list_active(dto.user_id, now=now)
                match = self.digester.find_match(claims.secret, candidates)

            if match is None:
                self.log.info(
                    "auth.logout.unmatched",
                    extra={"event": "auth.logout.unmatched", "user_id": dto.user_id, "revoked": 0},
                )
                if self.cfg.logout_unmatched_is_error:
                    return Outcome.failure(AuthErrorKind.CREDENTIAL_NOT_FOUND)
                return Outcome.success(0)

            revoked = self.repository.revoke(match.id, now=now)
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="auth.logout.storage_unavailable")

        count = 1 if revoked else 0
        self.log.info(
            "auth.logout.session",
            extra={
                "event": "auth.logout.session",
                "user_id": dto.user_id,
                "session_id": match.id,
                "revoked": count,
            },
        )
        return Outcome.success(count)

    def logout_everywhere(self, user_id: str) -> Outcome[int]:
        """Revoke every session of ``user_id``."""
        try:
            count = self.repository.revoke_all(user_id, now=self.now_utc())
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="auth.logout.storage_unavailable")
        self.log.info(
            "auth.logout.all",
            extra={"event": "auth.logout.all", "user_id": user_id, "revoked": count},
        )
        return Outcome.success(count)

    def active_sessions(self, user_id: str) -> Outcome[list[SessionRecord]]:
        """Audit view of the user's active sessions, oldest first."""
        try:
            return Outcome.success(self.repository.list_active(user_id, now=self.now_utc()))
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="auth.sessions.storage_unavailable")

    def prune(self, older_than: timedelta) -> Outcome[int]:
        """Physically delete records that expired or were revoked more than ``older_than`` ago."""
        cutoff = self.now_utc() - older_than
        try:
            removed = self.repository.prune(before=cutoff)
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="sessions.prune.storage_unavailable")
        self.log.info("sessions.pruned", extra={"event": "sessions.pruned", "removed": removed})
        return Outcome.success(removed)
