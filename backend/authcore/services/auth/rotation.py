# authcore/services/auth/rotation.py
from __future__ import annotations

from datetime import datetime
from typing import cast

from authcore.services._shared.base import BaseService
from authcore.services._shared.clock import Clock
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.errors import AuthErrorKind, StorageUnavailableError
from authcore.services._shared.ports.session_repository import SessionRepository
from authcore.services._shared.ports.token_codec import RefreshClaims, TokenClass, TokenCodec
from authcore.services._shared.result import Outcome
from authcore.services.auth.dto import ClientContext, IssueIn, RefreshIn, TokenPairOut
from authcore.services.auth.issuance import SessionIssuer


class RotationEngine(BaseService):
    """
    Refresh-token exchange with single-use rotation and reuse detection.

    Flow: ``Presented → Verified → Matched → Consumed → Reissued``.

    Security
    --------
    - Cryptographically invalid input never reaches the repository.
    - Any verified token that matches no active record, or loses the consume
      race, is treated as theft: **every** session of the subject is revoked.
    - The consume step is the only synchronisation point; a crash after it
      leaves the old record revoked and the client must sign in again.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        repository: SessionRepository,
        digester: CredentialDigester,
        issuer: SessionIssuer,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(clock=clock)
        self.codec = codec
        self.repository = repository
        self.digester = digester
        self.issuer = issuer

    def refresh(self, dto: RefreshIn) -> Outcome[TokenPairOut]:
        """
        Rotate a refresh token and emit a new token pair.

        :param dto: Presented refresh token plus client audit context.
        :returns: New pair, or a failure kind (``MALFORMED``, ``SIGNATURE_INVALID``,
            ``EXPIRED``, ``TOKEN_TYPE_MISMATCH``, ``REUSE_DETECTED``,
            ``STORAGE_UNAVAILABLE``).
        """
        # 1) Verify: no storage access for invalid input
        verified = self.codec.verify(dto.refresh_token, expected=TokenClass.REFRESH)
        if not verified.ok:
            self.log.info(
                "auth.refresh.rejected",
                extra={"event": "auth.refresh.rejected", "reason": verified.error},
            )
            return Outcome.failure(cast(AuthErrorKind, verified.error))
        claims = cast(RefreshClaims, verified.value)
        now = self.now_utc()

        try:
            # 2) Candidate lookup + 3) constant-time match
            candidates = self.repository.list_active(claims.subject, now=now)
            match = self.digester.find_match(claims.secret, candidates)

            # 4) No active record: replay of a spent token, or a forged/pruned one
            if match is None:
                return self._reuse_detected(claims.subject, now, reason="no_active_match")

            # 5) Consume exactly once
            if not self.repository.try_consume(match.id, now=now):
                return self._reuse_detected(claims.subject, now, reason="consume_race")
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="auth.refresh.storage_unavailable")

        self.log.info(
            "auth.refresh.rotated",
            extra={"event": "auth.refresh.rotated", "user_id": claims.subject, "session_id": match.id},
        )

        # 6) Reissue; the issuer commits the new record before signing
        context = ClientContext(
            device_info=dto.context.device_info or match.device_info,
            client_address=dto.context.client_address or match.client_address,
        )
        return self.issuer.issue(IssueIn(subject=claims.subject, role=claims.role, context=context))

    def _reuse_detected(self, subject: str, now: datetime, *, reason: str) -> Outcome[TokenPairOut]:
        """Revoke every session of ``subject`` and report ``REUSE_DETECTED``.

        If the revocation itself cannot be stored the outcome is
        ``STORAGE_UNAVAILABLE``: the sessions are still live and the failure
        must surface as an outage, not as a handled rejection.
        """
        try:
            revoked = self.repository.revoke_all(subject, now=now)
        except StorageUnavailableError as exc:
            self.log.error(
                "auth.refresh.revoke_all_failed",
                extra={
                    "event": "auth.refresh.revoke_all_failed",
                    "user_id": subject,
                    "reason": reason,
                    "operation": exc.operation,
                },
                exc_info=exc,
            )
            return Outcome.failure(AuthErrorKind.STORAGE_UNAVAILABLE)
        self.log.warning(
            "auth.refresh.reuse_detected",
            extra={
                "event": "auth.refresh.reuse_detected",
                "user_id": subject,
                "reason": reason,
                "revoked": revoked,
            },
        )
        return Outcome.failure(AuthErrorKind.REUSE_DETECTED)
