# authcore/services/auth/issuance.py
from __future__ import annotations

from uuid import uuid4

from authcore.services._shared.base import BaseService
from authcore.services._shared.clock import Clock
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.errors import StorageUnavailableError
from authcore.services._shared.ports.session_repository import SessionRecord, SessionRepository
from authcore.services._shared.ports.token_codec import AccessGrant, RefreshGrant, TokenCodec
from authcore.services._shared.result import Outcome
from authcore.services.auth.dto import AuthTokenConfig, IssueIn, TokenPairOut


class SessionIssuer(BaseService):
    """
    Mint an access/refresh pair backed by a freshly persisted session record.

    The record is committed **first**; tokens are only signed once the
    repository accepted it, so no refresh token ever exists without a
    server-side record.
    """

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

    def issue(self, dto: IssueIn) -> Outcome[TokenPairOut]:
        """
        Start a session for an already-verified subject.

        :param dto: Subject, role and client audit context.
        :returns: Token pair, or ``STORAGE_UNAVAILABLE`` if the record could not
            be committed.
        """
        now = self.now_utc()
        secret = self.digester.new_secret()
        record = SessionRecord(
            id=uuid4().hex,
            user_id=dto.subject,
            credential_digest=self.digester.digest(secret),
            created_at=now,
            expires_at=now + self.cfg.refresh_ttl,
            device_info=dto.context.device_info,
            client_address=dto.context.client_address,
        )

        try:
            self.repository.create(record)
        except StorageUnavailableError as exc:
            return self.storage_failure(exc, event="auth.issue.storage_unavailable")

        access = self.codec.issue(
            AccessGrant(subject=dto.subject, role=dto.role), self.cfg.access_ttl
        )
        refresh = self.codec.issue(
            RefreshGrant(subject=dto.subject, secret=secret, role=dto.role), self.cfg.refresh_ttl
        )
        self.log.info(
            "auth.session.issued",
            extra={"event": "auth.session.issued", "user_id": dto.subject, "session_id": record.id},
        )
        return Outcome.success(
            TokenPairOut(
                access_token=access,
                refresh_token=refresh,
                expires_in=int(self.cfg.access_ttl.total_seconds()),
                session_id=record.id,
            )
        )
