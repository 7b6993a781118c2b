# authcore/services/auth/service.py
from __future__ import annotations

from datetime import timedelta

from authcore.services._shared.clock import Clock
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.ports.session_repository import SessionRecord, SessionRepository
from authcore.services._shared.ports.token_codec import TokenCodec
from authcore.services._shared.result import Outcome
from authcore.services.auth.dto import (
    AuthTokenConfig,
    Identity,
    IssueIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from authcore.services.auth.guard import AuthGuard
from authcore.services.auth.issuance import SessionIssuer
from authcore.services.auth.revocation import RevocationService
from authcore.services.auth.rotation import RotationEngine


class AuthService:
    """
    Session-authentication lifecycle facade (issue / refresh / verify / logout).

    Wires a single :class:`TokenCodec`, :class:`SessionRepository` and
    :class:`CredentialDigester` into the issuer, rotation engine, guard and
    revocation service so they share one configuration and one clock.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        repository: SessionRepository,
        digester: CredentialDigester,
        token_cfg: AuthTokenConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param codec: Adapter for signing/verifying bearer tokens.
        :param repository: Durable session credential store.
        :param digester: Keyed digest for refresh secrets.
        :param token_cfg: Lifetimes and logout policy.
        :param clock: Shared time source (must match the codec's clock).
        """
        self.cfg = token_cfg or AuthTokenConfig()
        self.repository = repository
        self.issuer = SessionIssuer(
            codec=codec, repository=repository, digester=digester, token_cfg=self.cfg, clock=clock
        )
        self.rotation = RotationEngine(
            codec=codec, repository=repository, digester=digester, issuer=self.issuer, clock=clock
        )
        self.guard = AuthGuard(codec=codec)
        self.revocation = RevocationService(
            codec=codec, repository=repository, digester=digester, token_cfg=self.cfg, clock=clock
        )

    def issue(self, dto: IssueIn) -> Outcome[TokenPairOut]:
        return self.issuer.issue(dto)

    def refresh(self, dto: RefreshIn) -> Outcome[TokenPairOut]:
        return self.rotation.refresh(dto)

    def authenticate(self, token: str) -> Outcome[Identity]:
        return self.guard.authenticate(token)

    def logout(self, dto: LogoutIn) -> Outcome[int]:
        return self.revocation.logout(dto)

    def logout_everywhere(self, user_id: str) -> Outcome[int]:
        return self.revocation.logout_everywhere(user_id)

    def active_sessions(self, user_id: str) -> Outcome[list[SessionRecord]]:
        return self.revocation.active_sessions(user_id)

    def prune(self, older_than: timedelta) -> Outcome[int]:
        return self.revocation.prune(older_than)
