# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from authcore.services._shared.errors import AuthErrorKind, AuthFailure, StorageUnavailableError
from authcore.services._shared.ports import AccessGrant, RefreshGrant, TokenClass
from authcore.services._shared.result import Outcome
from authcore.services.auth import (
    AuthService,
    AuthTokenConfig,
    ClientContext,
    IssueIn,
    LogoutIn,
    RefreshIn,
)


def _login(service, subject="u1", **ctx):
    return service.issue(IssueIn(subject=subject, role="member", context=ClientContext(**ctx))).unwrap()


# -------------------------------- Outcome --------------------------------- #


def test_outcome_unwrap_raises_with_kind():
    with pytest.raises(AuthFailure) as excinfo:
        Outcome.failure(AuthErrorKind.EXPIRED).unwrap()
    assert excinfo.value.kind is AuthErrorKind.EXPIRED


def test_outcome_success_unwraps_value():
    outcome = Outcome.success(3)
    assert outcome.ok
    assert outcome.unwrap() == 3


# ------------------------------- issuance --------------------------------- #


def test_issue_persists_record_before_returning_pair(service, memory_repo, digester, codec, clock):
    pair = _login(service, device_info="curl/8", client_address="192.0.2.1")

    record = memory_repo.get(pair.session_id)
    assert record is not None
    assert record.user_id == "u1"
    assert record.created_at == clock.now
    assert record.expires_at == clock.now + timedelta(days=7)
    assert record.revoked_at is None
    assert (record.device_info, record.client_address) == ("curl/8", "192.0.2.1")

    claims = codec.verify(pair.refresh_token, expected=TokenClass.REFRESH).unwrap()
    assert digester.matches(claims.secret, record.credential_digest)
    assert claims.secret not in record.credential_digest


def test_issue_reports_access_lifetime(service):
    pair = _login(service)
    assert pair.expires_in == 900
    assert pair.token_type == "bearer"


def test_issue_fails_closed_when_storage_is_down(service, memory_repo, monkeypatch):
    def boom(record):
        raise StorageUnavailableError("create")

    monkeypatch.setattr(memory_repo, "create", boom)

    outcome = service.issue(IssueIn(subject="u1"))

    assert outcome.error is AuthErrorKind.STORAGE_UNAVAILABLE
    assert outcome.value is None


def test_sessions_are_independent_per_device(service, memory_repo, clock):
    a = _login(service)
    clock.advance(seconds=1)
    b = _login(service)
    ids = [r.id for r in memory_repo.list_active("u1", now=clock.now)]
    assert ids == [a.session_id, b.session_id]


def test_token_config_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        AuthTokenConfig(access_ttl=timedelta(0))


def test_token_config_from_mapping():
    cfg = AuthTokenConfig.from_mapping(
        {
            "ACCESS_TOKEN_TTL_SECONDS": 60,
            "REFRESH_TOKEN_TTL_SECONDS": 3600,
            "LOGOUT_UNMATCHED_IS_ERROR": True,
        }
    )
    assert cfg.access_ttl == timedelta(minutes=1)
    assert cfg.refresh_ttl == timedelta(hours=1)
    assert cfg.logout_unmatched_is_error is True


# --------------------------------- guard ---------------------------------- #


class _ExplodingRepository:
    def __getattr__(self, name):
        raise AssertionError(f"repository.{name} must not be called")


def test_guard_never_consults_storage(codec, digester, clock):
    service = AuthService(
        codec=codec, repository=_ExplodingRepository(), digester=digester, clock=clock
    )
    token = codec.issue(AccessGrant(subject="u9", role="admin", extra={"org": "o1"}), timedelta(minutes=5))

    identity = service.authenticate(token).unwrap()

    assert identity.subject == "u9"
    assert identity.role == "admin"
    assert identity.raw_claims.extra == {"org": "o1"}


def test_guard_reports_expiry_distinctly(service, clock):
    pair = _login(service)
    clock.advance(minutes=16)
    assert service.authenticate(pair.access_token).error is AuthErrorKind.EXPIRED


def test_guard_rejects_refresh_token(service):
    pair = _login(service)
    assert service.authenticate(pair.refresh_token).error is AuthErrorKind.TOKEN_TYPE_MISMATCH


def test_access_token_survives_logout_until_expiry(service, clock):
    """Stateless access tokens: revocation only stops the next refresh."""
    pair = _login(service)
    service.logout_everywhere("u1").unwrap()
    assert service.authenticate(pair.access_token).ok
    clock.advance(minutes=15)
    assert service.authenticate(pair.access_token).error is AuthErrorKind.EXPIRED


# ------------------------------- revocation ------------------------------- #


def test_logout_revokes_only_the_presented_session(service, memory_repo, clock):
    phone = _login(service)
    laptop = _login(service)

    revoked = service.logout(LogoutIn(user_id="u1", refresh_token=phone.refresh_token)).unwrap()

    assert revoked == 1
    assert [r.id for r in memory_repo.list_active("u1", now=clock.now)] == [laptop.session_id]
    assert service.refresh(RefreshIn(refresh_token=laptop.refresh_token)).ok


def test_logout_is_idempotent(service):
    pair = _login(service)
    dto = LogoutIn(user_id="u1", refresh_token=pair.refresh_token)

    assert service.logout(dto).unwrap() == 1
    assert service.logout(dto).unwrap() == 0


def test_logout_with_garbage_token_is_noop(service, memory_repo, clock):
    _login(service)
    assert service.logout(LogoutIn(user_id="u1", refresh_token="garbage")).unwrap() == 0
    assert len(memory_repo.list_active("u1", now=clock.now)) == 1


def test_logout_cannot_revoke_another_users_session(service, memory_repo, clock):
    victim = _login(service, subject="u2")

    outcome = service.logout(LogoutIn(user_id="u1", refresh_token=victim.refresh_token))

    assert outcome.unwrap() == 0
    assert len(memory_repo.list_active("u2", now=clock.now)) == 1


def test_logout_unmatched_can_be_an_error(codec, memory_repo, digester, clock):
    strict = AuthService(
        codec=codec,
        repository=memory_repo,
        digester=digester,
        token_cfg=AuthTokenConfig(logout_unmatched_is_error=True),
        clock=clock,
    )
    orphan = codec.issue(RefreshGrant(subject="u1", secret="nope"), timedelta(days=1))

    outcome = strict.logout(LogoutIn(user_id="u1", refresh_token=orphan))

    assert outcome.error is AuthErrorKind.CREDENTIAL_NOT_FOUND


def test_logout_without_token_revokes_all(service, memory_repo, clock):
    _login(service)
    _login(service)
    _login(service, subject="u2")

    assert service.logout(LogoutIn(user_id="u1")).unwrap() == 2
    assert memory_repo.list_active("u1", now=clock.now) == []
    assert len(memory_repo.list_active("u2", now=clock.now)) == 1


def test_logout_everywhere_then_refresh_fails(service):
    a = _login(service)
    b = _login(service)

    assert service.logout_everywhere("u1").unwrap() == 2

    for pair in (a, b):
        assert service.refresh(RefreshIn(refresh_token=pair.refresh_token)).error is (
            AuthErrorKind.REUSE_DETECTED
        )


def test_logout_everywhere_for_unknown_user(service):
    assert service.logout_everywhere("ghost").unwrap() == 0


def test_logout_storage_failure(service, memory_repo, monkeypatch):
    def boom(user_id, *, now):
        raise StorageUnavailableError("revoke_all")

    monkeypatch.setattr(memory_repo, "revoke_all", boom)

    assert service.logout_everywhere("u1").error is AuthErrorKind.STORAGE_UNAVAILABLE


def test_active_sessions_lists_audit_fields(service, clock):
    _login(service, device_info="Firefox", client_address="198.51.100.4")
    clock.advance(seconds=30)
    _login(service, device_info="Safari")

    sessions = service.active_sessions("u1").unwrap()

    assert [s.device_info for s in sessions] == ["Firefox", "Safari"]
    assert sessions[0].client_address == "198.51.100.4"


def test_expired_sessions_are_not_active(service, clock):
    _login(service)
    clock.advance(days=7)
    assert service.active_sessions("u1").unwrap() == []


# ---------------------------------- prune ---------------------------------- #


def test_prune_uses_the_service_clock(service, memory_repo, clock):
    _login(service)
    clock.advance(days=40)

    assert service.prune(timedelta(days=30)).unwrap() == 1
    assert memory_repo.list_active("u1", now=clock()) == []


def test_prune_fails_closed(service, memory_repo, monkeypatch):
    def boom(*, before):
        raise StorageUnavailableError("prune")

    monkeypatch.setattr(memory_repo, "prune", boom)

    assert service.prune(timedelta(days=30)).error is AuthErrorKind.STORAGE_UNAVAILABLE
