"""Flask CLI commands for session housekeeping."""

from __future__ import annotations

from datetime import timedelta

from authcore.models import SessionCredential
from sqlalchemy import func, select

from tests.factories.session_credential import SessionCredentialFactory
from tests.helpers.clock import EPOCH


def _count(session) -> int:
    return session.execute(select(func.count()).select_from(SessionCredential)).scalar_one()


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["sessions", "init-db"])
    assert result.exit_code == 0
    assert "created" in result.output


def test_prune_removes_dead_records_only(app, session, clock):
    SessionCredentialFactory(expires_at=EPOCH + timedelta(days=1))
    SessionCredentialFactory(revoked_at=EPOCH + timedelta(hours=1))
    SessionCredentialFactory(expires_at=EPOCH + timedelta(days=90))
    clock.advance(days=40)

    result = app.test_cli_runner().invoke(args=["sessions", "prune", "--older-than-days", "30"])

    assert result.exit_code == 0, result.output
    assert "Pruned 2 session record(s)" in result.output
    assert _count(session) == 1


def test_prune_keeps_records_inside_window(app, session, clock):
    SessionCredentialFactory(expires_at=EPOCH + timedelta(days=1))
    clock.advance(days=10)

    result = app.test_cli_runner().invoke(args=["sessions", "prune"])

    assert result.exit_code == 0
    assert "Pruned 0" in result.output
    assert _count(session) == 1


def test_prune_rejects_negative_window(app):
    result = app.test_cli_runner().invoke(args=["sessions", "prune", "--older-than-days", "-1"])
    assert result.exit_code != 0
