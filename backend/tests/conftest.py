"""Pytest fixtures for the session-authentication core.

Two layers are provided:

* Pure service fixtures (frozen clock, PyJWT codec, in-memory repository) that
  need no Flask application.
* A function-scoped Flask application on an in-memory SQLite database, created
  and dropped per test so committed rows never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from authcore.core.extensions import db as _db
from authcore.factory import create_app
from authcore.infra.jwt import PyJWTTokenCodec, SigningKey
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.ports import InMemorySessionRepository, VerifiedPrincipal
from authcore.services.auth import AuthService, AuthTokenConfig

from tests.helpers.clock import FrozenClock
from tests.helpers.credentials import StaticCredentialVerifier
from tests.helpers.settings import (
    ACCESS_SECRET,
    ALICE_PASSWORD,
    DIGEST_KEY,
    REFRESH_SECRET,
    AppTestConfig,
)


# ------------------------------ Service layer ------------------------------ #


@pytest.fixture
def clock() -> FrozenClock:
    """Frozen time source shared by codec and services."""
    return FrozenClock()


@pytest.fixture
def codec(clock) -> PyJWTTokenCodec:
    return PyJWTTokenCodec(
        access_key=SigningKey(ACCESS_SECRET),
        refresh_key=SigningKey(REFRESH_SECRET),
        issuer="authcore-tests",
        clock=clock,
    )


@pytest.fixture
def digester() -> CredentialDigester:
    return CredentialDigester(DIGEST_KEY)


@pytest.fixture
def token_cfg() -> AuthTokenConfig:
    return AuthTokenConfig()


@pytest.fixture
def memory_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def service(codec, memory_repo, digester, token_cfg, clock) -> AuthService:
    """AuthService wired to the in-memory repository and the frozen clock."""
    return AuthService(
        codec=codec,
        repository=memory_repo,
        digester=digester,
        token_cfg=token_cfg,
        clock=clock,
    )


# ------------------------------ Flask layer -------------------------------- #


@pytest.fixture
def verifier() -> StaticCredentialVerifier:
    return StaticCredentialVerifier(
        {"alice": (ALICE_PASSWORD, VerifiedPrincipal(subject="user-alice", role="member"))}
    )


@pytest.fixture
def app(clock, verifier):
    """Create a Flask app with fresh tables, inside an application context.

    Yields
    ------
    flask.Flask
        Application wired to the SQLAlchemy session repository, the frozen
        clock and a static credential verifier.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(AppTestConfig, credential_verifier=verifier, clock=clock)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    """Flask-scoped SQLAlchemy session, wired into Factory Boy."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(_db.session)
    yield _db.session
    SQLAlchemySession.set(None)
