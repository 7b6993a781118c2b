"""Wire the session-authentication service from Flask configuration."""

from __future__ import annotations

from datetime import timedelta
from typing import cast

from flask import Flask, current_app

from authcore.core.extensions import get_redis
from authcore.infra.jwt import PyJWTTokenCodec, SigningKey
from authcore.infra.redis import RedisSessionRepository
from authcore.infra.sqlalchemy import SQLAlchemySessionRepository
from authcore.services._shared.clock import Clock
from authcore.services._shared.digest import CredentialDigester
from authcore.services._shared.ports import (
    CredentialVerifier,
    InMemorySessionRepository,
    SessionRepository,
)
from authcore.services.auth import AuthService, AuthTokenConfig

EXTENSION_KEY = "authcore.sessions"
VERIFIER_KEY = "authcore.credential_verifier"


def build_codec(app: Flask, clock: Clock | None = None) -> PyJWTTokenCodec:
    """Build the token codec from ``JWT_*`` settings."""
    algorithm = app.config.get("JWT_ALGORITHM", "HS256")
    return PyJWTTokenCodec(
        access_key=SigningKey(app.config["JWT_ACCESS_SECRET_KEY"], algorithm=algorithm),
        refresh_key=SigningKey(app.config["JWT_REFRESH_SECRET_KEY"], algorithm=algorithm),
        issuer=app.config.get("JWT_ISSUER"),
        clock=clock,
    )


def build_repository(app: Flask) -> SessionRepository:
    """Select the session store named by ``SESSION_BACKEND``.

    :raises RuntimeError: On an unknown backend name.
    """
    backend = str(app.config.get("SESSION_BACKEND", "sqlalchemy")).lower()
    if backend == "sqlalchemy":
        return SQLAlchemySessionRepository()
    if backend == "redis":
        retention = app.config.get("SESSION_REDIS_RETENTION_SECONDS")
        return RedisSessionRepository(
            get_redis(app), retention=timedelta(seconds=retention) if retention else None
        )
    if backend == "memory":
        return InMemorySessionRepository()
    raise RuntimeError(f"Unknown SESSION_BACKEND {backend!r}")


def init_app(
    app: Flask,
    *,
    repository: SessionRepository | None = None,
    credential_verifier: CredentialVerifier | None = None,
    clock: Clock | None = None,
) -> AuthService:
    """
    Build the :class:`AuthService` once and store it in ``app.extensions``.

    :param app: Application being configured.
    :param repository: Explicit store (tests); defaults to ``SESSION_BACKEND``.
    :param credential_verifier: Password check used by the login route.
    :param clock: Shared time source for codec and services.
    :returns: The wired service.
    """
    service = AuthService(
        codec=build_codec(app, clock),
        repository=repository if repository is not None else build_repository(app),
        digester=CredentialDigester(app.config["SESSION_DIGEST_KEY"]),
        token_cfg=AuthTokenConfig.from_mapping(app.config),
        clock=clock,
    )
    app.extensions[EXTENSION_KEY] = service
    app.extensions[VERIFIER_KEY] = credential_verifier
    return service


def get_auth_service() -> AuthService:
    """Return the service bound to the current application."""
    return cast(AuthService, current_app.extensions[EXTENSION_KEY])


def get_credential_verifier() -> CredentialVerifier | None:
    return current_app.extensions.get(VERIFIER_KEY)
