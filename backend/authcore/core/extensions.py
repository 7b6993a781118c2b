"""Flask extension singletons and the session-store clients they depend on."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION_KEY = "authcore.redis"

# Constraint names must be deterministic for Alembic autogenerate
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)


def init_app(app: Flask) -> None:
    """Bind the database, migrations and (for the Redis backend) a Redis client.

    Parameters
    ----------
    app: flask.Flask
        Application being configured. ``authcore.models`` is imported here so
        the ``session_credentials`` table is registered on :data:`metadata`
        before Alembic inspects it.

    Raises
    ------
    RuntimeError
        If ``SESSION_BACKEND`` is ``redis`` and no reachable ``REDIS_URL`` is
        configured.
    """
    db.init_app(app)

    from authcore import models as _models  # noqa: F401

    migrate.init_app(app, db)

    if app.config.get("SESSION_BACKEND") != "redis":
        return

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise RuntimeError("SESSION_BACKEND=redis requires REDIS_URL.")
    client = redis.Redis.from_url(redis_url, health_check_interval=30)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions[REDIS_EXTENSION_KEY] = client


def get_redis(app: Flask | None = None) -> redis.Redis:
    """Return the Redis client bound to ``app`` (or the current app)."""
    target = app if app is not None else current_app
    client = target.extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("Redis client is not initialized; set SESSION_BACKEND=redis.")
    return client
