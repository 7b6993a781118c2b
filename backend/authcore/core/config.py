"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholders that must never reach production
INSECURE_DEFAULTS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH", "CHANGE_ME_DIGEST"}
)

# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, ``default`` when unset."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for tokens.
    JWT_ACCESS_SECRET_KEY: str
        Signing key for access tokens.
    JWT_REFRESH_SECRET_KEY: str
        Signing key for refresh tokens; must differ from the access key.
    JWT_ALGORITHM: str
        JWS algorithm shared by both token classes (``HS256``).
    JWT_ISSUER: str | None
        Optional ``iss`` claim stamped on and required from every token.
    SESSION_DIGEST_KEY: str
        HMAC key for the persisted refresh-secret digests.
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (15 minutes by default).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token and session lifetime (7 days by default).
    LOGOUT_UNMATCHED_IS_ERROR: bool
        When ``True`` a logout whose token matches no active session reports
        ``credential_not_found`` instead of succeeding with zero revocations.
    SESSION_BACKEND: str
        ``sqlalchemy`` | ``redis`` | ``memory``.
    SESSION_REDIS_RETENTION_SECONDS: int | None
        Audit retention after expiry for Redis-held records (TTL).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Redis connection string; required for the ``redis`` backend.
    USE_PROXYFIX: bool
        Honour ``X-Forwarded-*`` headers (``True`` by default).
    PROXY_TRUSTED_HOPS: int
        Number of trusted reverse proxies in front of the app.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET_KEY = os.getenv("JWT_ACCESS_SECRET_KEY", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_REFRESH")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    SESSION_DIGEST_KEY = os.getenv("SESSION_DIGEST_KEY", "CHANGE_ME_DIGEST")

    # Token lifetimes & policy
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 3600)
    LOGOUT_UNMATCHED_IS_ERROR = env_bool("LOGOUT_UNMATCHED_IS_ERROR", False)

    # Session storage
    SESSION_BACKEND = os.getenv("SESSION_BACKEND", "sqlalchemy").strip().lower()
    SESSION_REDIS_RETENTION_SECONDS = (
        env_int("SESSION_REDIS_RETENTION_SECONDS", 0) or None
    )

    # DB / cache
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_TRUSTED_HOPS = env_int("PROXY_TRUSTED_HOPS", 1)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses fixed, distinct token keys so test runs are reproducible.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_ACCESS_SECRET_KEY = "test-access-signing-key-0123456789abcdef"
    JWT_REFRESH_SECRET_KEY = "test-refresh-signing-key-0123456789abcdef"
    SESSION_DIGEST_KEY = "test-session-digest-key-0123456789abcdef"
    SESSION_BACKEND = "sqlalchemy"
    REDIS_URL = None
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Placeholder secrets are rejected at
    startup by :func:`validate_config`.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(cfg: Mapping[str, object]) -> None:
    """Reject unsafe key material before the app starts serving.

    :param cfg: Loaded Flask configuration.
    :raises RuntimeError: On equal signing keys, or placeholder secrets outside
        debug/testing.
    """
    if cfg.get("JWT_ACCESS_SECRET_KEY") == cfg.get("JWT_REFRESH_SECRET_KEY"):
        raise RuntimeError("JWT_ACCESS_SECRET_KEY and JWT_REFRESH_SECRET_KEY must differ.")
    if cfg.get("DEBUG") or cfg.get("TESTING"):
        return
    weak = [
        name
        for name in ("JWT_ACCESS_SECRET_KEY", "JWT_REFRESH_SECRET_KEY", "SESSION_DIGEST_KEY")
        if cfg.get(name) in INSECURE_DEFAULTS
    ]
    if weak:
        raise RuntimeError(f"Refusing to start with placeholder secrets: {', '.join(weak)}")
