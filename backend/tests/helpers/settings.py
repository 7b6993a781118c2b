"""Fixed secrets and configuration used across the test suite."""

from __future__ import annotations

from authcore.core.config import TestingConfig

ACCESS_SECRET = "unit-access-signing-key-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-signing-key-0123456789abcdef"
DIGEST_KEY = "unit-digest-key-0123456789abcdef"

ALICE_PASSWORD = "correct horse battery staple"


class AppTestConfig(TestingConfig):
    """Testing configuration with deterministic issuer and no proxy handling."""

    JWT_ISSUER = "authcore-tests"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"
