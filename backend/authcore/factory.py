"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from authcore.core.config import BaseConfig, get_config, validate_config
from authcore.core.logger import configure_logging, init_app as init_logging
from authcore.services._shared.clock import Clock
from authcore.services._shared.ports import CredentialVerifier, SessionRepository


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    repository: SessionRepository | None = None,
    credential_verifier: CredentialVerifier | None = None,
    clock: Clock | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object/class/import path; defaults to ``APP_ENV``.
    :param repository: Session store override (defaults to ``SESSION_BACKEND``).
    :param credential_verifier: Login-time password check; ``/auth/login``
        answers 501 without one.
    :param clock: Shared time source for token and session expiry.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    validate_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy
    from authcore.core import proxy

    proxy.init_app(app)

    from authcore.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authcore.core import sessions

    sessions.init_app(
        app, repository=repository, credential_verifier=credential_verifier, clock=clock
    )

    from authcore.api import init_app as init_api

    init_api(app)

    from authcore.core import errors

    errors.init_app(app)

    from authcore import cli as app_cli

    app_cli.init_app(app)

    return app
