"""Versioned HTTP API for the session-authentication core."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    """Join URL segments into one absolute prefix without duplicate slashes."""
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair under ``base_prefix``."""

    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Mount ``/api/v1`` (``API_BASE_PREFIX`` overrides ``/api``)."""

    from authcore.api.v1 import API_VERSION, REGISTRY

    register_blueprint_group(
        app,
        base_prefix=_join(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION),
        entries=REGISTRY,
    )


__all__ = ["init_app", "register_blueprint_group"]
