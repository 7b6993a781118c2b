"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from authcore.core.errors import TokenSurface, Unauthorized, api_error_for
from authcore.core.sessions import get_auth_service
from authcore.services._shared.result import Outcome
from authcore.services.auth import ClientContext, Identity

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

BEARER_PREFIX = "bearer "


def bearer_token() -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""

    header = request.headers.get("Authorization", "")
    if header[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def unwrap(outcome: Outcome[T], surface: TokenSurface = TokenSurface.ACCESS) -> T:
    """Return the outcome value or raise the mapped :class:`APIError`."""

    if outcome.error is not None:
        raise api_error_for(outcome.error, surface)
    return cast(T, outcome.value)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token; store the identity on ``g``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise Unauthorized("Missing bearer token", code="TOKEN_MISSING")
        g.identity = unwrap(get_auth_service().authenticate(token))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_identity() -> Identity:
    """Return the identity set by :func:`require_auth`."""

    return cast(Identity, g.identity)


def client_context() -> ClientContext:
    """Audit details of the calling client (``User-Agent`` and proxy-aware address)."""

    user_agent = request.headers.get("User-Agent") or None
    return ClientContext(
        device_info=user_agent[:512] if user_agent else None,
        client_address=request.remote_addr,
    )


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_store(response: Response) -> Response:
    """Mark a response carrying credentials as non-cacheable."""

    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
