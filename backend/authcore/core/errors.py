"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from enum import StrEnum
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from authcore.core.logger import ensure_request_id
from authcore.services._shared.errors import AuthErrorKind, AuthFailure, StorageUnavailableError

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Derive a snake-case code from the status phrase (``404`` -> ``not_found``)."""
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "error"


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    headers : dict[str, str] | None, optional
        Extra response headers (e.g. ``WWW-Authenticate``).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}
        self.headers = headers or {}

    def to_problem(self) -> dict[str, Any]:
        """Serialize error metadata into an RFC 7807 problem."""
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class Unauthorized(APIError):
    """401 with an RFC 6750 ``WWW-Authenticate`` challenge.

    A request that sent no credentials gets a bare ``Bearer`` challenge; any
    presented-but-rejected token adds ``error="invalid_token"``.
    """

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        challenge = "Bearer" if code == "TOKEN_MISSING" else 'Bearer error="invalid_token"'
        super().__init__(
            message,
            status_code=HTTPStatus.UNAUTHORIZED,
            code=code,
            headers={"WWW-Authenticate": challenge},
        )


class ServiceUnavailable(APIError):
    """503 when session storage cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            message, status_code=HTTPStatus.SERVICE_UNAVAILABLE, code="service_unavailable"
        )


class NotImplementedYet(APIError):
    """501 for endpoints whose collaborator has not been wired."""

    def __init__(self, message: str = "Not implemented") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_IMPLEMENTED, code="not_implemented")


# --------------------------------------------------------------------------- #
# Auth failure mapping
# --------------------------------------------------------------------------- #


class TokenSurface(StrEnum):
    """Where a token failure surfaced; refresh/logout paths hide details."""

    ACCESS = "access"
    REFRESH = "refresh"


def api_error_for(kind: AuthErrorKind, surface: TokenSurface = TokenSurface.ACCESS) -> APIError:
    """
    Translate an :class:`AuthErrorKind` into the client-facing error.

    On the refresh/logout surface every credential failure (including reuse)
    collapses into ``TOKEN_INVALID`` so clients cannot learn session state.

    :param kind: Failure kind from the service layer.
    :param surface: Which endpoint family produced the failure.
    :rtype: APIError
    """
    if kind is AuthErrorKind.STORAGE_UNAVAILABLE:
        return ServiceUnavailable()
    if kind is AuthErrorKind.TOKEN_TYPE_MISMATCH:
        return Unauthorized("Wrong token type for this endpoint", code="TOKEN_TYPE_MISMATCH")
    if surface is TokenSurface.ACCESS:
        if kind is AuthErrorKind.EXPIRED:
            return Unauthorized("Token has expired", code="TOKEN_EXPIRED")
        if kind is AuthErrorKind.CREDENTIAL_NOT_FOUND:
            return Unauthorized("Invalid credentials", code="invalid_credentials")
    return Unauthorized("Token is invalid", code="TOKEN_INVALID")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level("api.error", extra={"event": "api.error", "reason": err.code})
        return _problem_response(problem), err.status_code, err.headers

    @app.errorhandler(AuthFailure)
    def handle_auth_failure(err: AuthFailure):
        # Outcomes unwrapped outside a route-specific mapping use the access surface
        return handle_api_error(api_error_for(err.kind))

    @app.errorhandler(StorageUnavailableError)
    def handle_storage_unavailable(err: StorageUnavailableError):
        log.error(
            "api.storage_unavailable",
            extra={"event": "api.storage_unavailable", "operation": err.operation},
            exc_info=err,
        )
        return handle_api_error(ServiceUnavailable())

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        # Expected HTTP errors carry no traceback
        level("api.http_error", extra={"event": "api.http_error", "reason": error_code})
        return _problem_response(problem), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("api.validation_error", extra={"event": "api.validation_error"})
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("api.database_unavailable", extra={"event": "api.database_unavailable"}, exc_info=err)
        return handle_api_error(ServiceUnavailable())

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("api.unhandled_exception", extra={"event": "api.unhandled_exception"}, exc_info=err)
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
