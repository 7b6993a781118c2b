"""Mapping of service failure kinds onto client-facing errors."""

from __future__ import annotations

import pytest
from authcore.core.errors import TokenSurface, api_error_for
from authcore.services._shared.errors import AuthErrorKind


@pytest.mark.parametrize(
    ("kind", "status", "code"),
    [
        (AuthErrorKind.EXPIRED, 401, "TOKEN_EXPIRED"),
        (AuthErrorKind.MALFORMED, 401, "TOKEN_INVALID"),
        (AuthErrorKind.SIGNATURE_INVALID, 401, "TOKEN_INVALID"),
        (AuthErrorKind.TOKEN_TYPE_MISMATCH, 401, "TOKEN_TYPE_MISMATCH"),
        (AuthErrorKind.STORAGE_UNAVAILABLE, 503, "service_unavailable"),
    ],
)
def test_access_surface_codes(kind, status, code):
    err = api_error_for(kind, TokenSurface.ACCESS)
    assert (err.status_code, err.code) == (status, code)


@pytest.mark.parametrize(
    "kind",
    [
        AuthErrorKind.EXPIRED,
        AuthErrorKind.MALFORMED,
        AuthErrorKind.SIGNATURE_INVALID,
        AuthErrorKind.REUSE_DETECTED,
        AuthErrorKind.CREDENTIAL_NOT_FOUND,
    ],
)
def test_refresh_surface_hides_the_reason(kind):
    err = api_error_for(kind, TokenSurface.REFRESH)
    assert (err.status_code, err.code) == (401, "TOKEN_INVALID")


def test_refresh_surface_keeps_type_mismatch():
    assert api_error_for(AuthErrorKind.TOKEN_TYPE_MISMATCH, TokenSurface.REFRESH).code == (
        "TOKEN_TYPE_MISMATCH"
    )
