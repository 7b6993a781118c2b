"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload carrying the refresh token to rotate."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=4096))


class LogoutSchema(Schema):
    """Optional refresh token; omitted means revoke every session."""

    refresh_token = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(min=1, max=4096)
    )


class TokenPairSchema(Schema):
    """Response payload containing a fresh access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(load_default="bearer")
    expires_in = fields.Integer(required=True)
    session_id = fields.String(required=True)


class SessionSchema(Schema):
    """Audit view of one active session; never exposes the digest."""

    id = fields.String(required=True)
    created_at = fields.DateTime(required=True)
    expires_at = fields.DateTime(required=True)
    device_info = fields.String(allow_none=True)
    client_address = fields.String(allow_none=True)


class WhoAmISchema(Schema):
    """Response payload exposing the verified identity."""

    subject = fields.String(required=True)
    role = fields.String(allow_none=True)
    expires_at = fields.DateTime(required=True)


class RevokedSchema(Schema):
    """Number of sessions revoked by a logout call."""

    revoked = fields.Integer(required=True)


class LogoutAckSchema(Schema):
    """Logout acknowledgement; identical whether or not the token matched."""

    ok = fields.Boolean(required=True)
