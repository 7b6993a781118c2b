"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.deps import (
    client_context,
    current_identity,
    json_response,
    no_store,
    require_auth,
    timing,
    unwrap,
)
from authcore.core.errors import NotImplementedYet, TokenSurface, Unauthorized
from authcore.core.sessions import get_auth_service, get_credential_verifier
from authcore.schemas import (
    LoginSchema,
    LogoutAckSchema,
    LogoutSchema,
    RefreshSchema,
    RevokedSchema,
    SessionSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from authcore.services.auth import IssueIn, LogoutIn, RefreshIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenPairSchema()
sessions_schema = SessionSchema(many=True)
whoami_schema = WhoAmISchema()
revoked_schema = RevokedSchema()
logout_ack_schema = LogoutAckSchema()


@bp.post("/login")
@timing
def login():
    """Check credentials with the configured verifier and open a new session."""

    verifier = get_credential_verifier()
    if verifier is None:
        raise NotImplementedYet("No credential verifier configured")
    data = login_schema.load(request.get_json(silent=True) or {})
    principal = verifier.verify(data["username"], data["password"])
    if principal is None:
        raise Unauthorized("Invalid credentials", code="invalid_credentials")

    dto = IssueIn(subject=principal.subject, role=principal.role, context=client_context())
    pair = unwrap(get_auth_service().issue(dto))
    return no_store(json_response({"data": token_schema.dump(pair)}))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token: consume it and return a fresh pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    dto = RefreshIn(refresh_token=data["refresh_token"], context=client_context())
    pair = unwrap(get_auth_service().refresh(dto), TokenSurface.REFRESH)
    return no_store(json_response({"data": token_schema.dump(pair)}))


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the session behind the given refresh token, or all sessions when omitted.

    The body is the same whether or not the token matched a live session;
    the revocation count only reaches the logs.
    """

    data = logout_schema.load(request.get_json(silent=True) or {})
    dto = LogoutIn(user_id=current_identity().subject, refresh_token=data["refresh_token"])
    unwrap(get_auth_service().logout(dto), TokenSurface.REFRESH)
    return json_response({"data": logout_ack_schema.dump({"ok": True})})


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    revoked = unwrap(get_auth_service().logout_everywhere(current_identity().subject))
    return json_response({"data": revoked_schema.dump({"revoked": revoked})})


@bp.get("/sessions")
@require_auth
@timing
def sessions():
    """List the caller's active sessions for audit."""

    records = unwrap(get_auth_service().active_sessions(current_identity().subject))
    return json_response({"data": sessions_schema.dump(records)})


@bp.get("/whoami")
@require_auth
@timing
def whoami():
    """Return the verified identity behind the access token."""

    identity = current_identity()
    body = {
        "subject": identity.subject,
        "role": identity.role,
        "expires_at": identity.raw_claims.expires_at,
    }
    return json_response({"data": whoami_schema.dump(body)})
