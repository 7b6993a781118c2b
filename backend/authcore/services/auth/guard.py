# authcore/services/auth/guard.py
from __future__ import annotations

from typing import cast

from authcore.services._shared.errors import AuthErrorKind
from authcore.services._shared.ports.token_codec import AccessClaims, TokenClass, TokenCodec
from authcore.services._shared.result import Outcome
from authcore.services.auth.dto import Identity


class AuthGuard:
    """
    Per-request access-token verifier.

    Identity comes from the signed claims alone; the session repository is
    never consulted, so this is safe on every request of the hot path.
    """

    def __init__(self, *, codec: TokenCodec) -> None:
        self.codec = codec

    def authenticate(self, token: str) -> Outcome[Identity]:
        """
        Turn an access token into request-scoped identity.

        ``EXPIRED`` is reported as its own kind so a caller can try a refresh
        instead of rejecting outright.
        """
        verified = self.codec.verify(token, expected=TokenClass.ACCESS)
        if not verified.ok:
            return Outcome.failure(cast(AuthErrorKind, verified.error))
        claims = cast(AccessClaims, verified.value)
        return Outcome.success(Identity(subject=claims.subject, role=claims.role, raw_claims=claims))
