from authcore.schemas.auth import (
    LoginSchema,
    LogoutAckSchema,
    LogoutSchema,
    RefreshSchema,
    RevokedSchema,
    SessionSchema,
    TokenPairSchema,
    WhoAmISchema,
)

__all__ = [
    "LoginSchema",
    "LogoutAckSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RevokedSchema",
    "SessionSchema",
    "TokenPairSchema",
    "WhoAmISchema",
]
