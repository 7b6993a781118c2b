from authcore.models.session_credential import SessionCredential

__all__ = ["SessionCredential"]
