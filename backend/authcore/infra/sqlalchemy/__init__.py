from authcore.infra.sqlalchemy.sqlalchemy_session_repository import SQLAlchemySessionRepository

__all__ = ["SQLAlchemySessionRepository"]
