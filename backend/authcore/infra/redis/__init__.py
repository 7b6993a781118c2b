from authcore.infra.redis.redis_session_repository import RedisSessionRepository

__all__ = ["RedisSessionRepository"]
