from redis.asyncio import Redis

from ghosthuman.core.config import get_settings

_redis: Redis | None = None


async def get_redis() -> Redis | None:
    """Shared client, or None when no REDIS_URL is configured."""
    global _redis
    settings = get_settings()
    if not settings.rate_limit_enabled:
        return None
    if _redis is None:
        _redis = Redis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
    _redis = None
