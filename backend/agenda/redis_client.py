"""
Shared Redis client.

Redis is optional: without REDIS_URL the open-ranges cache and the event
queue are disabled and everything is computed on the fly.
"""

from redis import Redis

from .config import settings

redis_client: Redis | None = (
    Redis.from_url(settings.redis_url) if settings.redis_url else None
)


# FastAPI dependency
def get_redis() -> Redis | None:
    return redis_client
