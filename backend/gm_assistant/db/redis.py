"""Redis connection for cross-process NPC turn locks.

Only opened when TURN_LOCK_BACKEND is "redis"; the local lock backend
never touches it.
"""

import redis.asyncio as redis
import structlog

from gm_assistant.config import settings

logger = structlog.get_logger(__name__)

_lock_client: redis.Redis | None = None


def get_redis_client(url: str | None = None) -> redis.Redis:
    """Shared lock client, created on first use. No connection is made until a command runs."""
    global _lock_client
    if _lock_client is None:
        _lock_client = redis.from_url(url or settings.REDIS_URL, health_check_interval=30)
        logger.info("redis_lock_client_created")
    return _lock_client


async def close_redis() -> None:
    global _lock_client
    if _lock_client is not None:
        await _lock_client.aclose()
        _lock_client = None
