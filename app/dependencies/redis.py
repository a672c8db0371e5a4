import logging

from upstash_redis.asyncio import Redis

from app.config import get_settings

logger = logging.getLogger(__name__)

_redis_client: Redis | None = None


def get_redis_client() -> Redis:
    """Get the shared async Redis client used for session snapshots.

    Created on first use and closed on application shutdown.
    """
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        logger.info("Initializing Upstash Redis client")
        _redis_client = Redis(
            url=settings.UPSTASH_REDIS_REST_URL,
            token=settings.UPSTASH_REDIS_REST_TOKEN,
        )
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        logger.info("Closing Upstash Redis client")
        await _redis_client.close()
        _redis_client = None
