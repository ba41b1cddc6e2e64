import logging
from functools import lru_cache

from ...core.config import settings
from ...application.ports.rate_limiter import RateLimiter
from .memory_rate_limiter import InMemoryRateLimiter
from .redis_rate_limiter import RedisRateLimiter

logger = logging.getLogger(__name__)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()
