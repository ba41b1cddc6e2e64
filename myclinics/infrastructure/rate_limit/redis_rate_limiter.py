from typing import Optional

import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    def __init__(self, url: Optional[str] = None, prefix: str = "myclinics:rl:", client: Optional[redis.Redis] = None) -> None:
        if client is None and not url:
            raise ValueError("RedisRateLimiter needs a url or a client")
        self.client = client or redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}:{window_seconds}"
        # Fixed window: the first hit sets the expiry
        pipe = self.client.pipeline()
        pipe.incr(rk, 1)
        pipe.expire(rk, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)
