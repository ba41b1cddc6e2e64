import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from myclinics.middleware import RateLimitMiddleware
from myclinics.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "k1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False
    # other keys are independent
    assert rl.allow("k2", max_requests=2, window_seconds=60) is True


def test_memory_rate_limiter_window_slides():
    now = [1000.0]
    rl = InMemoryRateLimiter(clock=lambda: now[0])
    assert rl.allow("ip:1", 1, 60) is True
    assert rl.allow("ip:1", 1, 60) is False
    now[0] += 61
    assert rl.allow("ip:1", 1, 60) is True
    rl.reset()
    assert rl.allow("ip:1", 1, 60) is True


def test_memory_rate_limiter_forgets_idle_keys():
    now = [1000.0]
    rl = InMemoryRateLimiter(clock=lambda: now[0])
    for i in range(50):
        rl.allow(f"ip:10.0.0.{i}", 5, 30)
    assert len(rl._hits) == 50
    now[0] += 61
    assert rl.allow("ip:10.0.0.200", 5, 30) is True
    assert list(rl._hits) == ["ip:10.0.0.200"]


def test_per_ip_limit_ignores_forwarded_for_header():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=InMemoryRateLimiter(), per_minute=2)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    client = TestClient(app)
    codes = [client.get("/ping", headers={"X-Forwarded-For": f"203.0.113.{i}"}).status_code for i in range(5)]
    assert codes == [200, 200, 429, 429, 429]


def test_redis_rate_limiter_with_fake():
    pytest.importorskip("redis")
    from myclinics.infrastructure.rate_limit import redis_rate_limiter as mod

    class FakePipe:
        def __init__(self, client):
            self.client = client
            self.ops = []

        def incr(self, k, n):
            self.ops.append(("incr", k, n))
            return self

        def expire(self, k, s, nx=False):
            self.ops.append(("expire", k, s, nx))
            return self

        def execute(self):
            results = []
            for op in self.ops:
                if op[0] == "incr":
                    self.client.store[op[1]] = self.client.store.get(op[1], 0) + op[2]
                    results.append(self.client.store[op[1]])
                else:
                    if not (op[3] and op[1] in self.client.ttl):
                        self.client.ttl[op[1]] = op[2]
                    results.append(True)
            return results

    class FakeRedis:
        def __init__(self):
            self.store = {}
            self.ttl = {}

        def pipeline(self):
            return FakePipe(self)

    client = FakeRedis()
    rl = mod.RedisRateLimiter(client=client)

    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is False
    assert client.store == {"myclinics:rl:k1:60": 3}
    assert client.ttl == {"myclinics:rl:k1:60": 60}


def test_redis_rate_limiter_needs_url_or_client():
    pytest.importorskip("redis")
    from myclinics.infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter

    with pytest.raises(ValueError):
        RedisRateLimiter()
