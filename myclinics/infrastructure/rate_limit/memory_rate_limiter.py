import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple
from threading import Lock

from ...application.ports.rate_limiter import RateLimiter

# Seconds between sweeps of keys whose window has fully expired
SWEEP_INTERVAL = 60.0


class InMemoryRateLimiter(RateLimiter):
    """Sliding-window limiter for a single process."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._hits: Dict[str, Tuple[int, Deque[float]]] = {}
        self._lock = Lock()
        self._clock = clock
        self._last_sweep = clock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = self._clock()
        window_start = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= SWEEP_INTERVAL:
                self._sweep(now)
            _, hits = self._hits.setdefault(key, (window_seconds, deque()))
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= max_requests:
                if not hits:
                    del self._hits[key]
                return False
            hits.append(now)
            self._hits[key] = (window_seconds, hits)
            return True

    def _sweep(self, now: float) -> None:
        stale = [key for key, (window, hits) in self._hits.items() if not hits or hits[-1] <= now - window]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
