"""Fixed-window request throttling backed by Redis."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

KEY_PREFIX = "ratelimit:"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class RateLimiter:
    """Allow ``limit`` hits per ``window_seconds`` for each client key.

    Redis outages must not take the API down, so errors let the request
    through and are logged.
    """

    def __init__(self, redis_client: Redis, limit: int, window_seconds: int) -> None:
        self.redis = redis_client
        self.limit = limit
        self.window_seconds = window_seconds

    def _window_key(self, client_key: str, now: float) -> str:
        window = int(now // self.window_seconds)
        return f"{KEY_PREFIX}{client_key}:{window}"

    def hit(self, client_key: str, now: float | None = None) -> RateLimitDecision:
        now = time.time() if now is None else now
        key = self._window_key(client_key, now)
        reset_after = self.window_seconds - int(now % self.window_seconds)
        try:
            # One MULTI/EXEC: a counter never exists without its TTL
            pipe = self.redis.pipeline(transaction=True)
            pipe.incr(key)
            pipe.expire(key, self.window_seconds)
            count, _ = pipe.execute()
            count = int(count)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return RateLimitDecision(True, self.limit, self.limit, reset_after)

        remaining = max(self.limit - count, 0)
        return RateLimitDecision(count <= self.limit, self.limit, remaining, reset_after)
