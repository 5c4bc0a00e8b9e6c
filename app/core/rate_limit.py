"""
Fixed window rate limiting keyed by client IP.

Counters are kept in Redis so every worker shares one count per
client and window.
"""

import time
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
from fastapi import Request
from redis.exceptions import RedisError

from app.core.config import Settings, settings
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitResult:
    """Rate limit check result"""
    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    total_hits: int
    key: str


class FixedWindowRateLimiter:
    """Counts hits per key inside windows of `period` seconds."""

    def __init__(
        self,
        redis_client: redis.Redis,
        limit: int,
        period: int,
        clock=time.time,
        prefix: str = "rate_limit:fixed",
    ):
        self.redis = redis_client
        self.limit = limit
        self.period = period
        self.prefix = prefix
        self._clock = clock

    def _window_key(self, key: str, window: int) -> str:
        return f"{self.prefix}:{key}:{window}"

    async def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        window = int(now // self.period)
        next_window_start = (window + 1) * self.period
        window_key = self._window_key(key, window)

        try:
            count = await self.redis.incr(window_key)
            if count == 1:
                await self.redis.expire(window_key, self.period)
        except RedisError as e:
            # Fail open
            logger.error(f"Rate limit check failed for {key}: {e}")
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=self.limit,
                reset_at=int(next_window_start),
                retry_after=0,
                total_hits=0,
                key=key,
            )

        if count <= self.limit:
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=self.limit - count,
                reset_at=int(next_window_start),
                retry_after=0,
                total_hits=count,
                key=key,
            )

        return RateLimitResult(
            allowed=False,
            limit=self.limit,
            remaining=0,
            reset_at=int(next_window_start),
            retry_after=max(1, int(next_window_start - now)),
            total_hits=count,
            key=key,
        )

    async def reset(self, key: Optional[str] = None) -> int:
        """Drop counters for one key, or for every key when none is given."""
        pattern = f"{self.prefix}:{key if key is not None else '*'}:*"
        keys = [found async for found in self.redis.scan_iter(match=pattern)]
        if keys:
            await self.redis.delete(*keys)
        return len(keys)

    async def close(self) -> None:
        await self.redis.aclose()


def build_rate_limiter(settings: Settings = settings) -> FixedWindowRateLimiter:
    client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return FixedWindowRateLimiter(
        client,
        limit=settings.RATE_LIMIT_REQUESTS,
        period=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def extract_client_ip(request: Request) -> str:
    """Client IP, honoring the first X-Forwarded-For hop behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
