"""
Rate Limiting

Fixed-window request limiting keyed by endpoint and client IP. Counts live
in Redis when it is connected; otherwise, or when a Redis call fails, an
in-process counter takes over.
"""

import math
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from fastapi import Request
from redis.exceptions import RedisError

from pmhnp_hiring.core.database import DatabaseManager, db_manager
from pmhnp_hiring.core.exceptions import RateLimitException
from pmhnp_hiring.core.security import get_client_ip
from pmhnp_hiring.utils.logger import get_logger
from pmhnp_hiring.utils.metrics import metrics

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    limit: int
    window_seconds: int


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # unix seconds

    def retry_after(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(1, math.ceil(self.reset_at - now))

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }


RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "subscribe": RateLimitConfig(limit=10, window_seconds=60),
    "post_job": RateLimitConfig(limit=3, window_seconds=60),
    "contact": RateLimitConfig(limit=5, window_seconds=60),
    "job_alerts": RateLimitConfig(limit=10, window_seconds=60),
    "general": RateLimitConfig(limit=60, window_seconds=60),
    "auth": RateLimitConfig(limit=10, window_seconds=60),
    "upload": RateLimitConfig(limit=10, window_seconds=60),
}


class RateLimiter:
    """
    Fixed-window rate limiter.

    Redis holds one counter per key (``INCR`` then ``EXPIRE`` on the first
    hit). The memory fallback keeps ``(count, reset_at)`` per key and drops
    expired entries whenever it is consulted.
    """

    def __init__(self, db: Optional[DatabaseManager] = None, use_redis: bool = True) -> None:
        self.db_manager = db or db_manager
        self.use_redis = use_redis
        self._memory: Dict[str, Tuple[int, float]] = {}

    @staticmethod
    def build_key(endpoint: str, identifier: str) -> str:
        return f"ratelimit:{endpoint}:{identifier}"

    async def check(self, identifier: str, endpoint: str, config: RateLimitConfig) -> RateLimitResult:
        """
        Count one request for ``identifier`` against ``endpoint``.

        Returns:
            RateLimitResult: Whether the request is allowed and the window state
        """
        key = self.build_key(endpoint, identifier)

        client = self.db_manager.redis if self.use_redis else None
        if client is not None:
            try:
                return await self._check_redis(client, key, config)
            except RedisError as e:
                logger.warning(f"Redis rate limit check failed, falling back to memory: {e}")

        return self._check_memory(key, config)

    async def _check_redis(self, client, key: str, config: RateLimitConfig) -> RateLimitResult:
        count = await client.incr(key)
        if count == 1:
            await client.expire(key, config.window_seconds)
            ttl = config.window_seconds
        else:
            ttl = await client.ttl(key)
            if ttl is None or ttl < 0:
                # Counter lost its expiry; restart the window
                await client.expire(key, config.window_seconds)
                ttl = config.window_seconds

        reset_at = time.time() + ttl
        return RateLimitResult(
            allowed=count <= config.limit,
            limit=config.limit,
            remaining=max(0, config.limit - count),
            reset_at=reset_at
        )

    def _check_memory(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.time()
        self._purge_expired(now)

        count, reset_at = self._memory.get(key, (0, now + config.window_seconds))
        if count >= config.limit:
            return RateLimitResult(allowed=False, limit=config.limit, remaining=0, reset_at=reset_at)

        count += 1
        self._memory[key] = (count, reset_at)
        return RateLimitResult(
            allowed=True,
            limit=config.limit,
            remaining=config.limit - count,
            reset_at=reset_at
        )

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._memory.items() if now >= reset_at]
        for key in expired:
            del self._memory[key]

    def reset(self) -> None:
        """Forget all in-memory counters."""
        self._memory.clear()


rate_limiter = RateLimiter()


def rate_limit(endpoint: str, limiter: Optional[RateLimiter] = None):
    """
    Build a FastAPI dependency enforcing the ``RATE_LIMITS[endpoint]`` preset.

    Usage:
        @router.get("/jobs", dependencies=[Depends(rate_limit("general"))])
    """
    config = RATE_LIMITS[endpoint]

    async def dependency(request: Request) -> RateLimitResult:
        active = limiter or rate_limiter
        client_ip = get_client_ip(request)
        result = await active.check(client_ip, endpoint, config)

        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {client_ip} on {endpoint}")
            metrics.record_rate_limit_rejection(endpoint)
            raise RateLimitException(
                limit_type=endpoint,
                retry_after=result.retry_after(),
                limit=result.limit,
                reset_at=math.ceil(result.reset_at)
            )

        return result

    return dependency
