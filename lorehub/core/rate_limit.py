"""
Redis-backed fixed-window rate limiting for write endpoints
"""

from __future__ import annotations

import logging
import time

import redis.asyncio as redis
from fastapi import Depends, HTTPException, status

from lorehub.core.config import settings
from lorehub.core.security import Viewer, get_current_viewer

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Shared Redis client, created on first use"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


async def check_rate_limit(bucket: str, max_requests: int, window_seconds: int = 60) -> tuple[bool, int]:
    """
    Fixed-window rate limit.
    Returns: (allowed, remaining)
    """
    now = int(time.time())
    window = now // window_seconds
    key = f"rl:{bucket}:{window}"
    try:
        client = get_redis_client()
        count = await client.incr(key)
        if count == 1:
            await client.expire(key, window_seconds)
        remaining = max(0, max_requests - count)
        return (count <= max_requests, remaining)
    except Exception as e:
        # Redis outage: let the request through
        logger.warning(f"Rate limit check skipped for {bucket}: {e}")
        return (True, max_requests)


def rate_limited(action: str, per_minute: int):
    """Dependency factory limiting ``action`` per viewer per minute."""

    async def _dependency(viewer: Viewer = Depends(get_current_viewer)) -> Viewer:
        if not settings.RATE_LIMIT_ENABLED:
            return viewer
        allowed, _ = await check_rate_limit(f"{action}:{viewer.id}", per_minute)
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please slow down.",
            )
        return viewer

    return _dependency
