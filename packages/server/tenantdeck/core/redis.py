"""Redis connection management and session-revocation keys."""

from __future__ import annotations

import uuid

import redis.asyncio as redis

from tenantdeck.core.config import get_settings

settings = get_settings()

_redis_pool: redis.Redis | None = None


def revoked_jti_key(jti: str) -> str:
    return f"td:jwt:revoked:{jti}"


def revoked_before_key(user_id: uuid.UUID) -> str:
    """Tokens for this user issued before the stored timestamp are rejected."""
    return f"td:jwt:revoked_before:{user_id}"


async def get_redis() -> redis.Redis:
    """Get or create the Redis connection."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
