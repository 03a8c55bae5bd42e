"""Rate limiting utilities using throttled-py"""
import logging
from datetime import timedelta
from typing import Optional
from throttled import Throttled, RateLimiterType, store, rate_limiter

from core.config import REDIS_URL, SUBMIT_RATE_LIMIT_PER_HOUR

logger = logging.getLogger("shivmart")


def _build_storage(redis_url: str = REDIS_URL):
    # Redis for production, MemoryStore for development
    try:
        if redis_url:
            # RedisStore expects the URL string, not a Redis client object
            logger.info("[rate_limit] Using Redis for rate limiting")
            return store.RedisStore(server=redis_url)
        logger.warning("[rate_limit] REDIS_URL not set - using in-memory storage (not suitable for production with multiple workers)")
        return store.MemoryStore()
    except Exception as ex:
        logger.warning(f"[rate_limit] Redis connection failed, using in-memory storage: {ex}")
        return store.MemoryStore()


def build_submit_throttle(limit_per_hour: int = SUBMIT_RATE_LIMIT_PER_HOUR, redis_url: str = REDIS_URL) -> Optional[Throttled]:
    """Submit limiter: N submissions per IP per hour. Returns None when disabled (limit <= 0)."""
    if limit_per_hour <= 0:
        return None
    return Throttled(
        using=RateLimiterType.FIXED_WINDOW.value,
        quota=rate_limiter.per_duration(timedelta(hours=1), limit=limit_per_hour),
        store=_build_storage(redis_url),
    )


def check_submit_rate_limit(throttle: Optional[Throttled], ip: str) -> tuple[bool, str]:
    """
    Check if a form submission from this IP is allowed.

    Returns:
        Tuple of (allowed: bool, error_message: str)
    """
    if throttle is None:
        return True, ""
    try:
        result = throttle.limit(f"submit:{ip or 'unknown'}", cost=1)
        if result.limited:
            return False, "Too many submissions. Please try again later."
        return True, ""
    except Exception as ex:
        logger.warning(f"[rate_limit] Submit rate limit check failed: {ex}")
        # Fail open - allow submission if rate limiter fails
        return True, ""
