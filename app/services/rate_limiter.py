"""
Per-user moving window rate limiter for AI endpoints, backed by `limits`
"""
import logging
import math
import time
from typing import Optional, Tuple
from fastapi import HTTPException
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from app.config import settings

logger = logging.getLogger(__name__)


class RateLimitExceeded(HTTPException):
    """429 with a Retry-After header"""

    def __init__(self, retry_after: int):
        super().__init__(
            status_code=429,
            detail="Too many AI requests. Please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class SlidingWindowRateLimiter:
    """
    Allow at most max_requests per key within any window_seconds span.

    check() does not consume quota; callers record() once a request has
    actually been served, so failed model calls are not counted.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)

    def check(self, key: str) -> Tuple[bool, Optional[int]]:
        """
        Returns:
            (is_allowed, retry_after_seconds)
        """
        if self._strategy.test(self._item, key):
            return True, None
        stats = self._strategy.get_window_stats(self._item, key)
        return False, max(1, math.ceil(stats.reset_time - time.time()))

    def record(self, key: str) -> None:
        self._strategy.hit(self._item, key)

    def remaining(self, key: str) -> int:
        return self._strategy.get_window_stats(self._item, key).remaining

    def enforce(self, key: str) -> None:
        """Raise RateLimitExceeded when the key is over its quota"""
        allowed, retry_after = self.check(key)
        if not allowed:
            logger.warning("AI rate limit exceeded", extra={"user_id": key})
            raise RateLimitExceeded(retry_after)

    def reset(self) -> None:
        self._storage.reset()


# Global limiter instance
_ai_rate_limiter = None


def get_ai_rate_limiter() -> SlidingWindowRateLimiter:
    """Get or create the AI limiter"""
    global _ai_rate_limiter
    if _ai_rate_limiter is None:
        _ai_rate_limiter = SlidingWindowRateLimiter(
            settings.ai_rate_limit_max_requests,
            settings.ai_rate_limit_window_seconds,
        )
    return _ai_rate_limiter
