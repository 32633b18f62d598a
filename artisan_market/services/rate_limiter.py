import time
from typing import Dict

from limits import RateLimitItemPerSecond
from limits.errors import StorageError
from limits.storage import Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter
from redis.exceptions import RedisError

from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import REDIS_URL

logger = get_logger(__name__)


class RateLimitResult:
    def __init__(self, allowed: bool, limit: int, remaining: int, reset_time: int):
        self.allowed = allowed
        self.limit = limit
        self.remaining = remaining
        self.reset_time = reset_time

    @property
    def retry_after(self) -> int:
        return max(0, self.reset_time - int(time.time()))

    def to_headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(self.reset_time),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class RateLimiter:
    """
    Fixed-window limits kept in redis through the `limits` package.
    When the storage is down every request is allowed.
    """

    def __init__(self, storage: Storage | None = None, url: str | None = None):
        self.storage = storage or storage_from_string(
            url or REDIS_URL,
            wrap_exceptions=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
        self.strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, scope: str, identifier: str, limit: int, window_seconds: int) -> RateLimitResult:
        item = RateLimitItemPerSecond(limit, window_seconds)
        try:
            allowed = self.strategy.hit(item, scope, identifier)
            reset_time, remaining = self.strategy.get_window_stats(item, scope, identifier)
        except (StorageError, RedisError) as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return RateLimitResult(True, limit, limit, int(time.time()) + window_seconds)

        return RateLimitResult(allowed, limit, remaining, int(reset_time))
