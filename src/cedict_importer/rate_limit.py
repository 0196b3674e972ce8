"""Upload Rate Limiting

Fixed-window upload allowance keyed by client, built on ``limits``. An
instance is created once and handed to the upload entry points, which
decide when it is reset.
"""

import logging
import time
from dataclasses import dataclass

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from .config import UPLOAD_RATE_LIMIT_MAX, UPLOAD_RATE_LIMIT_WINDOW_SECONDS
from .errors import RateLimitExceededError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many uploads, please try again later"
UPLOAD_NAMESPACE = "cedict_upload"


@dataclass
class RateLimitStatus:
    total_hits: int
    remaining: int
    reset_at: float


class UploadRateLimiter:
    def __init__(
        self,
        max_hits: int = UPLOAD_RATE_LIMIT_MAX,
        window_seconds: float = UPLOAD_RATE_LIMIT_WINDOW_SECONDS,
    ) -> None:
        self.max_hits = max_hits
        self.window_seconds = int(window_seconds)
        self.item = parse(f"{max_hits} per {self.window_seconds} seconds")
        self.storage = MemoryStorage()
        self.limiter = FixedWindowRateLimiter(self.storage)

    def hit(self, key: str) -> RateLimitStatus:
        """
        Count one upload for ``key``.

        Raises:
            RateLimitExceededError: once the count passes max_hits within
                the current window
        """
        allowed = self.limiter.hit(self.item, UPLOAD_NAMESPACE, key)
        stats = self.limiter.get_window_stats(self.item, UPLOAD_NAMESPACE, key)

        if not allowed:
            retry_after = max(0.0, stats.reset_time - time.time())
            logger.warning("Upload rate limit exceeded for %s", key)
            raise RateLimitExceededError(RATE_LIMIT_MESSAGE, retry_after=retry_after)

        return RateLimitStatus(
            total_hits=self.max_hits - stats.remaining,
            remaining=stats.remaining,
            reset_at=stats.reset_time,
        )

    def reset(self) -> None:
        """Forget every client's count."""
        self.storage.reset()
        logger.debug("Upload rate-limit counters cleared")
