"""Token bucket rate limiting for outbound source requests.

Each upstream source (autocomplete, keyword tool, trends) gets its own
bucket, configured in seconds between requests. Thread-safe so seeds
collected on parallel threads still share one pace per source.
"""

import time
import threading
import logging

logger = logging.getLogger(__name__)


class TokenBucket:
    """Token bucket rate limiter.

    Allows bursting up to `capacity` requests, then enforces
    a sustained rate of `tokens_per_second`. A rate of None disables
    limiting.
    """

    def __init__(self, tokens_per_second, capacity=1, clock=time.monotonic,
                 sleep=time.sleep):
        self.tokens_per_second = tokens_per_second
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = capacity
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self):
        now = self._clock()
        elapsed = now - self._last_refill
        self._tokens = min(self.capacity, self._tokens + elapsed * self.tokens_per_second)
        self._last_refill = now

    def acquire(self):
        """Take a token, sleeping until one is available.

        Returns:
            Seconds spent waiting.
        """
        if self.tokens_per_second is None:
            return 0.0

        waited = 0.0
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return waited
                wait_time = (1 - self._tokens) / self.tokens_per_second

            logger.debug(f'Rate limiter waiting {wait_time:.2f}s for token')
            # Sleep outside the lock so other sources are not blocked
            self._sleep(wait_time)
            waited += wait_time


class RateLimiterRegistry:
    """Registry of rate limiters keyed by source name."""

    def __init__(self):
        self._limiters = {}
        self._lock = threading.Lock()

    def get_limiter(self, source, rate=None):
        """Get or create the limiter for a source.

        Args:
            source: Source name (e.g. 'autocomplete', 'searchad').
            rate: Seconds between requests. Required on first use.

        Returns:
            TokenBucket for the source.
        """
        with self._lock:
            if source not in self._limiters:
                if rate is None:
                    raise ValueError(
                        f'Rate must be specified when creating limiter for "{source}"'
                    )
                tokens_per_second = 1.0 / rate if rate > 0 else None
                self._limiters[source] = TokenBucket(tokens_per_second)
                logger.debug(
                    f'Created rate limiter for "{source}": {rate:.2f}s between requests'
                )
            return self._limiters[source]

    def acquire(self, source):
        """Block until the named source may send another request."""
        limiter = self._limiters.get(source)
        if limiter is None:
            raise ValueError(f'No rate limiter registered for "{source}"')
        return limiter.acquire()

    def reset(self):
        """Drop all limiters. Used by tests."""
        with self._lock:
            self._limiters.clear()


# Global registry instance
registry = RateLimiterRegistry()
