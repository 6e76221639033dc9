"""Base collector for Longtail Scout's upstream sources.

Every network-backed collector inherits from BaseCollector, which
registers a per-source rate limiter and funnels requests through the
shared HTTP client. Collectors are constructed explicitly and passed to
the engine, so tests can substitute their own doubles.
"""

import logging

from longtail_scout.http_client import fetch
from longtail_scout.rate_limiter import registry as rate_registry

logger = logging.getLogger(__name__)


class BaseCollector:
    """Common plumbing for upstream source collectors.

    Subclasses set `name` and `rate_limit` (seconds between requests)
    and call `_get()` to issue rate-limited GET requests. Failures
    surface as UpstreamError from the HTTP client.

    Example:
        class MyCollector(BaseCollector):
            name = 'my_source'
            rate_limit = 0.5

            def fetch_things(self, query):
                data = self._get('https://example.com/api', {'q': query})
                return data.get('things', [])
    """

    name: str = 'base'
    rate_limit: float = 1.0

    def __init__(self, session=None, timeout=None):
        """Initialize shared request settings.

        Args:
            session: Optional requests.Session (shared session otherwise).
            timeout: Request timeout in seconds (Config default otherwise).
        """
        self._session = session
        self._timeout = timeout
        rate_registry.get_limiter(self.name, rate=self.rate_limit)

    def _get(self, url, params=None, headers=None):
        """Issue a rate-limited GET request and return decoded JSON."""
        rate_registry.acquire(self.name)
        return fetch(
            url,
            params=params,
            headers=headers,
            timeout=self._timeout,
            session=self._session,
        )

    def is_available(self):
        """Check if this collector is properly configured and ready to use.

        Returns:
            True if the collector can operate. Override for collectors
            that require API keys.
        """
        return True

    def __repr__(self):
        available = 'available' if self.is_available() else 'unavailable'
        return f'<{self.__class__.__name__} ({available})>'
