"""SearchAd keyword tool integration.

Provides monthly search volume (desktop and mobile), competition tier
and average CPC for keywords via the paid-search advertiser API.

Every request carries an HMAC-SHA256 signature over the timestamp,
HTTP method and URI, base64-encoded in the X-Signature header.
Credentials are required at construction time.
"""

import base64
import hashlib
import hmac
import logging
import time

from longtail_scout.collectors.base import BaseCollector
from longtail_scout.config import Config
from longtail_scout.errors import ConfigurationError, UpstreamError
from longtail_scout.models import KeywordMetrics
from longtail_scout.scoring import parse_competition_tier, parse_volume

logger = logging.getLogger(__name__)

KEYWORD_TOOL_URI = '/keywordstool'


def sign_request(timestamp, method, uri, secret_key):
    """Build the request signature expected by the keyword tool.

    Args:
        timestamp: Millisecond epoch timestamp as a string.
        method: HTTP method, e.g. 'GET'.
        uri: Request path without host or query, e.g. '/keywordstool'.
        secret_key: Account secret.

    Returns:
        Base64-encoded HMAC-SHA256 of "{timestamp}.{method}.{uri}".
    """
    message = f'{timestamp}.{method}.{uri}'
    digest = hmac.new(
        secret_key.encode('utf-8'), message.encode('utf-8'), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode('ascii')


def _match_key(keyword):
    # The keyword tool echoes keywords without spaces and in upper case
    return ''.join(keyword.split()).lower()


class SearchAdCollector(BaseCollector):
    """Keyword metrics from the SearchAd keyword tool."""

    name = 'searchad'
    rate_limit = Config.SEARCHAD_RATE_LIMIT

    def __init__(self, api_key=None, secret_key=None, customer_id=None,
                 base_url=None, session=None, timeout=None, clock=time.time):
        """Initialize with credentials.

        Args:
            api_key: Access license key (defaults to Config).
            secret_key: Signing secret (defaults to Config).
            customer_id: Advertiser customer ID (defaults to Config).
            base_url: API host (defaults to Config).
            session: Optional requests.Session.
            timeout: Request timeout in seconds.
            clock: Callable returning epoch seconds, used for X-Timestamp.

        Raises:
            ConfigurationError: If any credential is missing.
        """
        self._api_key = api_key or Config.SEARCHAD_API_KEY
        self._secret_key = secret_key or Config.SEARCHAD_SECRET_KEY
        self._customer_id = customer_id or Config.SEARCHAD_CUSTOMER_ID
        self.base_url = (base_url or Config.SEARCHAD_BASE_URL).rstrip('/')
        self._clock = clock

        missing = [
            env for env, value in (
                ('SEARCHAD_API_KEY', self._api_key),
                ('SEARCHAD_SECRET_KEY', self._secret_key),
                ('SEARCHAD_CUSTOMER_ID', self._customer_id),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(
                f'SearchAd API not configured. Set {", ".join(missing)} in .env.'
            )

        super().__init__(session=session, timeout=timeout)

    def _get_headers(self, method, uri):
        """Build signed request headers."""
        timestamp = str(int(self._clock() * 1000))
        return {
            'Content-Type': 'application/json; charset=UTF-8',
            'X-Timestamp': timestamp,
            'X-API-KEY': self._api_key,
            'X-Customer': str(self._customer_id),
            'X-Signature': sign_request(timestamp, method, uri, self._secret_key),
        }

    def _query_keyword_tool(self, keyword):
        """Fetch the raw keyword list for a hint keyword.

        Returns:
            List of keyword entry dicts.

        Raises:
            UpstreamError: On request failure or an unexpected payload shape.
        """
        params = {
            'hintKeywords': ''.join(keyword.split()),
            'showDetail': '1',
        }
        data = self._get(
            f'{self.base_url}{KEYWORD_TOOL_URI}',
            params=params,
            headers=self._get_headers('GET', KEYWORD_TOOL_URI),
        )

        if not isinstance(data, dict):
            raise UpstreamError(200, 'Keyword tool returned a non-object payload')

        entries = data.get('keywordList') or []
        if not isinstance(entries, list):
            raise UpstreamError(200, 'Keyword tool "keywordList" is not a list')

        return [entry for entry in entries if isinstance(entry, dict)]

    @staticmethod
    def _to_metrics(entry):
        """Convert a keyword tool entry into KeywordMetrics."""
        keyword = entry.get('relKeyword')
        if not isinstance(keyword, str) or not keyword.strip():
            raise UpstreamError(200, f'Keyword tool entry missing relKeyword: {entry!r}')

        try:
            avg_cpc = float(entry.get('avgCpc') or 0)
        except (TypeError, ValueError):
            avg_cpc = 0.0

        return KeywordMetrics(
            keyword=keyword,
            volume_pc=parse_volume(entry.get('monthlyPcQcCnt')),
            volume_mobile=parse_volume(entry.get('monthlyMobileQcCnt')),
            competition_tier=parse_competition_tier(entry.get('compIdx')),
            avg_cpc=max(avg_cpc, 0.0),
        )

    def fetch_keyword_metrics(self, keyword):
        """Get volume and competition data for a single keyword.

        Args:
            keyword: Keyword to look up.

        Returns:
            KeywordMetrics, or None when the tool has no entry for it.

        Raises:
            UpstreamError: On request failure or malformed payload.
        """
        target = _match_key(keyword)
        for entry in self._query_keyword_tool(keyword):
            if _match_key(str(entry.get('relKeyword', ''))) == target:
                metrics = self._to_metrics(entry)
                logger.debug(
                    f'SearchAd metrics for "{keyword}": '
                    f'{metrics.total_volume} searches, {metrics.competition_tier}'
                )
                return metrics

        logger.info(f'SearchAd has no data for "{keyword}"')
        return None

    def fetch_related_keywords(self, keyword, limit=10):
        """Get keywords the tool considers related to the given one.

        Args:
            keyword: Seed keyword.
            limit: Maximum number of related keywords.

        Returns:
            List of KeywordMetrics, excluding the seed itself.

        Raises:
            UpstreamError: On request failure or malformed payload.
        """
        target = _match_key(keyword)
        results = []
        for entry in self._query_keyword_tool(keyword):
            if _match_key(str(entry.get('relKeyword', ''))) == target:
                continue
            results.append(self._to_metrics(entry))
            if len(results) >= limit:
                break

        logger.info(f'SearchAd related keywords for "{keyword}": {len(results)} found')
        return results
