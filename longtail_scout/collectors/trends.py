"""Google Trends collector via SerpAPI.

Provides trending searches (daily and realtime), interest over time for
a keyword, and related queries. Requires SERPAPI_KEY.
"""

import logging
from datetime import datetime, timezone

from longtail_scout.collectors.base import BaseCollector
from longtail_scout.config import Config
from longtail_scout.errors import ConfigurationError, UpstreamError
from longtail_scout.models import (
    InterestOverTime, InterestPoint, TrendItem, TrendsSnapshot,
)

logger = logging.getLogger(__name__)

TRENDING_NOW_ENGINE = 'google_trends_trending_now'
TRENDS_ENGINE = 'google_trends'

# Lookback windows (hours) for the trending-now engine
DAILY_WINDOW_HOURS = 24
REALTIME_WINDOW_HOURS = 4


class TrendsCollector(BaseCollector):
    """SerpAPI wrapper for Google Trends endpoints."""

    name = 'serpapi'
    rate_limit = Config.SERPAPI_RATE_LIMIT

    def __init__(self, api_key=None, geo=None, url=None, session=None,
                 timeout=None):
        """Initialize with configuration.

        Args:
            api_key: SerpAPI key (defaults to Config).
            geo: Country code for trends (defaults to Config.TRENDS_GEO).
            url: SerpAPI search endpoint (defaults to Config).
            session: Optional requests.Session.
            timeout: Request timeout in seconds.

        Raises:
            ConfigurationError: If no API key is available.
        """
        self._api_key = api_key or Config.SERPAPI_KEY
        if not self._api_key:
            raise ConfigurationError('SerpAPI not configured. Set SERPAPI_KEY in .env.')
        self.geo = geo or Config.TRENDS_GEO
        self.url = url or Config.SERPAPI_URL
        super().__init__(session=session, timeout=timeout)

    def _search(self, **params):
        """Run a SerpAPI search and return the payload dict."""
        params.update({'api_key': self._api_key, 'geo': self.geo})
        data = self._get(self.url, params=params)

        if not isinstance(data, dict):
            raise UpstreamError(200, 'SerpAPI returned a non-object payload')
        if data.get('error'):
            raise UpstreamError(200, f'SerpAPI error: {data["error"]}')
        return data

    def fetch_daily_trends(self):
        """Collect searches trending over the last day."""
        return self._fetch_trending(DAILY_WINDOW_HOURS)

    def fetch_realtime_trends(self):
        """Collect searches trending over the last few hours."""
        return self._fetch_trending(REALTIME_WINDOW_HOURS)

    def _fetch_trending(self, hours):
        logger.info(f'Collecting Google Trends trending searches ({hours}h, {self.geo})')
        data = self._search(engine=TRENDING_NOW_ENGINE, hours=hours)

        searches = data.get('trending_searches') or data.get('daily_searches') or []
        if not isinstance(searches, list):
            raise UpstreamError(200, 'SerpAPI trending searches is not a list')

        trends = []
        for item in searches:
            trend = _parse_trend_item(item)
            if trend is not None:
                trends.append(trend)

        metadata = data.get('search_metadata') or {}
        if not isinstance(metadata, dict):
            raise UpstreamError(200, 'SerpAPI search_metadata is not an object')

        snapshot = TrendsSnapshot(
            date=metadata.get('created_at') or datetime.now(timezone.utc).isoformat(),
            trends=tuple(trends),
            search_id=metadata.get('id'),
        )
        logger.info(f'{len(snapshot.trends)} trends collected')
        return snapshot

    def fetch_keyword_metrics(self, keyword, date_range='now 7-d'):
        """Get relative search interest over time for a keyword.

        Args:
            keyword: Keyword to look up.
            date_range: SerpAPI date expression (e.g. 'now 7-d', 'today 12-m').

        Returns:
            InterestOverTime, with no points when Trends has no data.
        """
        data = self._search(
            engine=TRENDS_ENGINE, q=keyword, data_type='TIMESERIES', date=date_range,
        )
        interest = data.get('interest_over_time') or {}
        if not isinstance(interest, dict):
            raise UpstreamError(200, 'SerpAPI interest_over_time is not an object')

        timeline = interest.get('timeline_data') or []
        if not isinstance(timeline, list):
            raise UpstreamError(200, 'SerpAPI timeline_data is not a list')

        points = []
        for row in timeline:
            if not isinstance(row, dict):
                raise UpstreamError(200, f'Malformed timeline row: {row!r}')
            values = row.get('values') or [{}]
            if not isinstance(values, list):
                raise UpstreamError(200, f'Malformed timeline values: {values!r}')
            first = values[0] if isinstance(values[0], dict) else {}
            points.append(InterestPoint(
                timestamp=str(row.get('timestamp', '')),
                value=_to_int(first.get('extracted_value', first.get('value'))),
            ))

        return InterestOverTime(keyword=keyword, points=tuple(points))

    def fetch_related_queries(self, keyword):
        """Get the top related queries for a keyword.

        Returns:
            List of query strings.
        """
        data = self._search(engine=TRENDS_ENGINE, q=keyword, data_type='RELATED_QUERIES')
        related = data.get('related_queries') or {}
        if not isinstance(related, dict):
            raise UpstreamError(200, 'SerpAPI related_queries is not an object')

        top = related.get('top') or []
        if not isinstance(top, list):
            raise UpstreamError(200, 'SerpAPI related_queries.top is not a list')
        return [row['query'] for row in top if isinstance(row, dict) and row.get('query')]


def _parse_trend_item(item):
    """Convert a trending search entry to a TrendItem, or None if unusable."""
    if not isinstance(item, dict):
        raise UpstreamError(200, f'Malformed trending search entry: {item!r}')

    query = item.get('query') or item.get('search')
    if not query:
        logger.debug(f'Skipping trend entry without query: {item!r}')
        return None

    traffic = item.get('traffic')
    if traffic is None:
        traffic = item.get('search_volume')

    related = []
    for entry in item.get('related_queries') or item.get('trend_breakdown') or []:
        if isinstance(entry, dict) and entry.get('query'):
            related.append(entry['query'])
        elif isinstance(entry, str):
            related.append(entry)

    return TrendItem(
        query=query,
        traffic=traffic,
        explore_link=item.get('explore_link') or '',
        serpapi_link=(
            item.get('serpapi_link') or item.get('serpapi_google_trends_link') or ''
        ),
        related_queries=tuple(related),
    )


def _to_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
