"""Search autocomplete suggestion collector.

Queries the search engine's autocomplete endpoint for a seed keyword.
The payload carries two groups of suggestions: what users type next
(autocomplete) and related searches. Both reflect actual search
behaviour and become long-tail candidates.
"""

import logging

from longtail_scout.collectors.base import BaseCollector
from longtail_scout.config import Config
from longtail_scout.errors import UpstreamError
from longtail_scout.models import CandidateOrigin, LongtailCandidate

logger = logging.getLogger(__name__)

# Suggestion groups in payload order
GROUP_ORIGINS = (CandidateOrigin.AUTOCOMPLETE, CandidateOrigin.RELATED)


class AutocompleteCollector(BaseCollector):
    """Long-tail suggestions from the search autocomplete endpoint."""

    name = 'autocomplete'
    rate_limit = Config.AUTOCOMPLETE_RATE_LIMIT

    def __init__(self, url=None, session=None, timeout=None):
        self.url = url or Config.AUTOCOMPLETE_URL
        super().__init__(session=session, timeout=timeout)

    def _build_params(self, keyword):
        return {
            'q': keyword,
            'con': '0',
            'frm': 'nv',
            'ans': '2',
            'r_format': 'json',
            'r_enc': 'UTF-8',
            'st': '100',
            'q_enc': 'UTF-8',
        }

    def fetch_suggestions(self, keyword):
        """Fetch autocomplete and related suggestions for a keyword.

        Args:
            keyword: Seed keyword.

        Returns:
            List of LongtailCandidate in payload order. Autocomplete
            entries come first, then related searches, each numbered
            from 1 within its group. Empty when the endpoint has nothing.

        Raises:
            UpstreamError: On request failure or a malformed payload.
        """
        data = self._get(
            self.url,
            params=self._build_params(keyword),
            headers={'Referer': 'https://search.naver.com'},
        )
        candidates = parse_suggestions(data)

        logger.debug(f'"{keyword}" -> {len(candidates)} suggestions')
        return candidates


def parse_suggestions(data):
    """Convert an autocomplete payload into LongtailCandidate records.

    Raises:
        UpstreamError: If the payload does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise UpstreamError(200, 'Autocomplete returned a non-object payload')

    groups = data.get('items') or []
    if not isinstance(groups, list):
        raise UpstreamError(200, 'Autocomplete "items" is not a list')

    candidates = []
    for origin, rows in zip(GROUP_ORIGINS, groups):
        if not isinstance(rows, list):
            raise UpstreamError(200, f'Autocomplete {origin.value} group is not a list')

        for position, row in enumerate(rows, 1):
            # Each row is a list whose first element is the suggestion text
            if not isinstance(row, list) or not row or not isinstance(row[0], str):
                raise UpstreamError(200, f'Malformed autocomplete row: {row!r}')
            if not row[0].strip():
                continue
            candidates.append(
                LongtailCandidate(text=row[0], origin=origin, order=position)
            )

    return candidates
