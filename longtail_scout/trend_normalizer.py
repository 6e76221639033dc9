"""Normalization of bulk trending searches into scored Keyword records.

Trends carry no competition data or CPC, so competition is estimated
from traffic and the score combines trend rank with a traffic step.
"""

import logging
import re

from longtail_scout.models import CompetitionTier, Keyword, SourcePlatform

logger = logging.getLogger(__name__)

# (minimum traffic, points), checked in order
TRAFFIC_SCORE_TIERS = [
    (1_000_000, 50),
    (500_000, 40),
    (100_000, 30),
    (50_000, 20),
    (10_000, 10),
]
MIN_TRAFFIC_SCORE = 5

MULTIPLIERS = {'K': 1_000, 'M': 1_000_000}

_LEADING_NUMBER = re.compile(r'(\d+(?:\.\d+)?|\.\d+)\s*([KM](?![A-Za-z]))?')


def parse_traffic(traffic):
    """Convert a traffic value such as '100K+' or '2M+' into an integer.

    Numbers pass through, negatives clamped to 0. Text after the leading
    number is ignored. Missing, 'N/A' or unparseable values give 0.
    """
    if traffic is None or isinstance(traffic, bool):
        return 0
    if isinstance(traffic, (int, float)):
        return max(int(traffic), 0)
    if not isinstance(traffic, str):
        return 0

    value = traffic.replace('+', '').replace(',', '').strip()
    if not value or value.upper() == 'N/A':
        return 0

    # Only the leading number and its unit count, so '20K searches' is 20K
    match = _LEADING_NUMBER.match(value)
    if match is None:
        logger.debug(f'Unparseable traffic value: "{traffic}"')
        return 0

    number, unit = match.groups()
    return int(round(float(number) * MULTIPLIERS.get(unit, 1)))


def estimate_competition(traffic):
    """Infer a competition tier from traffic volume."""
    if traffic >= 1_000_000:
        return CompetitionTier.HIGH
    if traffic >= 100_000:
        return CompetitionTier.MEDIUM
    return CompetitionTier.LOW


def calculate_trend_score(rank, traffic):
    """Score a trend from its zero-based rank and traffic.

    Rank contributes max(50 - rank * 5, 0); traffic contributes 5 to 50.
    """
    rank_score = max(50 - rank * 5, 0)

    traffic_score = MIN_TRAFFIC_SCORE
    for threshold, points in TRAFFIC_SCORE_TIERS:
        if traffic >= threshold:
            traffic_score = points
            break

    return rank_score + traffic_score


def normalize_trends(trends):
    """Convert ordered TrendItems into Keyword records.

    Args:
        trends: Sequence of TrendItem in trend rank order.

    Returns:
        List of Keyword records in the same order.
    """
    keywords = []
    for rank, trend in enumerate(trends):
        traffic = parse_traffic(trend.traffic)
        keywords.append(Keyword(
            text=trend.query,
            search_volume=traffic,
            competition_tier=estimate_competition(traffic),
            cost_per_click=0.0,
            score=calculate_trend_score(rank, traffic),
            source_platform=SourcePlatform.TRENDS_API,
            metadata={
                'related_queries': list(trend.related_queries),
                'explore_link': trend.explore_link,
                'serpapi_link': trend.serpapi_link,
                'traffic_formatted': trend.traffic,
            },
        ))
    return keywords
