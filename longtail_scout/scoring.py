"""Search volume parsing and competition-based keyword scoring.

The keyword tool reports monthly volumes either as exact counts or as
open-ended bounds ("< 10") for very small or very large keywords. These
helpers turn any of those encodings into an integer estimate and combine
it with the competition tier into a 0-100 quality score.
"""

import logging
import re

from longtail_scout.models import CompetitionTier

logger = logging.getLogger(__name__)

# Estimate for "<" bounds that carry no number
MIN_VOLUME_ESTIMATE = 5

# Estimate for ">" bounds that carry no number
OPEN_VOLUME_ESTIMATE = 1000

TIER_BASE_SCORES = {
    CompetitionTier.LOW: 85,
    CompetitionTier.MEDIUM: 55,
    CompetitionTier.HIGH: 25,
}

LOW_VOLUME_THRESHOLD = 100
HIGH_VOLUME_THRESHOLD = 10000

# Provider labels for competition, Korean as returned by the keyword tool
TIER_LABELS = {
    '낮음': CompetitionTier.LOW,
    '중간': CompetitionTier.MEDIUM,
    '높음': CompetitionTier.HIGH,
    'low': CompetitionTier.LOW,
    'medium': CompetitionTier.MEDIUM,
    'mid': CompetitionTier.MEDIUM,
    'high': CompetitionTier.HIGH,
}

_NON_DIGITS = re.compile(r'[^\d]')


def _digits(text):
    digits = _NON_DIGITS.sub('', text)
    return int(digits) if digits else None


def parse_volume(value):
    """Convert a volume value from the keyword tool into an integer.

    Args:
        value: int, float, None, or a string such as '1,234', '< 10'
            or '> 1000'.

    Returns:
        Non-negative integer estimate. 0 for absent or unparseable input.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        return max(int(value), 0)

    if not isinstance(value, str):
        return 0

    text = value.strip()
    if not text:
        return 0

    if text.startswith('<'):
        bound = _digits(text)
        return bound // 2 if bound is not None else MIN_VOLUME_ESTIMATE

    if text.startswith('>'):
        bound = _digits(text)
        return int(bound * 1.5) if bound is not None else OPEN_VOLUME_ESTIMATE

    exact = _digits(text)
    return exact if exact is not None else 0


def parse_competition_tier(label):
    """Map a provider competition label to a CompetitionTier.

    Returns:
        CompetitionTier, or None when the label is missing or unknown.
    """
    if isinstance(label, CompetitionTier):
        return label
    if not isinstance(label, str):
        return None
    tier = TIER_LABELS.get(label.strip().lower())
    if tier is None and label.strip():
        logger.debug(f'Unknown competition label: "{label}"')
    return tier


def score_competition(tier, total_volume):
    """Score a keyword from its competition tier and combined volume.

    Base score: Low 85, Medium 55, High 25, unknown 0. Volumes under 100
    lose 10 points; otherwise volumes over 10,000 gain 5.

    Args:
        tier: CompetitionTier or None.
        total_volume: Sum of all channel volumes (e.g. desktop + mobile).

    Returns:
        Integer score clamped to [0, 100].
    """
    score = TIER_BASE_SCORES.get(tier, 0)

    if total_volume < LOW_VOLUME_THRESHOLD:
        score -= 10
    elif total_volume > HIGH_VOLUME_THRESHOLD:
        score += 5

    return max(0, min(100, score))


def score_metrics(metrics):
    """Score a KeywordMetrics record."""
    return score_competition(metrics.competition_tier, metrics.total_volume)
