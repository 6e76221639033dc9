"""Synthetic long-tail candidates for when live sources are unavailable."""

from longtail_scout.config import Config
from longtail_scout.models import CandidateOrigin, LongtailCandidate

DEFAULT_LIMIT = 3


class FallbackCollector:
    """Appends a fixed list of suffixes to the seed keyword.

    Deterministic and offline: the same seed always yields the same
    candidates in the same order.
    """

    def __init__(self, patterns=None, limit=DEFAULT_LIMIT):
        self.patterns = tuple(patterns if patterns is not None else Config.FALLBACK_PATTERNS)
        self.limit = limit

    def generate(self, seed):
        """Build up to `limit` pattern candidates for a seed.

        Returns:
            List of LongtailCandidate with origin SYNTHETIC_PATTERN,
            numbered from 1.
        """
        return [
            LongtailCandidate(
                text=f'{seed} {pattern}',
                origin=CandidateOrigin.SYNTHETIC_PATTERN,
                order=position,
            )
            for position, pattern in enumerate(self.patterns[:self.limit], 1)
        ]
