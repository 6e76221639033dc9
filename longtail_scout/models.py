"""Record types produced and consumed by the collection engine.

Provider payloads are converted into these records at the collector
boundary, so scoring and orchestration never deal with raw JSON.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class CompetitionTier(str, Enum):
    """Coarse advertiser-competition bucket."""

    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class SourcePlatform(str, Enum):
    """Provider a keyword record was derived from."""

    PRIMARY_KEYWORD_API = 'searchad'
    TRENDS_API = 'trends'


class CandidateOrigin(str, Enum):
    """How a long-tail candidate was discovered."""

    AUTOCOMPLETE = 'autocomplete'
    RELATED = 'related'
    SYNTHETIC_PATTERN = 'pattern'


class ResultOrigin(str, Enum):
    """Which path produced a collection result."""

    LIVE_API = 'api'
    FALLBACK = 'fallback'


def comparison_key(text):
    """Return the dedup key for a keyword: trimmed, lowercased, single-spaced."""
    return ' '.join(text.split()).lower()


@dataclass(frozen=True)
class KeywordMetrics:
    """Volume and competition data for a single keyword."""

    keyword: str
    volume_pc: int = 0
    volume_mobile: int = 0
    competition_tier: Optional[CompetitionTier] = None
    avg_cpc: float = 0.0

    @property
    def total_volume(self):
        return self.volume_pc + self.volume_mobile


@dataclass(frozen=True)
class Keyword:
    """A scored keyword ready for ranking or storage."""

    text: str
    search_volume: int
    competition_tier: CompetitionTier
    cost_per_click: float
    score: int
    source_platform: SourcePlatform
    metadata: dict = field(default_factory=dict, compare=False)

    def to_dict(self):
        return {
            'keyword': self.text,
            'search_volume': self.search_volume,
            'competition_level': self.competition_tier.value,
            'cpc': self.cost_per_click,
            'score': self.score,
            'platform': self.source_platform.value,
            'metadata': self.metadata,
        }


@dataclass(frozen=True)
class LongtailCandidate:
    """A derived long-tail phrase, optionally enriched with metrics."""

    text: str
    origin: CandidateOrigin
    order: int
    search_volume: Optional[int] = None
    competition_tier: Optional[CompetitionTier] = None
    score: Optional[int] = None

    @property
    def key(self):
        return comparison_key(self.text)

    @property
    def is_enriched(self):
        return self.search_volume is not None

    def to_dict(self):
        return {
            'keyword': self.text,
            'type': self.origin.value,
            'order': self.order,
            'search_volume': self.search_volume,
            'competition': (
                self.competition_tier.value if self.competition_tier else None
            ),
            'score': self.score,
        }


@dataclass(frozen=True)
class CollectionResult:
    """Outcome of expanding one seed keyword."""

    seed_keyword: str
    candidates: Tuple[LongtailCandidate, ...]
    origin: ResultOrigin

    @property
    def total_count(self):
        return len(self.candidates)

    def to_dict(self):
        return {
            'parent_keyword': self.seed_keyword,
            'longtails': [c.to_dict() for c in self.candidates],
            'total_count': self.total_count,
            'source': self.origin.value,
        }


@dataclass(frozen=True)
class TrendItem:
    """One entry of a bulk trending-searches payload."""

    query: str
    traffic: Union[str, int, float, None] = None
    explore_link: str = ''
    serpapi_link: str = ''
    related_queries: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TrendsSnapshot:
    """Ordered trending searches as returned by the trends source."""

    date: str
    trends: Tuple[TrendItem, ...]
    search_id: Optional[str] = None


@dataclass(frozen=True)
class InterestPoint:
    timestamp: str
    value: int


@dataclass(frozen=True)
class InterestOverTime:
    """Relative search interest for a keyword over a date range."""

    keyword: str
    points: Tuple[InterestPoint, ...] = ()

    @property
    def average(self):
        if not self.points:
            return 0.0
        return sum(p.value for p in self.points) / len(self.points)
