"""Long-tail generation and keyword collection engine.

Coordinates suggestion collection, failure backoff, synthetic fallback,
deduplication, optional volume enrichment and scoring. Upstream failures
never reach the caller: they degrade the result to fallback or
unenriched data, reported through the result's origin and the
per-candidate enrichment fields.
"""

import logging
import time
from dataclasses import replace

from longtail_scout.backoff import FailureBackoffGate
from longtail_scout.collectors.fallback import FallbackCollector
from longtail_scout.config import Config
from longtail_scout.errors import UpstreamError, ValidationError
from longtail_scout.models import (
    CollectionResult, CompetitionTier, Keyword, ResultOrigin, SourcePlatform,
    comparison_key,
)
from longtail_scout.scoring import score_metrics

logger = logging.getLogger(__name__)

MAX_SEED_LENGTH = 100
MAX_CANDIDATES = 20
MAX_ENRICHED = 10


def validate_seed(seed):
    """Check a seed keyword and return it unchanged.

    Raises:
        ValidationError: If the seed is empty, blank, or too long.
    """
    if not isinstance(seed, str) or not seed.strip():
        raise ValidationError('Seed keyword must be a non-empty string')
    if len(seed) > MAX_SEED_LENGTH:
        raise ValidationError(
            f'Seed keyword is {len(seed)} characters; maximum is {MAX_SEED_LENGTH}'
        )
    return seed


def dedupe_candidates(candidates, limit=MAX_CANDIDATES):
    """Drop candidates whose comparison key was already seen.

    The first-seen candidate wins and keeps its original text. The
    result is truncated to `limit` entries.
    """
    seen = set()
    unique = []
    for candidate in candidates:
        key = comparison_key(candidate.text)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
        if len(unique) >= limit:
            break
    return unique


class LongtailGenerator:
    """Expands a seed keyword into ranked long-tail candidates.

    Sources are injected: `suggestion_source` needs fetch_suggestions(),
    `metrics_source` needs fetch_keyword_metrics(). The gate may be
    shared between generators running on different threads.
    """

    def __init__(self, suggestion_source, metrics_source=None, gate=None,
                 fallback=None, sleep=time.sleep, enrichment_delay=None):
        """Initialize the generator.

        Args:
            suggestion_source: Autocomplete-capable collector.
            metrics_source: Optional keyword metrics collector for enrichment.
            gate: FailureBackoffGate (a private one is created if omitted).
            fallback: FallbackCollector (default patterns if omitted).
            sleep: Callable used for the pause between enrichment requests.
            enrichment_delay: Seconds between enrichment requests.
        """
        self.suggestion_source = suggestion_source
        self.metrics_source = metrics_source
        self.gate = gate or FailureBackoffGate()
        self.fallback = fallback or FallbackCollector()
        self._sleep = sleep
        self.enrichment_delay = (
            Config.ENRICHMENT_DELAY if enrichment_delay is None else enrichment_delay
        )
        self._source_key = getattr(suggestion_source, 'name', 'autocomplete')

    def generate_longtails(self, seed, include_volume=False):
        """Generate long-tail candidates for a seed keyword.

        Args:
            seed: Seed keyword.
            include_volume: Attach volume, competition and score to the
                first candidates via the metrics source.

        Returns:
            CollectionResult. Origin is LIVE_API when suggestions came from
            the source, FALLBACK when synthetic patterns were used.

        Raises:
            ValidationError: If the seed is empty or too long.
        """
        validate_seed(seed)

        live = self._fetch_live(seed)

        if live:
            origin = ResultOrigin.LIVE_API
            candidates = live
        else:
            origin = ResultOrigin.FALLBACK
            candidates = self.fallback.generate(seed)
            logger.info(f'Using {len(candidates)} fallback candidates for "{seed}"')

        candidates = dedupe_candidates(candidates)

        if include_volume:
            candidates = self._enrich(candidates)

        logger.info(
            f'Long-tail generation for "{seed}": {len(candidates)} candidates '
            f'(source={origin.value}, volume={include_volume})'
        )
        return CollectionResult(
            seed_keyword=seed,
            candidates=tuple(candidates),
            origin=origin,
        )

    def _fetch_live(self, seed):
        """Query the suggestion source through the backoff gate.

        Returns:
            List of candidates, empty when gated, failed or empty.
        """
        if not self.gate.can_call(self._source_key):
            logger.info(
                f'Source "{self._source_key}" is cooling down; skipping live suggestions'
            )
            return []

        try:
            suggestions = self.suggestion_source.fetch_suggestions(seed)
        except UpstreamError as e:
            self.gate.record_failure(self._source_key)
            logger.warning(f'Suggestion fetch failed for "{seed}": {e}')
            return []

        self.gate.record_success(self._source_key)
        return list(suggestions)

    def _enrich(self, candidates):
        """Attach metrics to the first MAX_ENRICHED candidates.

        Requests are sequential with a fixed pause after each one, failed
        ones included. A failed lookup leaves that candidate unenriched.
        """
        if self.metrics_source is None:
            logger.warning('Volume enrichment requested but no metrics source configured')
            return candidates

        enriched = []
        for candidate in candidates[:MAX_ENRICHED]:
            try:
                metrics = self.metrics_source.fetch_keyword_metrics(candidate.text)
            except UpstreamError as e:
                logger.warning(f'Volume lookup failed for "{candidate.text}": {e}')
                metrics = None
            finally:
                self._sleep(self.enrichment_delay)

            if metrics is None:
                enriched.append(candidate)
                continue

            enriched.append(replace(
                candidate,
                search_volume=metrics.total_volume,
                competition_tier=metrics.competition_tier,
                score=score_metrics(metrics),
            ))

        return enriched + list(candidates[MAX_ENRICHED:])


def build_keyword(metrics):
    """Turn keyword tool metrics into a scored Keyword record.

    Keywords without a reported competition tier are recorded as medium,
    while the score still treats the tier as unknown.
    """
    return Keyword(
        text=metrics.keyword,
        search_volume=metrics.total_volume,
        competition_tier=metrics.competition_tier or CompetitionTier.MEDIUM,
        cost_per_click=metrics.avg_cpc,
        score=score_metrics(metrics),
        source_platform=SourcePlatform.PRIMARY_KEYWORD_API,
    )


def collect_keywords(keywords, metrics_source, gate=None, sleep=time.sleep,
                     delay=None, progress_callback=None):
    """Collect and score metrics for a list of keywords.

    Keywords are processed one at a time with a fixed pause between
    them. Failed or empty lookups are skipped.

    Args:
        keywords: Iterable of keyword strings.
        metrics_source: Collector with fetch_keyword_metrics().
        gate: Optional FailureBackoffGate guarding the metrics source.
        sleep: Callable used for the pause between keywords.
        delay: Seconds between keywords. Defaults to Config.COLLECTION_DELAY.
        progress_callback: Optional callable(completed, total, keyword).

    Returns:
        List of Keyword records sorted by score, highest first.
    """
    keywords = list(keywords)
    gate = gate or FailureBackoffGate()
    delay = Config.COLLECTION_DELAY if delay is None else delay
    source_key = getattr(metrics_source, 'name', 'metrics')
    collected = []

    for i, keyword in enumerate(keywords):
        if i > 0:
            sleep(delay)

        if not gate.can_call(source_key):
            logger.info(f'Source "{source_key}" is cooling down; skipping "{keyword}"')
        else:
            try:
                metrics = metrics_source.fetch_keyword_metrics(keyword)
            except UpstreamError as e:
                gate.record_failure(source_key)
                logger.error(f'Error collecting data for "{keyword}": {e}')
            else:
                gate.record_success(source_key)
                if metrics is not None:
                    collected.append(build_keyword(metrics))

        if progress_callback:
            progress_callback(i + 1, len(keywords), keyword)

    collected.sort(key=lambda kw: kw.score, reverse=True)
    logger.info(f'Collected {len(collected)} of {len(keywords)} keywords')
    return collected
