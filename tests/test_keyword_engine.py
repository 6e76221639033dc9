"""Tests for long-tail generation and keyword collection."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeMetricsSource, FakeSuggestionSource
from longtail_scout.backoff import FailureBackoffGate
from longtail_scout.collectors.fallback import FallbackCollector
from longtail_scout.errors import UpstreamError, ValidationError
from longtail_scout.keyword_engine import (
    MAX_CANDIDATES,
    LongtailGenerator,
    build_keyword,
    collect_keywords,
    dedupe_candidates,
    validate_seed,
)
from longtail_scout.models import (
    CandidateOrigin,
    CompetitionTier,
    KeywordMetrics,
    LongtailCandidate,
    ResultOrigin,
    SourcePlatform,
)

PATTERNS = ['추천', '후기', '가격', '비교']


def candidate(text, order=1, origin=CandidateOrigin.AUTOCOMPLETE):
    return LongtailCandidate(text=text, origin=origin, order=order)


def suggestions(count):
    return [candidate(f'seo tip {i}', order=i) for i in range(1, count + 1)]


def make_generator(source, metrics=None, gate=None, sleep=None):
    return LongtailGenerator(
        source,
        metrics_source=metrics,
        gate=gate,
        fallback=FallbackCollector(patterns=PATTERNS),
        sleep=sleep or MagicMock(),
        enrichment_delay=0.2,
    )


class TestValidateSeed:

    def test_accepts_normal_seed(self):
        assert validate_seed('blog') == 'blog'

    @pytest.mark.parametrize('seed', ['', '   ', None])
    def test_rejects_empty(self, seed):
        with pytest.raises(ValidationError):
            validate_seed(seed)

    def test_rejects_too_long(self):
        with pytest.raises(ValidationError):
            validate_seed('a' * 101)

    def test_accepts_maximum_length(self):
        assert validate_seed('a' * 100) == 'a' * 100


class TestDedupeCandidates:

    def test_case_and_whitespace_insensitive(self):
        items = [
            candidate('SEO', 1),
            candidate('seo', 2),
            candidate(' SEO  optimization', 3),
        ]
        result = dedupe_candidates(items)
        assert [c.text for c in result] == ['SEO', ' SEO  optimization']

    def test_first_seen_wins_across_groups(self):
        items = [
            candidate('seo tools', 1),
            candidate('SEO Tools', 1, origin=CandidateOrigin.RELATED),
        ]
        result = dedupe_candidates(items)
        assert len(result) == 1
        assert result[0].origin is CandidateOrigin.AUTOCOMPLETE

    def test_truncates_to_limit(self):
        assert len(dedupe_candidates(suggestions(30))) == MAX_CANDIDATES

    def test_custom_limit(self):
        assert len(dedupe_candidates(suggestions(5), limit=2)) == 2

    def test_keys_are_unique(self):
        items = [candidate(text) for text in ['a b', 'A  B', 'a b ', 'c']]
        keys = [c.key for c in dedupe_candidates(items)]
        assert len(keys) == len(set(keys))


class TestFallbackCollector:

    def test_three_patterns_in_order(self):
        result = FallbackCollector(patterns=PATTERNS).generate('blog')
        assert [c.text for c in result] == ['blog 추천', 'blog 후기', 'blog 가격']
        assert [c.order for c in result] == [1, 2, 3]
        assert all(c.origin is CandidateOrigin.SYNTHETIC_PATTERN for c in result)

    def test_deterministic(self):
        collector = FallbackCollector(patterns=PATTERNS)
        assert collector.generate('seo') == collector.generate('seo')

    def test_fewer_patterns_than_limit(self):
        result = FallbackCollector(patterns=['review']).generate('seo')
        assert [c.text for c in result] == ['seo review']

    def test_candidates_are_unenriched(self):
        result = FallbackCollector(patterns=PATTERNS).generate('seo')
        assert not any(c.is_enriched for c in result)


class TestGenerateLongtails:

    def test_live_suggestions(self):
        source = FakeSuggestionSource(suggestions(5))
        result = make_generator(source).generate_longtails('seo')

        assert result.origin is ResultOrigin.LIVE_API
        assert result.seed_keyword == 'seo'
        assert result.total_count == 5
        assert source.calls == ['seo']

    def test_live_results_are_deduplicated_and_capped(self):
        items = suggestions(25) + [candidate('SEO TIP 1')]
        result = make_generator(FakeSuggestionSource(items)).generate_longtails('seo')
        assert result.total_count == MAX_CANDIDATES
        assert [c.text for c in result.candidates][:2] == ['seo tip 1', 'seo tip 2']

    def test_empty_live_result_uses_fallback(self):
        result = make_generator(FakeSuggestionSource([])).generate_longtails('blog')

        assert result.origin is ResultOrigin.FALLBACK
        assert [c.text for c in result.candidates] == ['blog 추천', 'blog 후기', 'blog 가격']

    def test_upstream_error_uses_fallback(self, upstream_error):
        gate = FailureBackoffGate(max_failures=3, backoff_unit=1.0)
        source = FakeSuggestionSource(error=upstream_error)

        result = make_generator(source, gate=gate).generate_longtails('blog')

        assert result.origin is ResultOrigin.FALLBACK
        assert result.total_count == 3
        assert gate.state('autocomplete').consecutive_failures == 1

    def test_gated_source_is_not_called(self, clock):
        gate = FailureBackoffGate(max_failures=3, backoff_unit=1.0, clock=clock)
        for _ in range(3):
            gate.record_failure('autocomplete')
        source = FakeSuggestionSource(suggestions(5))

        result = make_generator(source, gate=gate).generate_longtails('blog')

        assert source.calls == []
        assert result.origin is ResultOrigin.FALLBACK
        assert result.total_count == 3
        assert all(
            c.origin is CandidateOrigin.SYNTHETIC_PATTERN for c in result.candidates
        )

    def test_gated_source_falls_back_with_healthy_metrics(self, clock):
        gate = FailureBackoffGate(max_failures=3, backoff_unit=1.0, clock=clock)
        for _ in range(3):
            gate.record_failure('autocomplete')
        source = FakeSuggestionSource(suggestions(5))
        metrics = FakeMetricsSource({
            text: KeywordMetrics(
                keyword=text, volume_pc=500, volume_mobile=700,
                competition_tier=CompetitionTier.LOW,
            )
            for text in ['blog 추천', 'blog 후기', 'blog 가격']
        })

        result = make_generator(source, metrics=metrics, gate=gate).generate_longtails(
            'blog', include_volume=True,
        )

        assert source.calls == []
        assert result.origin is ResultOrigin.FALLBACK
        assert [c.text for c in result.candidates] == ['blog 추천', 'blog 후기', 'blog 가격']
        assert all(
            c.origin is CandidateOrigin.SYNTHETIC_PATTERN for c in result.candidates
        )
        assert metrics.calls == ['blog 추천', 'blog 후기', 'blog 가격']
        assert all(c.search_volume == 1200 for c in result.candidates)

    def test_success_resets_gate(self, clock):
        gate = FailureBackoffGate(max_failures=3, backoff_unit=1.0, clock=clock)
        gate.record_failure('autocomplete')
        gate.record_failure('autocomplete')

        make_generator(FakeSuggestionSource(suggestions(2)), gate=gate).generate_longtails('seo')

        assert gate.state('autocomplete').consecutive_failures == 0

    def test_invalid_seed_raises(self):
        source = FakeSuggestionSource(suggestions(2))
        with pytest.raises(ValidationError):
            make_generator(source).generate_longtails('  ')
        assert source.calls == []

    def test_non_upstream_errors_propagate(self):
        source = FakeSuggestionSource(error=RuntimeError('bug'))
        with pytest.raises(RuntimeError):
            make_generator(source).generate_longtails('seo')

    def test_without_volume_candidates_are_unenriched(self):
        metrics = FakeMetricsSource()
        result = make_generator(
            FakeSuggestionSource(suggestions(3)), metrics=metrics,
        ).generate_longtails('seo')

        assert metrics.calls == []
        assert not any(c.is_enriched for c in result.candidates)


class TestEnrichment:

    def test_first_ten_enriched_with_delay(self):
        items = suggestions(12)
        metrics = FakeMetricsSource({
            c.text: KeywordMetrics(
                keyword=c.text, volume_pc=20, volume_mobile=30,
                competition_tier=CompetitionTier.LOW,
            )
            for c in items
        })
        sleep = MagicMock()

        result = make_generator(
            FakeSuggestionSource(items), metrics=metrics, sleep=sleep,
        ).generate_longtails('seo', include_volume=True)

        assert len(metrics.calls) == 10
        assert sleep.call_count == 10
        sleep.assert_called_with(0.2)

        enriched = result.candidates[:10]
        assert all(c.search_volume == 50 for c in enriched)
        assert all(c.competition_tier is CompetitionTier.LOW for c in enriched)
        assert all(c.score == 75 for c in enriched)
        assert not any(c.is_enriched for c in result.candidates[10:])

    def test_failed_lookup_still_waits(self, upstream_error):
        items = suggestions(3)
        metrics = FakeMetricsSource({
            'seo tip 1': upstream_error,
            'seo tip 2': KeywordMetrics(
                keyword='seo tip 2', volume_pc=6000, volume_mobile=6000,
                competition_tier=CompetitionTier.HIGH,
            ),
        })
        sleep = MagicMock()

        result = make_generator(
            FakeSuggestionSource(items), metrics=metrics, sleep=sleep,
        ).generate_longtails('seo', include_volume=True)

        assert sleep.call_count == 3
        first, second, third = result.candidates
        assert not first.is_enriched
        assert second.search_volume == 12000
        assert second.score == 30
        # No metrics entry for the third keyword
        assert not third.is_enriched
        assert result.origin is ResultOrigin.LIVE_API

    def test_fallback_candidates_are_enriched(self):
        metrics = FakeMetricsSource({
            'blog 추천': KeywordMetrics(
                keyword='blog 추천', volume_pc=10, volume_mobile=20,
                competition_tier=CompetitionTier.MEDIUM,
            ),
        })
        result = make_generator(
            FakeSuggestionSource([]), metrics=metrics,
        ).generate_longtails('blog', include_volume=True)

        assert result.origin is ResultOrigin.FALLBACK
        assert result.candidates[0].score == 45
        assert len(metrics.calls) == 3

    def test_missing_metrics_source_leaves_candidates(self):
        result = make_generator(
            FakeSuggestionSource(suggestions(2)),
        ).generate_longtails('seo', include_volume=True)
        assert not any(c.is_enriched for c in result.candidates)


class TestBuildKeyword:

    def test_scored_record(self):
        keyword = build_keyword(KeywordMetrics(
            keyword='seo', volume_pc=30, volume_mobile=20,
            competition_tier=CompetitionTier.LOW, avg_cpc=350.0,
        ))
        assert keyword.text == 'seo'
        assert keyword.search_volume == 50
        assert keyword.score == 75
        assert keyword.cost_per_click == 350.0
        assert keyword.source_platform is SourcePlatform.PRIMARY_KEYWORD_API

    def test_unknown_tier_recorded_as_medium(self):
        keyword = build_keyword(KeywordMetrics(keyword='seo', volume_pc=50))
        assert keyword.competition_tier is CompetitionTier.MEDIUM
        assert keyword.score == 0


class TestCollectKeywords:

    def metrics(self):
        return {
            'seo': KeywordMetrics(
                keyword='seo', volume_pc=6000, volume_mobile=6000,
                competition_tier=CompetitionTier.HIGH,
            ),
            'blog': KeywordMetrics(
                keyword='blog', volume_pc=20, volume_mobile=30,
                competition_tier=CompetitionTier.LOW,
            ),
        }

    def test_sorted_by_score(self):
        source = FakeMetricsSource(self.metrics())
        results = collect_keywords(['seo', 'blog'], source, sleep=MagicMock())
        assert [k.text for k in results] == ['blog', 'seo']

    def test_delay_between_keywords_only(self):
        sleep = MagicMock()
        collect_keywords(['seo', 'blog', 'missing'], FakeMetricsSource(self.metrics()),
                         sleep=sleep, delay=1.0)
        assert sleep.call_count == 2
        sleep.assert_called_with(1.0)

    def test_failures_and_missing_are_skipped(self, upstream_error):
        data = self.metrics()
        data['seo'] = upstream_error
        results = collect_keywords(['seo', 'blog', 'missing'], FakeMetricsSource(data),
                                   sleep=MagicMock())
        assert [k.text for k in results] == ['blog']

    def test_gate_skips_throttled_source(self, clock, upstream_error):
        gate = FailureBackoffGate(max_failures=2, backoff_unit=1.0, clock=clock)
        source = FakeMetricsSource({'a': upstream_error, 'b': upstream_error})

        results = collect_keywords(['a', 'b', 'c'], source, gate=gate, sleep=MagicMock())

        assert results == []
        assert source.calls == ['a', 'b']

    def test_progress_callback(self):
        progress = MagicMock()
        collect_keywords(['seo', 'blog'], FakeMetricsSource(self.metrics()),
                         sleep=MagicMock(), progress_callback=progress)
        progress.assert_any_call(1, 2, 'seo')
        progress.assert_any_call(2, 2, 'blog')


class TestUpstreamError:

    def test_message_includes_status(self):
        error = UpstreamError(None, 'Timed out')
        assert str(error) == 'Timed out'
        assert str(UpstreamError(500, 'boom')) == '[500] boom'
