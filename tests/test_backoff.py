"""Tests for the failure backoff gate."""

import threading

from longtail_scout.backoff import FailureBackoffGate, FailureState


def make_gate(clock):
    return FailureBackoffGate(max_failures=3, backoff_unit=1.0, clock=clock)


def fail(gate, source, times):
    for _ in range(times):
        gate.record_failure(source)


class TestFailureBackoffGate:

    def test_starts_open(self, clock):
        gate = make_gate(clock)
        assert gate.can_call('autocomplete')
        assert gate.state('autocomplete') == FailureState(0, None)

    def test_open_below_threshold(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 2)
        assert gate.can_call('autocomplete')

    def test_denied_until_cooldown_elapses(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 3)
        t0 = clock.now

        clock.now = t0 + 2.999
        assert not gate.can_call('autocomplete')

        clock.now = t0 + 3.0
        assert gate.can_call('autocomplete')

    def test_cooldown_grows_linearly(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 4)
        t0 = clock.now

        clock.now = t0 + 3.5
        assert not gate.can_call('autocomplete')

        clock.now = t0 + 4.0
        assert gate.can_call('autocomplete')

    def test_cooldown_measured_from_last_failure(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 2)
        clock.advance(10)
        gate.record_failure('autocomplete')

        clock.advance(2)
        assert not gate.can_call('autocomplete')

    def test_success_resets_immediately(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 5)
        assert not gate.can_call('autocomplete')

        gate.record_success('autocomplete')

        assert gate.can_call('autocomplete')
        assert gate.state('autocomplete') == FailureState(0, None)

    def test_failure_count_and_timestamp(self, clock):
        gate = make_gate(clock)
        clock.now = 42.0
        state = gate.record_failure('searchad')
        assert state == FailureState(consecutive_failures=1, last_failure_at=42.0)

    def test_sources_are_independent(self, clock):
        gate = make_gate(clock)
        fail(gate, 'autocomplete', 3)
        assert not gate.can_call('autocomplete')
        assert gate.can_call('searchad')

    def test_success_on_unknown_source_is_harmless(self, clock):
        gate = make_gate(clock)
        gate.record_success('never-seen')
        assert gate.can_call('never-seen')

    def test_concurrent_failures_are_all_counted(self, clock):
        gate = make_gate(clock)

        def worker():
            for _ in range(100):
                gate.record_failure('autocomplete')

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert gate.state('autocomplete').consecutive_failures == 800
