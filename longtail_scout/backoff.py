"""Failure backoff gate for flaky upstream sources.

Tracks consecutive failures per source. Once a source reaches the
failure threshold, calls are denied until a cooldown proportional to
the failure count has elapsed since the last failure. Any success
reopens the gate. Thread-safe; the clock is injectable so tests can
control time.
"""

import time
import threading
import logging
from dataclasses import dataclass
from typing import Optional

from longtail_scout.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailureState:
    """Failure bookkeeping for one source."""

    consecutive_failures: int = 0
    last_failure_at: Optional[float] = None


class FailureBackoffGate:
    """Per-source gate with a linear, failure-count-scaled cooldown.

    With max_failures=3 and backoff_unit=1.0, three consecutive failures
    require 3 seconds of quiet before the next attempt, four require 4,
    and so on.
    """

    def __init__(self, max_failures=None, backoff_unit=None, clock=time.monotonic):
        """Initialize the gate.

        Args:
            max_failures: Failures before calls are throttled.
            backoff_unit: Seconds of cooldown per consecutive failure.
            clock: Callable returning the current time in seconds.
        """
        self.max_failures = (
            max_failures if max_failures is not None else Config.MAX_FAILURES
        )
        self.backoff_unit = (
            backoff_unit if backoff_unit is not None else Config.BACKOFF_UNIT
        )
        self._clock = clock
        self._states = {}
        self._lock = threading.Lock()

    def state(self, source):
        """Return the current FailureState for a source."""
        with self._lock:
            return self._states.get(source, FailureState())

    def can_call(self, source):
        """Decide whether a call to the source is currently permitted."""
        with self._lock:
            state = self._states.get(source, FailureState())
            now = self._clock()

        if state.consecutive_failures < self.max_failures:
            return True

        if state.last_failure_at is None:
            return True

        required_wait = self.backoff_unit * state.consecutive_failures
        return now - state.last_failure_at >= required_wait

    def record_success(self, source):
        """Reset the source to a fully open state."""
        with self._lock:
            previous = self._states.pop(source, None)

        if previous is not None and previous.consecutive_failures:
            logger.info(
                f'Source "{source}" recovered after '
                f'{previous.consecutive_failures} failure(s)'
            )

    def record_failure(self, source):
        """Count a failure and stamp its time.

        Returns:
            The updated FailureState.
        """
        with self._lock:
            state = self._states.get(source, FailureState())
            state = FailureState(
                consecutive_failures=state.consecutive_failures + 1,
                last_failure_at=self._clock(),
            )
            self._states[source] = state

        if state.consecutive_failures >= self.max_failures:
            logger.warning(
                f'Source "{source}" throttled after '
                f'{state.consecutive_failures} consecutive failures '
                f'({self.backoff_unit * state.consecutive_failures:.1f}s cooldown)'
            )
        return state
