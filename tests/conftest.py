"""Shared pytest fixtures for Longtail Scout tests."""

from unittest.mock import MagicMock

import pytest

from longtail_scout.errors import UpstreamError
from longtail_scout.rate_limiter import registry


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSuggestionSource:
    """Suggestion source returning canned candidates or raising an error."""

    name = 'autocomplete'

    def __init__(self, suggestions=None, error=None):
        self.suggestions = suggestions or []
        self.error = error
        self.calls = []

    def fetch_suggestions(self, keyword):
        self.calls.append(keyword)
        if self.error is not None:
            raise self.error
        return list(self.suggestions)


class FakeMetricsSource:
    """Metrics source backed by a dict of keyword -> KeywordMetrics or error."""

    name = 'searchad'

    def __init__(self, metrics=None):
        self.metrics = metrics or {}
        self.calls = []

    def fetch_keyword_metrics(self, keyword):
        self.calls.append(keyword)
        value = self.metrics.get(keyword)
        if isinstance(value, Exception):
            raise value
        return value


def make_response(status_code=200, json_data=None, text='', invalid_json=False):
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode('utf-8')
    if invalid_json:
        response.json.side_effect = ValueError('Expecting value')
    else:
        response.json.return_value = json_data
    return response


def make_session(*responses):
    """Build a mock requests.Session whose get() returns the given responses."""
    session = MagicMock()
    session.get.side_effect = list(responses)
    return session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream_error():
    return UpstreamError(503, 'Service Unavailable')


@pytest.fixture
def no_rate_limit(monkeypatch):
    """Make rate limiter acquisition immediate."""
    monkeypatch.setattr(registry, 'acquire', lambda source: 0.0)


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the database at a temporary file and create the schema."""
    from longtail_scout.config import Config
    from longtail_scout.db import init_db

    db_path = tmp_path / 'test.db'
    monkeypatch.setattr(Config, 'DB_PATH', str(db_path))
    init_db()
    return db_path
