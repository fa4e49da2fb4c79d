"""Unit tests for fetch metrics."""

from collections.abc import Generator

import pytest

from netfetch.fetch.errors import FetchErrorClass
from netfetch.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None, None, None]:
    """Reset the metrics singleton around each test."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


class TestFetchMetrics:
    """Tests for FetchMetrics."""

    def test_singleton(self) -> None:
        """get_instance returns the same object until reset."""
        first = FetchMetrics.get_instance()

        assert FetchMetrics.get_instance() is first

        FetchMetrics.reset()
        assert FetchMetrics.get_instance() is not first

    def test_record_counts(self) -> None:
        """Counters accumulate per call."""
        metrics = FetchMetrics.get_instance()

        metrics.record_connection_opened()
        metrics.record_connection_opened()
        metrics.record_response(301)
        metrics.record_response(200)
        metrics.record_response(200)
        metrics.record_redirect()
        metrics.record_success(10.0)
        metrics.record_failure(FetchErrorClass.REDIRECT_LOOP, 30.0)

        assert metrics.to_dict() == {
            "fetch_total": 2,
            "fetch_success_total": 1,
            "connections_opened_total": 2,
            "responses_total": {301: 1, 200: 2},
            "redirects_total": 1,
            "failures_total": {"REDIRECT_LOOP": 1},
            "fetch_duration_ms_total": 40.0,
        }

    def test_avg_duration(self) -> None:
        """Average duration is zero with no fetches."""
        metrics = FetchMetrics.get_instance()
        assert metrics.avg_duration_ms == 0.0

        metrics.record_success(10.0)
        metrics.record_failure(FetchErrorClass.TRANSPORT, 20.0)

        assert metrics.avg_duration_ms == 15.0
