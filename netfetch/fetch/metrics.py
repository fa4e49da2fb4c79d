"""Metrics collection for the fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from netfetch.fetch.errors import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for redirecting fetch operations.

    Singleton class that tracks fetch-related metrics including
    fetch counts, opened connections, redirects, and failures.
    """

    fetch_total: int = 0
    fetch_success_total: int = 0
    connections_opened_total: int = 0
    responses_total: dict[int, int] = field(default_factory=dict)
    redirects_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    fetch_duration_ms_total: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_connection_opened(self) -> None:
        """Record a connection handed out by the transport."""
        self.connections_opened_total += 1

    def record_response(self, status_code: int) -> None:
        """Record a response status read from a connection.

        Args:
            status_code: HTTP status code.
        """
        self.responses_total[status_code] = (
            self.responses_total.get(status_code, 0) + 1
        )

    def record_redirect(self) -> None:
        """Record a redirect that was followed."""
        self.redirects_total += 1

    def record_success(self, duration_ms: float) -> None:
        """Record a fetch that ended in a delivered response.

        Args:
            duration_ms: Duration of the whole fetch in milliseconds.
        """
        self.fetch_total += 1
        self.fetch_success_total += 1
        self.fetch_duration_ms_total += duration_ms

    def record_failure(self, error_class: FetchErrorClass, duration_ms: float) -> None:
        """Record a fetch that ended in a failure.

        Args:
            error_class: Classification of the failure.
            duration_ms: Duration of the whole fetch in milliseconds.
        """
        self.fetch_total += 1
        key = error_class.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1
        self.fetch_duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "fetch_total": self.fetch_total,
            "fetch_success_total": self.fetch_success_total,
            "connections_opened_total": self.connections_opened_total,
            "responses_total": dict(self.responses_total),
            "redirects_total": self.redirects_total,
            "failures_total": dict(self.failures_total),
            "fetch_duration_ms_total": self.fetch_duration_ms_total,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.fetch_total == 0:
            return 0.0
        return self.fetch_duration_ms_total / self.fetch_total
