"""Metrics collection for the request core."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RequestMetrics:
    """Metrics for request execution.

    Singleton class that tracks response counts by status, retries, and
    terminal failures by error type.
    """

    http_responses_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_attempt_count: int = 0

    _instance: ClassVar["RequestMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RequestMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_attempt(self) -> None:
        """Record a transport call."""
        self.http_attempt_count += 1

    def record_response(self, status_code: int) -> None:
        """Record a received HTTP response.

        Args:
            status_code: HTTP status code.
        """
        self.http_responses_total[status_code] = (
            self.http_responses_total.get(status_code, 0) + 1
        )

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self, kind: str) -> None:
        """Record a terminal failure.

        Args:
            kind: Error type name, e.g. "DomainError".
        """
        self.http_failures_total[kind] = self.http_failures_total.get(kind, 0) + 1

    def to_dict(self) -> dict[str, int | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_responses_total": dict(self.http_responses_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_attempt_count": self.http_attempt_count,
        }
