# ♥♥─── Request Statistics ───────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any


# ─── Request Execution Stats ──────────────────────────────────────────────────
class RequestExecutionStats:
    """Track statistics about API request executions."""

    def __init__(self) -> None:
        """Initialize the RequestExecutionStats tracker."""
        self.total_requests: int = 0
        self.successful_requests: int = 0
        self.failed_requests: int = 0
        self.retried_requests: int = 0
        self._total_response_time_seconds: float = 0.0

    def record_successful_request(self, duration_seconds: float) -> None:
        """Record a successfully completed API request.

        :param duration_seconds: The duration of the successful request in seconds.
        """
        self.total_requests += 1
        self.successful_requests += 1
        self._total_response_time_seconds += duration_seconds

    def record_failed_request(self) -> None:
        """Record a failed API request."""
        self.total_requests += 1
        self.failed_requests += 1

    def record_retry(self) -> None:
        """Record that an attempt is about to be repeated."""
        self.retried_requests += 1

    @property
    def average_response_time_seconds(self) -> float:
        """Calculate the average response time for successful requests.

        :returns: The average response time in seconds, or 0.0 if no successful requests.
        """
        if self.successful_requests > 0:
            return self._total_response_time_seconds / self.successful_requests
        return 0.0

    def get_summary_dict(self) -> dict[str, Any]:
        """Return the current request statistics as a dictionary.

        :returns: A dictionary containing total, successful, failed requests, and average response time.
        """
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "retried_requests": self.retried_requests,
            "average_response_time_seconds": round(self.average_response_time_seconds, 3),
        }
