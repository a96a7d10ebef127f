"""
SENTIMENT PULSE — Per-Endpoint Circuit Breaker
Counts consecutive failures per endpoint for the lifetime of one run.
There is no time decay and no half-open trial call: the process is short-lived
and builds a fresh breaker every run.
"""
from typing import Any, Dict, Optional

from sentiment_pulse.config.settings import get_settings
from sentiment_pulse.utils.logger import get_logger

logger = get_logger("circuit_breaker")


class CircuitBreaker:
    """Open once an endpoint reaches max_failures; reset only by a success on that endpoint."""

    def __init__(self, max_failures: Optional[int] = None):
        self.max_failures = max_failures if max_failures is not None else get_settings().data.max_failures
        self._failures: Dict[str, int] = {}

    def is_open(self, endpoint: str) -> bool:
        return self._failures.get(endpoint, 0) >= self.max_failures

    def record_failure(self, endpoint: str) -> None:
        count = self._failures.get(endpoint, 0) + 1
        self._failures[endpoint] = count
        if count == self.max_failures:
            logger.warning("circuit_opened", endpoint=endpoint, failures=count)

    def reset(self, endpoint: str) -> None:
        self._failures.pop(endpoint, None)

    def failures(self, endpoint: str) -> int:
        return self._failures.get(endpoint, 0)

    def status(self) -> Dict[str, Any]:
        """Failure counts and open endpoints, for the run summary."""
        open_endpoints = [e for e in self._failures if self.is_open(e)]
        return {
            "tracked_endpoints": len(self._failures),
            "open_circuits": len(open_endpoints),
            "open_endpoints": open_endpoints,
            "failures": dict(self._failures),
        }
