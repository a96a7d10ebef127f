"""
SENTIMENT PULSE — Pipeline Error Taxonomy
Fetch-level errors escalate to the next endpoint; only OutputWriteError is fatal.
"""
from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class TransportError(PipelineError):
    """Network, timeout or HTTP-status failure after all retries."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class NormalizationError(PipelineError):
    """Upstream payload did not have the expected shape."""


class ValidationError(PipelineError):
    """A fetcher's own sanity check rejected a well-formed payload."""


class SourcesExhaustedError(PipelineError):
    """Every endpoint for an indicator failed or was short-circuited."""


class OutputWriteError(PipelineError):
    """The output document could not be written."""
