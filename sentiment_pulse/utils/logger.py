"""
SENTIMENT PULSE — Structured Logging
structlog setup for one pipeline run. Every event emitted while a run is
active carries the run's id and scoring strategy.
"""
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator

import structlog
from sentiment_pulse.config.settings import get_settings

SERVICE = "sentiment_pulse"


def add_service(logger, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE)
    return event_dict


def setup_logging() -> None:
    """JSON lines by default, coloured console output with DEBUG=true."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.debug:
        renderer = [structlog.dev.ConsoleRenderer()]
    else:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service,
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # aiohttp logs through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)


@contextmanager
def run_context(strategy: str, run_id: str = None) -> Iterator[str]:
    """Bind run_id and strategy to every log event inside the block."""
    run_id = run_id or uuid.uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(run_id=run_id, strategy=strategy)
    try:
        yield run_id
    finally:
        structlog.contextvars.unbind_contextvars("run_id", "strategy")


def get_logger(name: str = None) -> structlog.BoundLogger:
    return structlog.get_logger(name or SERVICE)
