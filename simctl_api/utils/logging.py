"""structlog configuration shared by the whole service."""

from __future__ import annotations

import logging
import sys

import structlog

from simctl_api.config import settings


def setup_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Configure stdlib logging and structlog once at startup."""
    level_name = (level or settings.log_level).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    use_json = settings.log_json if json is None else json

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric)

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name)
