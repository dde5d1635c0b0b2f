"""
Structured logging configuration using structlog.

Log lines go to stderr so CLI command output on stdout stays machine
readable. Development gets the colored console renderer, other
environments one JSON object per line.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from stockflow.config.settings import Settings, get_settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp every event with the app name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _use_json(settings: Settings) -> bool:
    if settings.log_format == "auto":
        return settings.environment != "development"
    return settings.log_format == "json"


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog and stdlib logging for the process.

    Args:
        level: Override for ``settings.log_level``
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if _use_json(settings):
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
