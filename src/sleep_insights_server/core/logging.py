"""Structured logging setup."""

import logging
import sys

import structlog

from sleep_insights_server.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog to emit JSON lines through stdlib logging on stderr.

    Args:
        level: Log level name (default: settings.log_level)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level or settings.log_level,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
