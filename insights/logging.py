"""Structured logging with structlog.

Usage:
    import structlog
    logger = structlog.get_logger(__name__)
    logger.debug("insights_generated", count=3)
"""

import logging
import sys
from typing import Optional

import structlog

from insights.config import Settings, get_settings


def setup_logging(
    log_level: Optional[str] = None,
    json_output: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure structlog on top of the stdlib logging module.

    Args:
        log_level: Python log level string (DEBUG, INFO, WARNING, ERROR).
                   Defaults to settings.LOG_LEVEL.
        json_output: If True, use the JSON renderer. Otherwise use the
                     colorized console renderer. Defaults to settings.LOG_JSON.
        settings: Source of the defaults, get_settings() when omitted.
    """
    settings = settings or get_settings()
    if log_level is None:
        log_level = settings.LOG_LEVEL
    if json_output is None:
        json_output = settings.LOG_JSON

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
