"""Structured logging configuration."""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import add_logger_name

from journey.core.config import settings


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """Configure structlog on top of stdlib logging.

    ``level`` and ``fmt`` default to ``LOG_LEVEL`` / ``LOG_FORMAT``.
    """
    level = level or settings.LOG_LEVEL
    fmt = fmt or settings.LOG_FORMAT

    renderer = JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            add_log_level,
            add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )
    # SQL echo goes through SQLAlchemy's own logger
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DATABASE_ECHO else logging.WARNING
    )
