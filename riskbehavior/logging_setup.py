"""
Structured logging configuration.

The engine only ever calls structlog.get_logger(); applications embedding it
call configure_logging() once at startup.
"""

import logging
import sys
from typing import Optional

import structlog

from riskbehavior.config import settings


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog on top of the stdlib logging module."""
    level_name = (level or settings.log_level).upper()
    renderer_name = (fmt or settings.log_format).lower()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if renderer_name == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
