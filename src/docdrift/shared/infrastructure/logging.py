"""
Structured logging configuration using structlog.

Provides consistent, structured logging across all modules.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from docdrift.shared.infrastructure.config import Settings


def configure_logging(settings: Optional[Settings] = None, stream: Any = sys.stderr) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output for production
    - Log level from settings
    - Context variable support (run ids, package names)
    """
    settings = settings or Settings()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        force=True,
    )
