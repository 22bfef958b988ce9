"""
Logging configuration.

Domain modules log through the standard library ``logging`` module; HTTP
services emit key/value events through structlog. Both are routed to stdout.

Configuration (see ``Settings``):
- LEDGER_LOG_FORMAT: "json" or "console" (default: console)
- LEDGER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
"""

import logging
import sys

import structlog

from .config import get_settings


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure stdlib logging and structlog for the client."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="[%(asctime)s] %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
        force=True,
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
