from __future__ import annotations

import logging
import sys

import structlog

from .config import settings


def configure_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Route structlog through stdlib logging with ISO timestamps."""
    level_name = (level or settings.LOG_LEVEL).upper()
    render_json = settings.LOG_JSON if json is None else json

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_name)

    renderer = structlog.processors.JSONRenderer() if render_json else structlog.dev.ConsoleRenderer()
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
