"""Log setup for the game core.

Settlement and admission events are logged through structlog with
key/value context; the rest of the package logs through stdlib loggers,
which end up in the same renderer.
"""

import logging

import structlog

from buildarena.config import Settings

# Chatty third-party loggers kept at WARNING regardless of log_level
_QUIET_LOGGERS = ("redis", "asyncio")


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON (production) or console (dev) output."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(
        service="buildarena",
        environment=settings.environment,
        version=settings.app_version,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=logging.DEBUG if settings.debug else level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
