"""
Structured logging via structlog.

Application log entries carry consistent fields:
  timestamp, level, event, thread_id, tool_name, n, returned,
  attempt, error_type, ...

Usage:
    from hr_chatbot.core.logging import get_logger
    log = get_logger(__name__)
    log.info("chat_complete", thread_id=thread_id, messages=12)
"""

import logging
import sys

import structlog
from hr_chatbot.core.config import get_settings


def configure_logging(environment: str | None = None) -> None:
    """
    Configure structlog processors. Call once at process startup.
    Development: pretty colored output.
    Anything else: JSON output (machine-readable for cloud logging).
    """
    if environment is None:
        environment = get_settings().environment
    is_dev = environment == "development"
    level = logging.DEBUG if is_dev else logging.INFO

    # stdlib loggers carry the .name that add_logger_name reads
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if is_dev:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
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


def get_logger(name: str = __name__):
    return structlog.get_logger(name)
