"""structlog setup shared by the API process and the CLI."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Third-party loggers that report every HTTP round trip or SQL statement.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "aiosqlite", "sqlalchemy.engine")


def setup_logging(level: int | str = logging.INFO, *, service: str = "tsk-directory") -> None:
    """Emit structlog events and stdlib records as one JSON object per line."""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        timestamper,
    ]

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a lazily configured structlog logger."""

    return structlog.get_logger(name)
