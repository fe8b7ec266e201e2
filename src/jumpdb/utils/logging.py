"""
Structured logging for jumpdb.

Library modules log through `get_logger`, which returns lazy structlog
proxies over the stdlib ``jumpdb.*`` loggers. Nothing is emitted until an
application calls `configure_logging`. The CLI does that with a stderr
handler, since stdout carries command output (paths and scores).
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator, cast

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor, WrappedLogger

from jumpdb import __version__

PACKAGE_LOGGER = "jumpdb"

# Silent until configured: no stdlib last-resort output from library code.
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def _coerce_level(level: str | int) -> int:
    """Translate a string/int level into the numeric logging level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, str):
            raise ValueError(f"Invalid log level: {level}")
        return int(resolved)
    return int(level)


def add_service_metadata(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp events with ``service_name`` and ``version`` unless already set."""
    event_dict.setdefault("service_name", os.getenv("SERVICE_NAME", PACKAGE_LOGGER))
    event_dict.setdefault("version", os.getenv("APP_VERSION", __version__))
    return event_dict


def configure_logging(level: str | int = "INFO", json_output: bool = False) -> None:
    """
    Route all structlog and stdlib logging to stderr.

    Args:
        level: Minimum level, by name or number
        json_output: Render JSON lines instead of the console format
    """
    numeric_level = _coerce_level(level)
    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_output else ConsoleRenderer(colors=False)
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_metadata,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    logging.captureWarnings(True)


def get_logger(name: str) -> BoundLogger:
    """
    Return a lazy logger for module `name`.

    Safe to call at import time: the configuration is looked up on first
    use, so a later `configure_logging` still applies. Events go to the
    stdlib logger of the same name.
    """
    return cast(
        BoundLogger,
        structlog.wrap_logger(logging.getLogger(name), wrapper_class=BoundLogger),
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind `kwargs` (e.g. data_dir) to every event logged inside the block."""
    tokens = structlog.contextvars.bind_contextvars(**kwargs)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
