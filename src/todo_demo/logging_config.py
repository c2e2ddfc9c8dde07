"""Logging configuration for the todo service."""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars
from structlog.stdlib import BoundLogger, LoggerFactory, ProcessorFormatter

_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", key="timestamp")

HANDLER_NAME = "todo_demo"


def _configure_structlog() -> None:
    """Configure structlog to emit JSON events through the stdlib handlers."""

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            _TIMESTAMPER,
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )


def _build_formatter() -> logging.Formatter:
    return ProcessorFormatter(
        foreign_pre_chain=[
            merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            _TIMESTAMPER,
        ],
        processors=[
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """
    Route application and uvicorn loggers to a single JSON stdout handler.

    Safe to call repeatedly: the handler is installed once and later calls
    only apply the requested level.
    """

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.get_name() == HANDLER_NAME), None)
    if handler is None:
        _configure_structlog()
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(_build_formatter())
        logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    root.setLevel(numeric_level)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(numeric_level)
