"""
Structured logging using structlog with:
- JSON/console switchable format (python-json-logger for stdlib records)
- Request/operation context via contextvars
- Quiet defaults for Uvicorn/SQLAlchemy
- A perf-timing helper for report generation
"""

from __future__ import annotations

import contextlib
import logging
import logging.config
import sys
import time
from typing import Any, Dict, Iterable, Optional

import structlog
from pythonjsonlogger import jsonlogger


def _ensure_log_format(settings: Any) -> str:
    """
    Determine output format:
      - settings.LOG_FORMAT when it is "json" or "console"
      - else "console" for dev, "json" everywhere else
    """
    fmt = getattr(settings, "LOG_FORMAT", None)
    if fmt in ("json", "console"):
        return fmt
    return "console" if getattr(settings, "is_dev", False) else "json"


def _level_name_to_int(level: str) -> int:
    return getattr(logging, str(level).upper(), logging.INFO)


def configure_logging(settings: Any) -> None:
    """Idempotent structured logging configuration."""
    log_format = _ensure_log_format(settings)
    is_prod_like = getattr(settings, "is_prod", False)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": jsonlogger.JsonFormatter,
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
                "console": {
                    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": log_format,
                    "stream": sys.stdout,
                },
            },
            "root": {
                "level": _level_name_to_int(getattr(settings, "LOG_LEVEL", "INFO")),
                "handlers": ["console"],
            },
            "loggers": {
                "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
                "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
                "sqlalchemy.engine": {
                    "level": "WARNING",
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }
    )

    processors: Iterable[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=is_prod_like),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        (structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_context(**values: Any) -> None:
    """Bind fields (request path, admin id, ...) onto every subsequent event in this context."""
    payload = {k: v for k, v in values.items() if v is not None}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


performance_logger = structlog.get_logger("performance")


@contextlib.contextmanager
def time_block(name: str, *, labels: Optional[Dict[str, str]] = None):
    """
    Time a block and log it as a performance metric.
    Usage:
        with time_block("report.cumulative", labels={"months": "12"}):
            ...
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        ms = (time.perf_counter() - t0) * 1000.0
        performance_logger.info("Performance metric", metric_name=name, value=ms, unit="ms", labels=labels or {})
