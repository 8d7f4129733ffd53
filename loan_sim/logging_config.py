"""Logging configuration for loan_sim.

Loggers are obtained with :func:`get_logger` and configured once at startup
with :func:`configure_logging`, either programmatically or through the
``LOAN_SIM_LOG_*`` environment variables. Console output goes to stderr so
that reports printed on stdout can be piped or redirected untouched.
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ENV_LOG_LEVEL = "LOAN_SIM_LOG_LEVEL"
ENV_LOG_FILE = "LOAN_SIM_LOG_FILE"
ENV_LOG_FORMAT = "LOAN_SIM_LOG_FORMAT"
ENV_STRUCTURED_LOGS = "LOAN_SIM_STRUCTURED_LOGS"

PACKAGE_LOGGER = "loan_sim"

_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class StructuredFormatter(logging.Formatter):
    """Formatter that renders each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def _resolve_level(level: Optional[str]) -> int:
    level_str = level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    return getattr(logging, level_str.upper(), logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``.

    Module loggers are children of the ``loan_sim`` logger, so they inherit
    whatever :func:`configure_logging` installed on it.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Simulation finished", extra={"installments": 120})
    """
    return logging.getLogger(name)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure handlers for the whole ``loan_sim`` package.

    Args:
        level: Logging level name. Defaults to ``LOAN_SIM_LOG_LEVEL`` or WARNING.
        log_file: Optional path of a rotating log file. Defaults to
            ``LOAN_SIM_LOG_FILE``.
        console: Whether to log to stderr.
        structured: Emit JSON records. Also enabled by ``LOAN_SIM_STRUCTURED_LOGS``.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    use_structured = structured or os.getenv(ENV_STRUCTURED_LOGS, "").lower() in (
        "true",
        "1",
        "yes",
    )

    if use_structured:
        formatter: logging.Formatter = StructuredFormatter(datefmt=DEFAULT_DATE_FORMAT)
    else:
        log_format = os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)
        formatter = logging.Formatter(log_format, datefmt=DEFAULT_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file_path = log_file or os.getenv(ENV_LOG_FILE)
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def disable_logging() -> None:
    """Silence all loan_sim logging."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
