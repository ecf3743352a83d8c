"""Logging Configuration System.

This module provides logging for the benchmark runner. Diagnostics go to
stderr so they never interleave with usage text or benchmark listings, and the
command-line verbosity selects the level of the package root logger.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from enum import StrEnum

from benchrunner.core.config import Verbosity


class LogLevel(StrEnum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


VERBOSITY_LEVELS: dict[Verbosity, LogLevel] = {
    Verbosity.QUIET: LogLevel.ERROR,
    Verbosity.NORMAL: LogLevel.WARNING,
    Verbosity.VERBOSE: LogLevel.DEBUG,
}

_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {'message', 'asctime'}


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class LoggerContextFilter(logging.Filter):
    """Ensure every record carries the benchmark it was emitted for."""

    def __init__(self, benchmark: str | None = None, *, is_default: bool = False) -> None:
        """Initialize the filter with an optional benchmark name."""
        super().__init__()
        self.benchmark = benchmark
        self.is_default = is_default

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject the benchmark attribute if it is missing."""
        if self.benchmark is not None:
            record.benchmark = self.benchmark
        elif getattr(record, 'benchmark', None) is None:
            record.benchmark = '-'
        return True


ROOT_LOGGER_NAME = "benchrunner"

_loggers: dict[str, logging.Logger] = {}


def _normalized_logger_name(name: str) -> str:
    if not name or name == ROOT_LOGGER_NAME:
        return ROOT_LOGGER_NAME
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _ensure_default_context(filterable: logging.Filterer) -> None:
    """Attach a default context filter so formats can reference the benchmark safely."""
    for existing in filterable.filters:
        if isinstance(existing, LoggerContextFilter) and existing.is_default:
            return
    filterable.addFilter(LoggerContextFilter(is_default=True))


def bind_benchmark(logger: logging.Logger, benchmark: str) -> logging.Logger:
    """Bind a benchmark name to an existing logger instance."""
    for existing in list(logger.filters):
        if isinstance(existing, LoggerContextFilter) and not existing.is_default:
            logger.removeFilter(existing)
    logger.addFilter(LoggerContextFilter(benchmark=benchmark))
    return logger


def _build_root_logger(
    level: str = LogLevel.WARNING,
    file_path: str | None = None,
    max_file_size: int = 10485760,  # 10MB
    backup_count: int = 5,
    structured: bool = False,
) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | bench=%(benchmark)s | %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    _ensure_default_context(console_handler)

    if file_path:
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        _ensure_default_context(file_handler)

    _ensure_default_context(logger)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a package logger, creating the root handlers on first use."""
    if ROOT_LOGGER_NAME not in _loggers:
        _loggers[ROOT_LOGGER_NAME] = _build_root_logger()
    root_logger = _loggers[ROOT_LOGGER_NAME]

    normalized_name = _normalized_logger_name(name)
    if normalized_name == ROOT_LOGGER_NAME:
        return root_logger
    if normalized_name not in _loggers:
        relative_name = normalized_name.split(f"{ROOT_LOGGER_NAME}.", 1)[1]
        child = root_logger.getChild(relative_name)
        _ensure_default_context(child)
        _loggers[normalized_name] = child
    return _loggers[normalized_name]


def configure_log_output(
    *,
    file_path: str | None = None,
    structured: bool = False,
    max_file_size: int = 10485760,
    backup_count: int = 5,
) -> logging.Logger:
    """Rebuild the package root handlers.

    Records always go to stderr. With ``file_path`` they are also written to a
    rotating log file, and ``structured`` switches both handlers to JSON lines.
    The current log level is kept.
    """
    level = logging.getLevelName(get_logger().level)
    _loggers[ROOT_LOGGER_NAME] = _build_root_logger(
        level=level,
        file_path=file_path,
        max_file_size=max_file_size,
        backup_count=backup_count,
        structured=structured,
    )
    return _loggers[ROOT_LOGGER_NAME]


def configure_logging(verbosity: Verbosity) -> logging.Logger:
    """Set the package log level from the resolved verbosity.

    The console handler is pointed at the current ``sys.stderr`` so that a
    replaced stderr (for example by a test harness) receives the records.
    """
    level = VERBOSITY_LEVELS[verbosity]
    logger = get_logger()
    logger.setLevel(getattr(logging, level.value))
    for handler in logger.handlers:
        if type(handler) is logging.StreamHandler and handler.stream is not sys.stderr:
            handler.setStream(sys.stderr)
    return logger
