#!/usr/bin/env python3
"""Structured logging for kpackager.

Log calls carry key-value context next to the message:
- Context is stored on the record (``record.context``), not baked into the message
- ContextFormatter renders it as ``message | key=value ...``
- Scoped context (package name, archive) is pushed per thread with add_context()
- Console output by default, rotating log file on request

Example:
    >>> logger = Logger(level=LogLevel.INFO)
    >>> logger.info("Scanning archive", archive="rules.jar")
    >>> with logger.add_context(package="org.example.rules"):
    ...     logger.debug("Classifying resources")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from kpackager.core.constants import DEFAULT_LOG_FORMAT, Limits

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-thread stack of context dicts pushed by Logger.add_context()
_scopes = threading.local()


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, level: Union["LogLevel", int, str]) -> "LogLevel":
        """Convert a level name or number to a LogLevel."""
        if isinstance(level, str):
            return cls[level.upper()]
        return cls(level)


class ContextFormatter(logging.Formatter):
    """Formatter appending a record's structured context to its message."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return text

        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        head, newline, trace = text.partition("\n")
        return f"{head} | {pairs}{newline}{trace}"


def _scope_stack() -> List[Dict[str, Any]]:
    if not hasattr(_scopes, "stack"):
        _scopes.stack = []
    return _scopes.stack


class Logger:
    """Structured logger with scoped context.

    Wraps one standard library logger. The wrapped logger does not
    propagate, so kpackager output never doubles up with an application's
    root handlers.
    """

    def __init__(
        self,
        name: str = "kpackager",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
        fmt: str = DEFAULT_LOG_FORMAT,
    ):
        """Initialize logger.

        Args:
            name: Logger name
            level: Minimum log level to output
            handlers: Output handlers (defaults to one console handler)
            fmt: Format string for handlers created by this logger
        """
        self.name = name
        self.fmt = fmt
        self.logger = logging.getLogger(name)
        self.logger.propagate = False
        self.set_level(level)

        self.logger.handlers.clear()
        for handler in handlers if handlers is not None else [self._console_handler()]:
            self.logger.addHandler(handler)

    def formatter(self) -> ContextFormatter:
        return ContextFormatter(self.fmt, datefmt=LOG_DATE_FORMAT)

    def _console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(self.formatter())
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = Limits.LOG_FILE_MAX_BYTES,
        backup_count: int = Limits.LOG_FILE_BACKUP_COUNT,
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler using this logger's format.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of rotated files to keep

        Returns:
            Configured handler (not yet attached)
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(self.formatter())
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level (LogLevel or name)."""
        self.logger.setLevel(LogLevel.parse(level))

    def get_level(self) -> LogLevel:
        return LogLevel(self.logger.level)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        return self.logger.isEnabledFor(LogLevel.parse(level))

    @contextmanager
    def add_context(self, **kwargs) -> Iterator[None]:
        """Attach context to every message logged in this block.

        Scopes nest; inner values win over outer ones with the same key.

        Example:
            >>> with logger.add_context(archive="rules.jar"):
            ...     logger.info("Scanning")
        """
        stack = _scope_stack()
        stack.append(kwargs)
        try:
            yield
        finally:
            stack.pop()

    def current_context(self) -> Dict[str, Any]:
        """Merged context of all open scopes on this thread."""
        merged: Dict[str, Any] = {}
        for scope in _scope_stack():
            merged.update(scope)
        return merged

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        merged = self.current_context()
        merged.update(context)
        self.logger.log(level, msg, extra={"context": merged}, **kwargs)

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context) -> None:
        """Log an error with the exception's type and traceback.

        Args:
            msg: Log message
            exc: Exception being handled
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)


_global_logger: Optional[Logger] = None


def get_logger(name: str = "kpackager") -> Logger:
    """Get the global logger, creating a default one if needed.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Optional[Logger]) -> None:
    """Install a logger globally, or reset with None."""
    global _global_logger
    _global_logger = logger
