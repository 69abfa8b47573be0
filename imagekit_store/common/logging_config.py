"""
Structured JSON logging with request correlation.

Provides:
- JSON formatter for log aggregation
- Request IDs propagated through a context variable
- Timing of remote calls
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from imagekit_store.config.settings import Settings

# Context variable for request ID (task-safe)
request_id_ctx: ContextVar[Optional[str]] = ContextVar(
    "request_id", default=None)

# Libraries whose INFO chatter is noise in adapter logs
_NOISY_LOGGERS = ("httpx", "httpcore")


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Structured fields passed via ``extra={"extra_fields": {...}}`` are
    merged into the top-level record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_ctx.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


class PerformanceTracker:
    """
    Context manager logging the duration and outcome of an operation.

    Usage:
        with PerformanceTracker("imagekit.upload", logger, file_name=name):
            ...
    """

    def __init__(
        self,
        operation: str,
        logger: logging.Logger,
        log_level: int = logging.DEBUG,
        **extra_fields,
    ):
        """
        Initialize performance tracker.

        Args:
            operation: Operation name
            logger: Logger instance
            log_level: Log level for the completion message
            **extra_fields: Additional structured fields
        """
        self.operation = operation
        self.logger = logger
        self.log_level = log_level
        self.extra_fields = extra_fields
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def _fields(self, **fields) -> Dict[str, Any]:
        extra = {"operation": self.operation, **self.extra_fields, **fields}
        request_id = request_id_ctx.get()
        if request_id:
            extra["request_id"] = request_id
        return extra

    def __enter__(self):
        """Start timing."""
        self.start_time = time.time()
        self.logger.debug(
            f"Starting operation: {self.operation}",
            extra={"extra_fields": self._fields()},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Log completion with duration. Exceptions are never suppressed."""
        self.duration_ms = round((time.time() - self.start_time) * 1000, 2)

        if exc_type:
            self.logger.log(
                self.log_level,
                f"Operation failed: {self.operation}",
                extra={"extra_fields": self._fields(
                    duration_ms=self.duration_ms,
                    error=str(exc_val),
                    error_type=exc_type.__name__,
                )},
            )
        else:
            self.logger.log(
                self.log_level,
                f"Operation completed: {self.operation}",
                extra={"extra_fields": self._fields(
                    duration_ms=self.duration_ms)},
            )
        return False


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure root logging for a host process.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting if True, plain text otherwise
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging from process settings.

    Reads ``log_level`` and ``json_logs`` (``IMAGEKIT_STORE_LOG_LEVEL`` and
    ``IMAGEKIT_STORE_JSON_LOGS`` in the environment).
    """
    settings = settings or Settings()
    setup_logging(settings.log_level, json_format=settings.json_logs)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Request ID (generated if not provided)

    Returns:
        Request ID
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_ctx.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get current request ID from context."""
    return request_id_ctx.get()


def clear_request_id():
    request_id_ctx.set(None)
