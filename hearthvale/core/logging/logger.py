"""
Hearthvale Logging Subsystem

Purpose
-------
Single source of truth for developer-facing diagnostics. Every core failure
path (duplicate registration, rejected lifecycle transitions, swallowed hook
exceptions) reports through here, so the output must be structured,
context-rich and must never stall a frame.

Responsibilities
----------------
- Configure the root logger once via `setup_logging()`
- Enrich records with ambient context from a ContextVar:
  - subsystem, event_name, event_arity, frame
  - component, operation, correlation_id
- Emit JSON (production / `LOG_JSON`) or colored text (TTY development)
- Hand records to a bounded queue drained by a listener thread, so the
  game loop thread never performs handler I/O
- Optionally keep a timed-rotating JSON log file (`LOG_TO_FILE`)
- Report queue health through `get_logging_health()`

Design Decisions
----------------
- Nothing is configured on import; the host (`hearthvale.main`) or the test
  harness decides. Unconfigured loggers fall through to stdlib defaults.
- Extra fields passed via `logger.info("msg", extra={...})` are merged into
  the JSON payload under `extra`.
- A full queue drops the record and counts it rather than blocking.

Dependencies
------------
- hearthvale.core.config.config.Config
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import (
    QueueHandler,
    QueueListener,
    TimedRotatingFileHandler,
)
from pathlib import Path
from typing import Any, Dict, List, Optional

from hearthvale.core.config.config import Config


# ============================================================================
# Ambient Context (ContextVars)
# ============================================================================

_log_context: ContextVar[Dict[str, Any]] = ContextVar(
    "hearthvale_log_context",
    default={},
)

_INITIALIZED_FLAG = "_hearthvale_logging_initialized"


# ============================================================================
# Config / Environment
# ============================================================================


@dataclass(frozen=True)
class LoggerConfig:
    """Logging settings derived from the static `Config`."""

    CONSOLE_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s"
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    FILE_BASENAME: str = "hearthvale.json.log"

    @property
    def file_backup_count(self) -> int:
        return Config.LOG_BACKUP_COUNT

    @property
    def queue_max_size(self) -> int:
        return Config.LOG_QUEUE_SIZE

    @property
    def environment(self) -> str:
        return str(Config.ENVIRONMENT).lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def logs_dir(self) -> Path:
        return Path(Config.LOGS_DIR).resolve()

    @property
    def log_level(self) -> int:
        level_name = Config.LOG_LEVEL
        if not isinstance(level_name, str):
            level_name = "INFO"
        return getattr(logging, level_name.upper(), logging.INFO)

    @property
    def use_json(self) -> bool:
        if Config.LOG_JSON is None:
            return self.is_production
        return bool(Config.LOG_JSON)

    @property
    def use_colors(self) -> bool:
        if self.use_json:
            return False
        return bool(Config.LOG_COLORS) and sys.stdout.isatty()

    @property
    def log_to_file(self) -> bool:
        return bool(Config.LOG_TO_FILE)


LOGGER_CONFIG = LoggerConfig()


# ============================================================================
# Logging Metrics / Health
# ============================================================================


@dataclass
class LoggingMetrics:
    records_enqueued: int = 0
    records_dropped: int = 0
    listener_errors: int = 0


@dataclass(frozen=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int
    file_logging: bool


_logging_metrics: LoggingMetrics = LoggingMetrics()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_queue_listener: Optional[QueueListener] = None


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """
    Stamp ambient context onto every record passing through the root logger.

    Values passed explicitly through `extra=` win over the ambient context.
    """

    FIELDS = ("subsystem", "event_name", "event_arity", "frame", "correlation_id", "operation")

    def filter(self, record: logging.LogRecord) -> bool:
        context: Dict[str, Any] = _log_context.get()

        for attr in self.FIELDS:
            if not hasattr(record, attr):
                setattr(record, attr, context.get(attr, "N/A"))
        if not hasattr(record, "component"):
            record.component = context.get("component") or record.name.split(".", 2)[-1]
        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        prefix = self.COLORS.get(original, "")
        if prefix:
            record.levelname = f"{prefix}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra` fields are nested under `extra`."""

    STANDARD_ATTRS = frozenset(
        {
            "name",
            "msg",
            "args",
            "levelname",
            "levelno",
            "pathname",
            "filename",
            "module",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "created",
            "msecs",
            "relativeCreated",
            "thread",
            "threadName",
            "processName",
            "process",
            "taskName",
            "message",
            "asctime",
        }
    )

    CONTEXT_ATTRS = frozenset(
        {
            "subsystem",
            "event_name",
            "event_arity",
            "frame",
            "correlation_id",
            "component",
            "operation",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in sorted(self.CONTEXT_ATTRS):
            value = getattr(record, attr, None)
            if value not in (None, "N/A"):
                log_data[attr] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: val
            for key, val in record.__dict__.items()
            if key not in self.STANDARD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


# ============================================================================
# Queue Handler & Listener
# ============================================================================


class HearthvaleQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:
        _logging_metrics.records_enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _logging_metrics.records_dropped += 1
            sys.stderr.write("Hearthvale logging queue full; dropping log record.\n")


class HearthvaleQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:
        _logging_metrics.listener_errors += 1
        sys.stderr.write("Hearthvale logging handler error while processing record.\n")


# ============================================================================
# Global Setup
# ============================================================================


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOGGER_CONFIG.log_level)

    if LOGGER_CONFIG.use_json:
        handler.setFormatter(JSONFormatter())
    elif LOGGER_CONFIG.use_colors:
        handler.setFormatter(
            ColoredFormatter(fmt=LOGGER_CONFIG.CONSOLE_FORMAT, datefmt=LOGGER_CONFIG.DATE_FORMAT)
        )
    else:
        handler.setFormatter(
            logging.Formatter(fmt=LOGGER_CONFIG.CONSOLE_FORMAT, datefmt=LOGGER_CONFIG.DATE_FORMAT)
        )
    return handler


def _build_file_handler() -> logging.Handler:
    LOGGER_CONFIG.logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(LOGGER_CONFIG.logs_dir / LOGGER_CONFIG.FILE_BASENAME),
        when="midnight",
        interval=1,
        backupCount=LOGGER_CONFIG.file_backup_count,
        encoding="utf-8",
        utc=True,
    )
    handler.setLevel(LOGGER_CONFIG.log_level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Configure the root logger (idempotent)."""
    global _queue_listener, _logging_metrics, _log_queue

    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return

    _logging_metrics = LoggingMetrics()

    root.setLevel(LOGGER_CONFIG.log_level)
    root.handlers.clear()
    root.filters.clear()

    handlers: List[logging.Handler] = [_build_console_handler()]
    if LOGGER_CONFIG.log_to_file:
        handlers.append(_build_file_handler())

    _log_queue = queue.Queue(LOGGER_CONFIG.queue_max_size)
    _queue_listener = HearthvaleQueueListener(
        _log_queue,
        *handlers,
        respect_handler_level=True,
    )
    _queue_listener.start()

    # Filter on the handler so records from child loggers are enriched too.
    queue_handler = HearthvaleQueueHandler(_log_queue)
    queue_handler.setLevel(LOGGER_CONFIG.log_level)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    setattr(root, _INITIALIZED_FLAG, True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": LOGGER_CONFIG.environment,
            "log_level": logging.getLevelName(LOGGER_CONFIG.log_level),
            "json": LOGGER_CONFIG.use_json,
            "colors": LOGGER_CONFIG.use_colors,
            "file_logging": LOGGER_CONFIG.log_to_file,
            "queue_max_size": LOGGER_CONFIG.queue_max_size,
        },
    )


def shutdown_logging() -> None:
    """Drain the queue, then flush and detach every root handler."""
    global _queue_listener, _log_queue

    root = logging.getLogger()
    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem")

    if _queue_listener is not None:
        listener_handlers = list(_queue_listener.handlers)
        _queue_listener.stop()
        _queue_listener = None
        for handler in listener_handlers:
            handler.flush()
            handler.close()

    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    setattr(root, _INITIALIZED_FLAG, False)
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    initialized = bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False))

    queue_size = 0
    max_size = 0
    if _log_queue is not None:
        queue_size = _log_queue.qsize()
        max_size = _log_queue.maxsize

    return LoggingHealth(
        initialized=initialized,
        queue_size=queue_size,
        queue_max_size=max_size,
        records_enqueued=_logging_metrics.records_enqueued,
        records_dropped=_logging_metrics.records_dropped,
        listener_errors=_logging_metrics.listener_errors,
        file_logging=LOGGER_CONFIG.log_to_file,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def get_log_context() -> Dict[str, Any]:
    """Copy of the current ambient log context."""
    return dict(_log_context.get())


class LogContext:
    """
    Scoped ambient log context.

    Example
    -------
    >>> with LogContext(subsystem="Farming", operation="harvest"):
    ...     logger.info("Harvested plot", extra={"plot_id": 3})
    """

    def __init__(
        self,
        subsystem: Optional[str] = None,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        context = get_log_context()
        context["correlation_id"] = (
            correlation_id or context.get("correlation_id") or self._generate_correlation_id()
        )
        if subsystem is not None:
            context["subsystem"] = subsystem
        if component is not None:
            context["component"] = component
        if operation is not None:
            context["operation"] = operation
        context.update(extra)

        self.context: Dict[str, Any] = context
        self._token: Optional[Token[Dict[str, Any]]] = None

    @staticmethod
    def _generate_correlation_id() -> str:
        return uuid.uuid4().hex[:8]

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def set_log_context(
    subsystem: Optional[str] = None,
    component: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> None:
    """Merge values into the current ambient context (unscoped)."""
    current = get_log_context()
    if subsystem is not None:
        current["subsystem"] = subsystem
    if component is not None:
        current["component"] = component
    if operation is not None:
        current["operation"] = operation
    if correlation_id:
        current["correlation_id"] = correlation_id
    current.update(extra)
    _log_context.set(current)


def clear_log_context() -> None:
    _log_context.set({})
