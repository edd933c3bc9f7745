"""
Core exceptions for Hearthvale.

Purpose
-------
Define the structured exception hierarchy for core engine concerns: event bus
misuse, subsystem lifecycle failures and configuration errors. These are
engineering-level issues meant for developer-facing logs, never for players.

Design Notes
------------
- All core exceptions inherit from `HearthvaleException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging decisions
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Configuration mistakes (duplicate registration, start-before-initialize,
  double initialization) are logged, not raised. The classes below are used
  where a failure must reach the caller (initialization failures, invalid
  event signatures, unreadable config) and as structured log payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from hearthvale.core.lifecycle.report import LifecycleReport


class ErrorSeverity(Enum):
    """Error severity levels for logging."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"  # Concerning but handled (e.g., duplicate registration)
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # Failures that stop a subsystem from ever running


class HearthvaleException(Exception):
    """
    Base exception for all Hearthvale core errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise HearthvaleException(
        ...     "Subsystem registry corrupted",
        ...     {"registered": 3, "indexed": 2},
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class ConfigurationError(HearthvaleException):
    """
    Raised when a configuration key is invalid or missing.

    Args:
        config_key: The configuration key that has issues
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


class EventBusError(HearthvaleException):
    """
    Raised when the event bus is used incorrectly.

    Args:
        operation: The bus operation that failed (register, publish, ...)
        channel: Channel name involved
        message: Description of the problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, operation: str, channel: str, message: str) -> None:
        self.operation = operation
        self.channel = channel
        super().__init__(
            f"Event bus error during {operation} on '{channel}': {message}",
            details={"operation": operation, "channel": channel},
            error_code="EVENT_BUS_ERROR",
        )


class EventArityError(EventBusError, ValueError):
    """Raised when a callback or publish call falls outside the 0-4 argument range."""

    def __init__(self, operation: str, channel: str, arity: int, max_arity: int) -> None:
        self.arity = arity
        super().__init__(
            operation,
            channel,
            f"{arity} arguments given, channels carry at most {max_arity}",
        )
        self.details["arity"] = arity


class SubsystemError(HearthvaleException):
    """
    Raised (or reported) when a subsystem lifecycle hook fails.

    Args:
        subsystem: Name of the failing subsystem
        phase: Lifecycle phase (initialize, start, update, ...)
        original_error: The underlying exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, subsystem: str, phase: str, original_error: Exception) -> None:
        self.subsystem = subsystem
        self.phase = phase
        self.original_error = original_error
        super().__init__(
            f"Subsystem {subsystem} failed during {phase}: {original_error}",
            details={
                "subsystem": subsystem,
                "phase": phase,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="SUBSYSTEM_ERROR",
        )


class SubsystemInitializationError(HearthvaleException):
    """
    Raised by the orchestrator after an initialization pass in which at
    least one subsystem failed.

    The pass itself always runs to completion; the full `LifecycleReport`
    is attached so callers can decide whether to keep starting the game.
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, report: "LifecycleReport") -> None:
        self.report = report
        names = [failure.subsystem for failure in report.failures]
        super().__init__(
            f"{len(names)} subsystem(s) failed to initialize: {', '.join(names)}",
            details={"failed": names, "succeeded": list(report.succeeded)},
            error_code="SUBSYSTEM_INIT_FAILED",
        )


def get_error_severity(exc: BaseException) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Args:
        exc: Exception to check

    Returns:
        ErrorSeverity level.
    """
    if isinstance(exc, HearthvaleException):
        return exc.severity
    return ErrorSeverity.ERROR


__all__ = [
    "ErrorSeverity",
    "HearthvaleException",
    "ConfigurationError",
    "EventBusError",
    "EventArityError",
    "SubsystemError",
    "SubsystemInitializationError",
    "get_error_severity",
]
