"""
Configuration error hierarchy for Hearthvale.

Purpose
-------
Domain-specific exceptions for the dynamic `ConfigManager`, so callers can
catch every configuration failure with a single `except ConfigError`.

Non-Responsibilities
--------------------
- Error logging (handled by the manager before raising)
- Recovery (the manager degrades to built-in defaults where it can)

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigWriteError (type mismatch or rejected override)
└── ConfigInitializationError (unusable config directory at startup)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     config.set("core.loop.fixed_delta_time", "fast")
    ... except ConfigError as e:
    ...     logger.error(f"Config operation failed: {e}")
    """


class ConfigWriteError(ConfigError):
    """
    Raised when an override cannot be written.

    This exception is raised when:
    - The new value's type does not match the existing default
    - The key path runs through a non-mapping value
    """


class ConfigInitializationError(ConfigError):
    """
    Raised when ConfigManager initialization fails.

    Only raised in strict mode; by default an unreadable config directory
    degrades to built-in defaults with a warning.
    """


__all__ = [
    "ConfigError",
    "ConfigWriteError",
    "ConfigInitializationError",
]
