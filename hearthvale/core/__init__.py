"""
Core engine layer for Hearthvale.

Purpose
-------
Single import surface for the engine primitives every gameplay module
builds on:

- Configuration (Config, ConfigManager)
- Logging (get_logger, LogContext)
- Event bus (EventBus and the channel catalogue)
- Subsystem lifecycle (GameSubsystem, BaseSubsystem, SubsystemOrchestrator)
- Application kernel (GameContext, GameLoop)
- Core exceptions

Design Decisions
----------------
- Thin: re-exports only, no logic and no side effects beyond imports.
- Submodules import each other by full module path, never through this
  package, so import order stays acyclic.
"""

from __future__ import annotations

from hearthvale.core.config import Config
from hearthvale.core.config.manager import ConfigManager
from hearthvale.core.event import EventBus
from hearthvale.core.exceptions import (
    ConfigurationError,
    ErrorSeverity,
    EventArityError,
    EventBusError,
    HearthvaleException,
    SubsystemError,
    SubsystemInitializationError,
)
from hearthvale.core.infra import GameContext, GameLoop, GameState, GameStateChange
from hearthvale.core.lifecycle import (
    BaseSubsystem,
    GameSubsystem,
    LifecycleReport,
    SubsystemOrchestrator,
)
from hearthvale.core.logging import LogContext, get_logger, setup_logging, shutdown_logging

__all__ = [
    "Config",
    "ConfigManager",
    "EventBus",
    "GameSubsystem",
    "BaseSubsystem",
    "SubsystemOrchestrator",
    "LifecycleReport",
    "GameContext",
    "GameLoop",
    "GameState",
    "GameStateChange",
    "get_logger",
    "LogContext",
    "setup_logging",
    "shutdown_logging",
    "ErrorSeverity",
    "HearthvaleException",
    "ConfigurationError",
    "EventBusError",
    "EventArityError",
    "SubsystemError",
    "SubsystemInitializationError",
]
