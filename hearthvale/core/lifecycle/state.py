"""Lifecycle state enums for subsystems and the orchestrator."""

from __future__ import annotations

from enum import Enum


class SubsystemState(Enum):
    """
    Per-subsystem lifecycle state.

    UNINITIALIZED -> initialize() -> INITIALIZED -> start() -> RUNNING
    RUNNING <-> PAUSED via pause() / resume()
    any -> shutdown() -> UNINITIALIZED
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    PAUSED = "paused"


class OrchestratorState(Enum):
    """NOT_INITIALIZED -> INITIALIZED -> RUNNING -> (shutdown_all) -> NOT_INITIALIZED"""

    NOT_INITIALIZED = "not_initialized"
    INITIALIZED = "initialized"
    RUNNING = "running"


class LifecyclePhase(str, Enum):
    """Names of orchestrator passes, used in reports and logs."""

    INITIALIZE = "initialize"
    START = "start"
    UPDATE = "update"
    FIXED_UPDATE = "fixed_update"
    PAUSE = "pause"
    RESUME = "resume"
    SHUTDOWN = "shutdown"
    RESET = "reset"
