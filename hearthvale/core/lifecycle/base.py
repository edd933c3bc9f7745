"""
BaseSubsystem: template implementation of the subsystem contract.

Purpose
-------
Carry the bookkeeping every gameplay subsystem repeats (state flags, guard
conditions, exception wrapping, per-subsystem logging, event helpers) so a
concrete subsystem only implements `on_initialize`, `on_start` and
`on_update`.

Guard Semantics
---------------
- `initialize()` twice, or `start()` before `initialize()`, is rejected with
  a log entry and no side effects.
- A raising hook is logged with the subsystem's name and stack trace.
  Only `initialize()` re-raises, after releasing whatever the failed hook
  subscribed; every other entry point swallows the error and records it in
  `last_error`, so one broken subsystem cannot break the frame loop.
- `update()` / `fixed_update()` do nothing unless running and not paused.
- `shutdown()` resets all flags (even if `on_shutdown` failed) and releases
  every subscription made through `subscribe()`, so the subsystem can be
  initialized again.

Logging
-------
Each subsystem logs through `hearthvale.subsystem.<name>`. `debug_mode=True`
lowers that logger to DEBUG to surface lifecycle traces for one subsystem;
`resolve_debug_mode()` lets subsystems default it from
`core.lifecycle.debug_mode`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from hearthvale.core.lifecycle.state import LifecyclePhase, SubsystemState
from hearthvale.core.logging.logger import LogContext, get_logger

if TYPE_CHECKING:
    from hearthvale.core.config.manager import ConfigManager
    from hearthvale.core.event.bus import EventBus

DEBUG_MODE_KEY = "core.lifecycle.debug_mode"


def resolve_debug_mode(config: Optional["ConfigManager"], debug_mode: Optional[bool]) -> bool:
    """An explicit `debug_mode` wins; otherwise read `core.lifecycle.debug_mode`."""
    if debug_mode is not None:
        return debug_mode
    if config is None:
        return False
    return config.get_bool(DEBUG_MODE_KEY, False)


class BaseSubsystem(ABC):
    """
    Abstract base for orchestrated gameplay subsystems.

    Example
    -------
    >>> class WeatherSubsystem(BaseSubsystem):
    ...     PRIORITY = 5
    ...
    ...     def on_initialize(self) -> None:
    ...         self.subscribe(GameEvents.PAUSED, self._on_game_paused)
    ...
    ...     def on_start(self) -> None:
    ...         self.publish("Weather.Changed", "sunny")
    ...
    ...     def on_update(self, delta_time: float) -> None:
    ...         self._clock += delta_time
    """

    PRIORITY: int = 0

    def __init__(
        self,
        event_bus: Optional["EventBus"] = None,
        *,
        priority: Optional[int] = None,
        debug_mode: bool = False,
        name: Optional[str] = None,
    ) -> None:
        self._event_bus = event_bus
        self._priority = self.PRIORITY if priority is None else priority
        self._debug_mode = debug_mode
        self._name = name or type(self).__name__

        self._is_initialized = False
        self._is_running = False
        self._is_paused = False
        self._last_error: Optional[BaseException] = None
        self._subscriptions: List[Tuple[str, Callable[..., Any]]] = []

        self.logger = get_logger(f"hearthvale.subsystem.{self._name}")
        if debug_mode:
            self.logger.setLevel(logging.DEBUG)

    # ------------------------------------------------------------------ #
    # Contract properties
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def debug_mode(self) -> bool:
        return self._debug_mode

    @property
    def state(self) -> SubsystemState:
        if self._is_paused:
            return SubsystemState.PAUSED
        if self._is_running:
            return SubsystemState.RUNNING
        if self._is_initialized:
            return SubsystemState.INITIALIZED
        return SubsystemState.UNINITIALIZED

    @property
    def last_error(self) -> Optional[BaseException]:
        """Exception swallowed by the most recent lifecycle call, if any."""
        return self._last_error

    @property
    def event_bus(self) -> Optional["EventBus"]:
        return self._event_bus

    def attach_event_bus(self, event_bus: Optional["EventBus"]) -> None:
        self._event_bus = event_bus

    # ------------------------------------------------------------------ #
    # Contract operations
    # ------------------------------------------------------------------ #

    def initialize(self) -> None:
        """
        Run `on_initialize` once.

        Raises
        ------
        Exception
            Whatever `on_initialize` raised, after logging.
        """
        self._last_error = None
        if self._is_initialized:
            self.logger.warning(
                "Subsystem already initialized; ignoring",
                extra={"subsystem": self._name, "operation": LifecyclePhase.INITIALIZE.value},
            )
            return

        self.logger.debug("Initializing subsystem", extra={"subsystem": self._name})
        try:
            with LogContext(subsystem=self._name, operation=LifecyclePhase.INITIALIZE.value):
                self.on_initialize()
        except Exception as exc:
            self._last_error = exc
            self.logger.error(
                "Subsystem initialization failed",
                extra={
                    "subsystem": self._name,
                    "operation": LifecyclePhase.INITIALIZE.value,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            # A failed subsystem never runs, so nothing it subscribed may fire.
            self._release_subscriptions()
            raise

        self._is_initialized = True
        self.logger.debug("Subsystem initialized", extra={"subsystem": self._name})

    def start(self) -> None:
        self._last_error = None
        if not self._is_initialized:
            self.logger.error(
                "Subsystem not initialized; cannot start",
                extra={"subsystem": self._name, "operation": LifecyclePhase.START.value},
            )
            return
        if self._is_running:
            self.logger.warning(
                "Subsystem already running; ignoring start",
                extra={"subsystem": self._name, "operation": LifecyclePhase.START.value},
            )
            return

        self.logger.debug("Starting subsystem", extra={"subsystem": self._name})
        with LogContext(subsystem=self._name, operation=LifecyclePhase.START.value):
            started = self._run_hook(LifecyclePhase.START, self.on_start)
        if started:
            self._is_running = True
            self.logger.debug("Subsystem started", extra={"subsystem": self._name})

    def update(self, delta_time: float) -> None:
        self._last_error = None
        if not self._is_running or self._is_paused:
            return
        self._run_hook(LifecyclePhase.UPDATE, self.on_update, delta_time)

    def fixed_update(self, fixed_delta_time: float) -> None:
        self._last_error = None
        if not self._is_running or self._is_paused:
            return
        self._run_hook(LifecyclePhase.FIXED_UPDATE, self.on_fixed_update, fixed_delta_time)

    def shutdown(self) -> None:
        self._last_error = None
        if not self._is_initialized:
            self.logger.debug(
                "Subsystem not initialized; nothing to shut down",
                extra={"subsystem": self._name},
            )
            return

        self.logger.debug("Shutting down subsystem", extra={"subsystem": self._name})
        with LogContext(subsystem=self._name, operation=LifecyclePhase.SHUTDOWN.value):
            self._run_hook(LifecyclePhase.SHUTDOWN, self.on_shutdown)
        self._release_subscriptions()

        self._is_running = False
        self._is_paused = False
        self._is_initialized = False
        self.logger.debug("Subsystem shut down", extra={"subsystem": self._name})

    def reset(self) -> None:
        """Run `on_reset` without changing lifecycle state."""
        self._last_error = None
        self.logger.debug("Resetting subsystem", extra={"subsystem": self._name})
        with LogContext(subsystem=self._name, operation=LifecyclePhase.RESET.value):
            self._run_hook(LifecyclePhase.RESET, self.on_reset)

    def pause(self) -> None:
        self._last_error = None
        if not self._is_running:
            self.logger.warning(
                "Subsystem not running; cannot pause",
                extra={"subsystem": self._name, "operation": LifecyclePhase.PAUSE.value},
            )
            return
        if self._is_paused:
            self.logger.warning(
                "Subsystem already paused",
                extra={"subsystem": self._name, "operation": LifecyclePhase.PAUSE.value},
            )
            return

        if self._run_hook(LifecyclePhase.PAUSE, self.on_pause):
            self._is_paused = True
            self.logger.debug("Subsystem paused", extra={"subsystem": self._name})

    def resume(self) -> None:
        self._last_error = None
        if not self._is_paused:
            self.logger.warning(
                "Subsystem not paused; cannot resume",
                extra={"subsystem": self._name, "operation": LifecyclePhase.RESUME.value},
            )
            return

        if self._run_hook(LifecyclePhase.RESUME, self.on_resume):
            self._is_paused = False
            self.logger.debug("Subsystem resumed", extra={"subsystem": self._name})

    def _run_hook(self, operation: LifecyclePhase, hook: Callable[..., Any], *args: Any) -> bool:
        """Invoke `hook`, logging and swallowing any exception. True on success."""
        try:
            hook(*args)
        except Exception as exc:
            self._last_error = exc
            operation_name = operation.value
            self.logger.error(
                "Subsystem %s hook failed",
                operation_name,
                extra={
                    "subsystem": self._name,
                    "operation": operation_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return False
        return True

    # ------------------------------------------------------------------ #
    # Hooks
    # ------------------------------------------------------------------ #

    @abstractmethod
    def on_initialize(self) -> None:
        """Acquire resources and subscribe to channels."""

    @abstractmethod
    def on_start(self) -> None:
        """Begin active behavior; other subsystems are initialized by now."""

    @abstractmethod
    def on_update(self, delta_time: float) -> None:
        """Per-frame work."""

    def on_fixed_update(self, fixed_delta_time: float) -> None:
        pass

    def on_shutdown(self) -> None:
        pass

    def on_reset(self) -> None:
        pass

    def on_pause(self) -> None:
        pass

    def on_resume(self) -> None:
        pass

    # ------------------------------------------------------------------ #
    # Event helpers
    # ------------------------------------------------------------------ #

    def publish(self, channel: str, *args: Any) -> int:
        """Publish through the injected bus; returns callbacks invoked."""
        if self._event_bus is None:
            self.logger.warning(
                "No event bus attached; dropping publish",
                extra={"subsystem": self._name, "channel": channel},
            )
            return 0
        return self._event_bus.publish(channel, *args)

    def subscribe(
        self,
        channel: str,
        callback: Callable[..., Any],
        *,
        arity: Optional[int] = None,
        once: bool = False,
    ) -> bool:
        """
        Register `callback` on the injected bus and track it for release
        on shutdown.
        """
        if self._event_bus is None:
            self.logger.warning(
                "No event bus attached; cannot subscribe",
                extra={"subsystem": self._name, "channel": channel},
            )
            return False

        added = self._event_bus.register(channel, callback, arity=arity, once=once)
        if added:
            self._subscriptions.append((channel, callback))
        return added

    def unsubscribe(self, channel: str, callback: Callable[..., Any]) -> bool:
        if self._event_bus is None:
            return False
        self._subscriptions = [
            (tracked_channel, tracked)
            for tracked_channel, tracked in self._subscriptions
            if not (tracked_channel == channel and tracked == callback)
        ]
        return self._event_bus.unregister(channel, callback)

    def _release_subscriptions(self) -> None:
        if self._event_bus is not None:
            for channel, callback in self._subscriptions:
                self._event_bus.unregister(channel, callback)
        self._subscriptions.clear()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, priority={self._priority}, "
            f"state={self.state.value})"
        )
