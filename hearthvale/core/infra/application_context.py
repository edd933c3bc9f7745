"""
GameContext - Hearthvale Application Kernel
===========================================

Purpose
-------
Single explicit owner of the process-wide collaborators every gameplay
module needs: the `ConfigManager`, the `EventBus` and the
`SubsystemOrchestrator`. It is constructed once at startup and passed to
subsystem constructors; nothing is created lazily behind a global.

Responsibilities
----------------
- Build and wire ConfigManager -> EventBus -> SubsystemOrchestrator
- Register subsystems and expose type-indexed lookup
- Application lifecycle: `boot()`, `tick()`, `fixed_tick()`, `shutdown()`
- Game state machine (main menu, playing, paused, loading, game over),
  announced on `Game.StateChanged`
- Game-wide pause / resume, announced on `Game.Paused` / `Game.Resumed`
- Readiness checks and a human-readable readiness report

Non-Responsibilities
--------------------
- Frame pacing (see `hearthvale.core.infra.game_loop.GameLoop`)
- Gameplay logic (delegated to subsystems)

Initialization Order:
    1. ConfigManager (YAML loaded)
    2. EventBus (metrics flag from config)
    3. SubsystemOrchestrator (init-failure policy from config)

Shutdown Order:
    1. Subsystems, in reverse registration order
    2. Event bus cleared
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Type, TypeVar

from hearthvale.core.config.config import Config
from hearthvale.core.config.manager import ConfigManager
from hearthvale.core.event.bus import EventBus
from hearthvale.core.event.channels import GameEvents
from hearthvale.core.lifecycle.base import BaseSubsystem
from hearthvale.core.lifecycle.contract import GameSubsystem
from hearthvale.core.lifecycle.orchestrator import SubsystemOrchestrator
from hearthvale.core.lifecycle.report import LifecycleReport
from hearthvale.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class GameState(Enum):
    MAIN_MENU = "main_menu"
    PLAYING = "playing"
    PAUSED = "paused"
    LOADING = "loading"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameStateChange:
    """Payload of `Game.StateChanged`."""

    previous: GameState
    current: GameState


class GameContext:
    """
    Kernel owning configuration, event bus and subsystem orchestration.

    Usage:
        context = GameContext()
        context.register_system(EconomySubsystem(context.event_bus))
        context.boot()
        context.tick(0.016)
        context.shutdown()
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        event_bus: Optional[EventBus] = None,
        orchestrator: Optional[SubsystemOrchestrator] = None,
    ) -> None:
        build_start = time.perf_counter()

        self._config = config_manager or ConfigManager()
        self._config.initialize()

        self._event_bus = event_bus or EventBus(config_manager=self._config)
        self._config.attach_event_bus(self._event_bus)

        self._orchestrator = orchestrator or SubsystemOrchestrator(
            event_bus=self._event_bus,
            config_manager=self._config,
        )

        self._state = GameState.MAIN_MENU
        self._paused = False
        self._booted = False

        logger.info(
            "GameContext created (%.2fms)",
            (time.perf_counter() - build_start) * 1000,
            extra={"game": Config.GAME_NAME, "version": Config.GAME_VERSION},
        )

    # ========================================================================
    # COLLABORATORS
    # ========================================================================

    @property
    def config(self) -> ConfigManager:
        return self._config

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def orchestrator(self) -> SubsystemOrchestrator:
        return self._orchestrator

    # ========================================================================
    # SUBSYSTEMS
    # ========================================================================

    def register_system(self, subsystem: GameSubsystem) -> bool:
        """
        Register a subsystem with the orchestrator.

        A `BaseSubsystem` built without a bus is attached to this context's.
        """
        if isinstance(subsystem, BaseSubsystem) and subsystem.event_bus is None:
            subsystem.attach_event_bus(self._event_bus)
        return self._orchestrator.register_subsystem(subsystem)

    def get_system(self, subsystem_type: Type[T]) -> Optional[T]:
        return self._orchestrator.get_subsystem(subsystem_type)

    def is_system_initialized(self, subsystem_type: Type[Any]) -> bool:
        return self._orchestrator.is_subsystem_initialized(subsystem_type)

    def is_system_running(self, subsystem_type: Type[Any]) -> bool:
        return self._orchestrator.is_subsystem_running(subsystem_type)

    def is_ready(self) -> bool:
        """True once the orchestrator ran its initialization pass and every subsystem initialized."""
        return self._orchestrator.is_initialized and all(
            subsystem.is_initialized for subsystem in self._orchestrator.subsystems
        )

    def readiness_report(self) -> str:
        lines = [
            f"=== {Config.GAME_NAME} readiness ===",
            f"Event bus: {len(self._event_bus.get_all_channels())} channels, "
            f"{self._event_bus.get_listener_count()} listeners",
            f"Orchestrator: {self._orchestrator.state.value}, "
            f"{self._orchestrator.subsystem_count} subsystems",
            f"Game state: {self._state.value}{' (paused)' if self._paused else ''}",
        ]
        for row in self._orchestrator.status_snapshot():
            mark = "✓" if row["running"] else ("~" if row["initialized"] else "✗")
            lines.append(
                f"  {mark} {row['name']} (priority {row['priority']})"
                f"{' [paused]' if row['paused'] else ''}"
            )
        lines.append(f"Overall ready: {'✓' if self.is_ready() else '✗'}")
        return "\n".join(lines)

    # ========================================================================
    # APPLICATION LIFECYCLE
    # ========================================================================

    def boot(self) -> Tuple[LifecycleReport, LifecycleReport]:
        """
        Initialize then start every subsystem.

        Raises
        ------
        SubsystemInitializationError
            Propagated from `initialize_all` when configured to raise; no
            subsystem is started in that case.
        """
        logger.info("=" * 60)
        logger.info("GAME CONTEXT BOOT")
        logger.info("=" * 60)

        boot_start = time.perf_counter()
        init_report = self._orchestrator.initialize_all()
        start_report = self._orchestrator.start_all()
        self._booted = True

        logger.info(
            "Game context booted (%.2fms)",
            (time.perf_counter() - boot_start) * 1000,
            extra={
                "initialized": init_report.succeeded,
                "started": start_report.succeeded,
                "init_failures": init_report.failed,
                "start_failures": start_report.failed,
            },
        )
        return init_report, start_report

    def tick(self, delta_time: float) -> LifecycleReport:
        return self._orchestrator.update_all(delta_time)

    def fixed_tick(self, fixed_delta_time: float) -> LifecycleReport:
        return self._orchestrator.fixed_update_all(fixed_delta_time)

    def shutdown(self) -> LifecycleReport:
        """Shut subsystems down in reverse order, then clear the bus."""
        logger.info("=" * 60)
        logger.info("GAME CONTEXT SHUTDOWN")
        logger.info("=" * 60)

        report = self._orchestrator.shutdown_all()
        self._event_bus.clear()
        self._booted = False
        self._paused = False

        if report.failures:
            logger.warning(
                "Shutdown completed with failures",
                extra={"failed": report.failed},
            )
        else:
            logger.info("✓ Game context shutdown complete")
        return report

    @property
    def is_booted(self) -> bool:
        return self._booted

    # ========================================================================
    # GAME STATE
    # ========================================================================

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def is_paused(self) -> bool:
        return self._paused

    def change_state(self, new_state: GameState) -> bool:
        """
        Move to `new_state` and publish `Game.StateChanged`.

        No-op (returns False) when already in `new_state`.
        """
        if new_state is self._state:
            return False

        change = GameStateChange(previous=self._state, current=new_state)
        self._state = new_state
        logger.info(
            "Game state changed",
            extra={"previous": change.previous.value, "current": change.current.value},
        )
        self._event_bus.publish(GameEvents.STATE_CHANGED, change)
        return True

    def pause_game(self) -> bool:
        """
        Pause every subsystem and publish `Game.Paused`.

        False when already paused or when the subsystems are not running.
        """
        if self._paused:
            return False
        report = self._orchestrator.pause_all()
        if report.rejected:
            logger.warning("Game not running; cannot pause")
            return False
        self._paused = True
        logger.info("Game paused")
        self._event_bus.publish(GameEvents.PAUSED)
        return True

    def resume_game(self) -> bool:
        """Resume every subsystem and publish `Game.Resumed`; False if not paused."""
        if not self._paused:
            return False
        report = self._orchestrator.resume_all()
        if report.rejected:
            logger.warning("Subsystems not running; cannot resume")
            return False
        self._paused = False
        logger.info("Game resumed")
        self._event_bus.publish(GameEvents.RESUMED)
        return True
