"""
SubsystemOrchestrator: uniform, fault-isolated lifecycle driver.

Purpose
-------
Own every registered gameplay subsystem and drive its lifecycle
(initialize, start, update, fixed update, pause, resume, shutdown) in a
fixed order, so one broken subsystem never stops the others.

Responsibilities
----------------
- Ordered registry plus a type index for O(1) `get_subsystem(T)` lookups
- Passes in registration order; shutdown in reverse registration order
- Per-subsystem try/except with structured logging and timing; hooks
  slower than `Config.SLOW_HOOK_WARNING_MS` log a warning
- A `LifecycleReport` per pass listing successes and failures
- Orchestrator-level state machine:
  NOT_INITIALIZED -> INITIALIZED -> RUNNING -> (shutdown_all) -> NOT_INITIALIZED
- Milestone events (`System.Initialized`, `System.Started`, `System.Paused`,
  `System.Resumed`, `System.Shutdown`) on the optional event bus

Design Decisions
----------------
- **Configuration mistakes are logged, not raised**: duplicate types,
  double initialization, `start_all` before `initialize_all`, unknown types
  in `unregister_subsystem`.
- **Initialization failures are visible**: the pass always completes and
  publishes `System.Initialized`; afterwards `SubsystemInitializationError`
  carries the report to the caller unless `raise_on_failure` is off
  (config key `core.lifecycle.raise_on_init_failure`).
- **Not re-entrant**: registering or unregistering while a pass is
  iterating is refused with an error log.
- **Priority is advisory**: it is reported, never used to reorder.
- **Shutdown keeps registrations**: after `shutdown_all` the same
  subsystems can be initialized again. `clear()` drops them.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from hearthvale.core.config.config import Config
from hearthvale.core.event.channels import SystemEvents
from hearthvale.core.exceptions import SubsystemError, SubsystemInitializationError
from hearthvale.core.lifecycle.contract import GameSubsystem
from hearthvale.core.lifecycle.report import LifecycleReport
from hearthvale.core.lifecycle.state import LifecyclePhase, OrchestratorState
from hearthvale.core.logging.logger import get_logger

if TYPE_CHECKING:
    from hearthvale.core.config.manager import ConfigManager
    from hearthvale.core.event.bus import EventBus

logger = get_logger(__name__)

T = TypeVar("T")


class SubsystemOrchestrator:
    """
    Registry and lifecycle driver for gameplay subsystems.

    Usage:
        orchestrator = SubsystemOrchestrator(event_bus=bus)
        orchestrator.register_subsystem(EconomySubsystem(bus))
        orchestrator.register_subsystem(FarmingSubsystem(bus, config))
        orchestrator.initialize_all()
        orchestrator.start_all()
        orchestrator.update_all(0.016)
        orchestrator.shutdown_all()
    """

    def __init__(
        self,
        event_bus: Optional["EventBus"] = None,
        config_manager: Optional["ConfigManager"] = None,
        *,
        raise_on_init_failure: Optional[bool] = None,
    ) -> None:
        self._event_bus = event_bus
        self._subsystems: List[GameSubsystem] = []
        self._by_type: Dict[type, GameSubsystem] = {}
        self._state = OrchestratorState.NOT_INITIALIZED
        self._active_phase: Optional[LifecyclePhase] = None

        if raise_on_init_failure is None:
            raise_on_init_failure = (
                config_manager.get_bool("core.lifecycle.raise_on_init_failure", True)
                if config_manager is not None
                else True
            )
        self._raise_on_init_failure = raise_on_init_failure

        logger.debug(
            "SubsystemOrchestrator created",
            extra={
                "has_event_bus": event_bus is not None,
                "raise_on_init_failure": raise_on_init_failure,
            },
        )

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def register_subsystem(self, subsystem: GameSubsystem) -> bool:
        """
        Add `subsystem` to the ordered registry.

        Returns False (logged, existing instance kept) when an instance of
        the same type is already registered, when called during a pass, or
        when the object does not satisfy the subsystem contract.
        """
        if self._active_phase is not None:
            logger.error(
                "Cannot register a subsystem during a lifecycle pass",
                extra={
                    "subsystem": getattr(subsystem, "name", type(subsystem).__name__),
                    "phase": self._active_phase.value,
                },
            )
            return False

        if subsystem is None or not isinstance(subsystem, GameSubsystem):
            logger.error(
                "Rejected object that does not implement the subsystem contract",
                extra={"object_type": type(subsystem).__name__},
            )
            return False

        subsystem_type = type(subsystem)
        if subsystem_type in self._by_type:
            logger.warning(
                "Subsystem type already registered; keeping existing instance",
                extra={"subsystem": subsystem.name, "subsystem_type": subsystem_type.__name__},
            )
            return False

        self._subsystems.append(subsystem)
        self._by_type[subsystem_type] = subsystem
        logger.info(
            "Subsystem registered",
            extra={
                "subsystem": subsystem.name,
                "priority": subsystem.priority,
                "position": len(self._subsystems) - 1,
            },
        )
        return True

    def unregister_subsystem(self, subsystem_type: Type[Any]) -> bool:
        """
        Remove the subsystem registered under `subsystem_type`.

        The instance is not shut down; callers that need that should call
        its `shutdown()` first.
        """
        if self._active_phase is not None:
            logger.error(
                "Cannot unregister a subsystem during a lifecycle pass",
                extra={
                    "subsystem_type": getattr(subsystem_type, "__name__", str(subsystem_type)),
                    "phase": self._active_phase.value,
                },
            )
            return False

        subsystem = self._by_type.pop(subsystem_type, None)
        if subsystem is None:
            logger.warning(
                "Subsystem type not registered; nothing to unregister",
                extra={"subsystem_type": getattr(subsystem_type, "__name__", str(subsystem_type))},
            )
            return False

        self._subsystems = [item for item in self._subsystems if item is not subsystem]
        logger.info("Subsystem unregistered", extra={"subsystem": subsystem.name})
        return True

    def clear(self) -> None:
        """Drop every registration (after shutdown, typically)."""
        if self._active_phase is not None:
            logger.error("Cannot clear subsystems during a lifecycle pass")
            return
        self._subsystems.clear()
        self._by_type.clear()
        self._state = OrchestratorState.NOT_INITIALIZED

    # ========================================================================
    # LOOKUP & INTROSPECTION
    # ========================================================================

    def get_subsystem(self, subsystem_type: Type[T]) -> Optional[T]:
        """Type-indexed lookup; None when absent (never an error)."""
        subsystem = self._by_type.get(subsystem_type)
        if subsystem is None:
            logger.debug(
                "Subsystem not found",
                extra={"subsystem_type": getattr(subsystem_type, "__name__", str(subsystem_type))},
            )
        return subsystem  # type: ignore[return-value]

    def has_subsystem(self, subsystem_type: Type[Any]) -> bool:
        return subsystem_type in self._by_type

    def is_subsystem_initialized(self, subsystem_type: Type[Any]) -> bool:
        subsystem = self._by_type.get(subsystem_type)
        return subsystem is not None and subsystem.is_initialized

    def is_subsystem_running(self, subsystem_type: Type[Any]) -> bool:
        subsystem = self._by_type.get(subsystem_type)
        return subsystem is not None and subsystem.is_running

    @property
    def subsystems(self) -> Tuple[GameSubsystem, ...]:
        return tuple(self._subsystems)

    @property
    def subsystem_count(self) -> int:
        return len(self._subsystems)

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is not OrchestratorState.NOT_INITIALIZED

    @property
    def is_running(self) -> bool:
        return self._state is OrchestratorState.RUNNING

    @property
    def event_bus(self) -> Optional["EventBus"]:
        return self._event_bus

    def status_snapshot(self) -> List[Dict[str, Any]]:
        """Per-subsystem status rows for readiness reports."""
        return [
            {
                "name": subsystem.name,
                "priority": subsystem.priority,
                "initialized": subsystem.is_initialized,
                "running": subsystem.is_running,
                "paused": bool(getattr(subsystem, "is_paused", False)),
            }
            for subsystem in self._subsystems
        ]

    # ========================================================================
    # LIFECYCLE PASSES
    # ========================================================================

    def initialize_all(self, *, raise_on_failure: Optional[bool] = None) -> LifecycleReport:
        """
        Initialize every subsystem in registration order.

        A failing subsystem is logged and skipped; the rest still run. After
        the pass the orchestrator is INITIALIZED and `System.Initialized` is
        published regardless of individual failures.

        Raises
        ------
        SubsystemInitializationError
            If any subsystem failed and `raise_on_failure` (default from
            config) is true. The report is attached as `.report`.
        """
        if self._state is not OrchestratorState.NOT_INITIALIZED:
            logger.warning(
                "Subsystems already initialized; ignoring initialize_all",
                extra={"state": self._state.value},
            )
            return LifecycleReport.rejected_pass(LifecyclePhase.INITIALIZE)

        report = self._run_pass(
            LifecyclePhase.INITIALIZE,
            self._subsystems,
            lambda subsystem: subsystem.initialize(),
            check_result=lambda subsystem: subsystem.is_initialized,
        )
        self._state = OrchestratorState.INITIALIZED
        self._publish_milestone(SystemEvents.INITIALIZED)

        should_raise = self._raise_on_init_failure if raise_on_failure is None else raise_on_failure
        if report.failures and should_raise:
            raise SubsystemInitializationError(report)
        return report

    def start_all(self) -> LifecycleReport:
        """
        Start every initialized subsystem in registration order.

        Rejected (no side effects) before `initialize_all` or when already
        running. Subsystems that never initialized are skipped.
        """
        if self._state is OrchestratorState.NOT_INITIALIZED:
            logger.error("Subsystems not initialized; cannot start")
            return LifecycleReport.rejected_pass(LifecyclePhase.START)
        if self._state is OrchestratorState.RUNNING:
            logger.warning("Subsystems already started; ignoring start_all")
            return LifecycleReport.rejected_pass(LifecyclePhase.START)

        report = self._run_pass(
            LifecyclePhase.START,
            self._subsystems,
            lambda subsystem: subsystem.start(),
            should_call=lambda subsystem: subsystem.is_initialized,
            check_result=lambda subsystem: subsystem.is_running,
        )
        self._state = OrchestratorState.RUNNING
        self._publish_milestone(SystemEvents.STARTED)
        return report

    def update_all(self, delta_time: float) -> LifecycleReport:
        """Forward one frame tick to every running, unpaused subsystem."""
        if self._state is not OrchestratorState.RUNNING:
            return LifecycleReport.rejected_pass(LifecyclePhase.UPDATE)
        return self._run_pass(
            LifecyclePhase.UPDATE,
            self._subsystems,
            lambda subsystem: subsystem.update(delta_time),
            should_call=_is_active,
            log_timing=False,
        )

    def fixed_update_all(self, fixed_delta_time: float) -> LifecycleReport:
        """Forward one fixed step to every running, unpaused subsystem."""
        if self._state is not OrchestratorState.RUNNING:
            return LifecycleReport.rejected_pass(LifecyclePhase.FIXED_UPDATE)
        return self._run_pass(
            LifecyclePhase.FIXED_UPDATE,
            self._subsystems,
            lambda subsystem: subsystem.fixed_update(fixed_delta_time),
            should_call=_is_active,
            log_timing=False,
        )

    def pause_all(self) -> LifecycleReport:
        """Pause every running, unpaused subsystem."""
        if self._state is not OrchestratorState.RUNNING:
            logger.warning("Subsystems not running; cannot pause")
            return LifecycleReport.rejected_pass(LifecyclePhase.PAUSE)

        report = self._run_pass(
            LifecyclePhase.PAUSE,
            self._subsystems,
            lambda subsystem: subsystem.pause(),
            should_call=lambda subsystem: subsystem.is_running
            and not getattr(subsystem, "is_paused", False),
        )
        self._publish_milestone(SystemEvents.PAUSED)
        return report

    def resume_all(self) -> LifecycleReport:
        """Resume every paused subsystem."""
        if self._state is not OrchestratorState.RUNNING:
            logger.warning("Subsystems not running; cannot resume")
            return LifecycleReport.rejected_pass(LifecyclePhase.RESUME)

        report = self._run_pass(
            LifecyclePhase.RESUME,
            self._subsystems,
            lambda subsystem: subsystem.resume(),
            should_call=lambda subsystem: bool(getattr(subsystem, "is_paused", False)),
        )
        self._publish_milestone(SystemEvents.RESUMED)
        return report

    def shutdown_all(self) -> LifecycleReport:
        """
        Shut down every subsystem in reverse registration order.

        Failures are isolated the same way as other passes. Afterwards the
        orchestrator is NOT_INITIALIZED and can run again.
        """
        report = self._run_pass(
            LifecyclePhase.SHUTDOWN,
            list(reversed(self._subsystems)),
            lambda subsystem: subsystem.shutdown(),
        )
        self._state = OrchestratorState.NOT_INITIALIZED
        self._publish_milestone(SystemEvents.SHUTDOWN)
        return report

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @contextmanager
    def _pass_guard(self, phase: LifecyclePhase) -> Iterator[None]:
        previous = self._active_phase
        self._active_phase = phase
        try:
            yield
        finally:
            self._active_phase = previous

    def _run_pass(
        self,
        phase: LifecyclePhase,
        subsystems: List[GameSubsystem],
        call: Callable[[GameSubsystem], None],
        *,
        should_call: Optional[Callable[[GameSubsystem], bool]] = None,
        check_result: Optional[Callable[[GameSubsystem], bool]] = None,
        log_timing: bool = True,
    ) -> LifecycleReport:
        """
        Apply `call` to each subsystem with per-item isolation.

        A subsystem counts as failed when `call` raises, when it reports a
        swallowed error through `last_error`, or when `check_result` says
        the expected state was not reached.
        """
        report = LifecycleReport(phase=phase)
        pass_start = time.perf_counter()

        with self._pass_guard(phase):
            for subsystem in list(subsystems):
                name = subsystem.name
                if should_call is not None and not should_call(subsystem):
                    report.skipped.append(name)
                    continue

                item_start = time.perf_counter()
                try:
                    call(subsystem)
                except Exception as exc:
                    report.add_failure(name, exc)
                    logger.error(
                        "Subsystem %s failed",
                        phase.value,
                        extra={
                            "subsystem": name,
                            "phase": phase.value,
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                        },
                        exc_info=True,
                    )
                    continue

                swallowed = getattr(subsystem, "last_error", None)
                if swallowed is not None:
                    report.add_failure(name, swallowed)
                elif check_result is not None and not check_result(subsystem):
                    report.add_failure(
                        name,
                        SubsystemError(name, phase.value, RuntimeError("expected state not reached")),
                    )
                else:
                    report.succeeded.append(name)

                if log_timing:
                    elapsed_ms = (time.perf_counter() - item_start) * 1000
                    if elapsed_ms > Config.SLOW_HOOK_WARNING_MS:
                        logger.warning(
                            "Slow subsystem %s (%.2fms)",
                            phase.value,
                            elapsed_ms,
                            extra={
                                "subsystem": name,
                                "phase": phase.value,
                                "threshold_ms": Config.SLOW_HOOK_WARNING_MS,
                            },
                        )
                    else:
                        logger.debug(
                            "Subsystem %s complete (%.2fms)",
                            phase.value,
                            elapsed_ms,
                            extra={"subsystem": name, "phase": phase.value},
                        )

        if log_timing:
            logger.info(
                "Lifecycle pass %s complete: %d/%d succeeded (%.2fms)",
                phase.value,
                len(report.succeeded),
                len(subsystems),
                (time.perf_counter() - pass_start) * 1000,
                extra={
                    "phase": phase.value,
                    "failed": report.failed,
                    "skipped": report.skipped,
                },
            )
        elif report.failures:
            logger.warning(
                "Lifecycle pass %s had failures",
                phase.value,
                extra={"phase": phase.value, "failed": report.failed},
            )
        return report

    def _publish_milestone(self, channel: str) -> None:
        if self._event_bus is None:
            return
        try:
            self._event_bus.publish(channel)
        except Exception:
            # The bus already logged the subscriber failure.
            logger.error(
                "Milestone subscriber failed",
                extra={"channel": channel},
            )

    def __repr__(self) -> str:
        return (
            f"SubsystemOrchestrator(state={self._state.value}, "
            f"subsystems={[subsystem.name for subsystem in self._subsystems]})"
        )


def _is_active(subsystem: GameSubsystem) -> bool:
    """Running and not paused; only these receive frame ticks."""
    return subsystem.is_running and not getattr(subsystem, "is_paused", False)
