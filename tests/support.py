"""
Test doubles for lifecycle tests.

`RecordingSubsystem` appends `(name, phase)` to a shared journal on every
hook, so ordering across several subsystems can be asserted from one list.
The Alpha/Bravo/Charlie subclasses exist because the orchestrator indexes
subsystems by type.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from hearthvale.core.lifecycle.base import BaseSubsystem

Journal = List[Tuple[str, str]]


class RecordingSubsystem(BaseSubsystem):
    def __init__(
        self,
        journal: Journal,
        event_bus: Any = None,
        *,
        fail_on: Iterable[str] = (),
        name: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> None:
        super().__init__(event_bus, name=name, priority=priority)
        self.journal = journal
        self.fail_on = set(fail_on)
        self.deltas: List[float] = []
        self.fixed_deltas: List[float] = []

    def _record(self, phase: str) -> None:
        self.journal.append((self.name, phase))
        if phase in self.fail_on:
            raise RuntimeError(f"{self.name} failed during {phase}")

    def on_initialize(self) -> None:
        self._record("initialize")

    def on_start(self) -> None:
        self._record("start")

    def on_update(self, delta_time: float) -> None:
        self.deltas.append(delta_time)
        self._record("update")

    def on_fixed_update(self, fixed_delta_time: float) -> None:
        self.fixed_deltas.append(fixed_delta_time)
        self._record("fixed_update")

    def on_shutdown(self) -> None:
        self._record("shutdown")

    def on_reset(self) -> None:
        self._record("reset")

    def on_pause(self) -> None:
        self._record("pause")

    def on_resume(self) -> None:
        self._record("resume")


class AlphaSubsystem(RecordingSubsystem):
    pass


class BravoSubsystem(RecordingSubsystem):
    pass


class CharlieSubsystem(RecordingSubsystem):
    pass


class PlainSubsystem:
    """Satisfies the subsystem contract without inheriting from BaseSubsystem."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self._initialized = False
        self._running = False

    @property
    def name(self) -> str:
        return "Plain"

    @property
    def priority(self) -> int:
        return 7

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_running(self) -> bool:
        return self._running

    def initialize(self) -> None:
        self.calls.append("initialize")
        self._initialized = True

    def start(self) -> None:
        self.calls.append("start")
        self._running = True

    def update(self, delta_time: float) -> None:
        self.calls.append("update")

    def fixed_update(self, fixed_delta_time: float) -> None:
        self.calls.append("fixed_update")

    def shutdown(self) -> None:
        self.calls.append("shutdown")
        self._initialized = False
        self._running = False

    def reset(self) -> None:
        self.calls.append("reset")

    def pause(self) -> None:
        self.calls.append("pause")

    def resume(self) -> None:
        self.calls.append("resume")


def phases_of(journal: Journal, phase: str) -> List[str]:
    """Names of subsystems that recorded `phase`, in journal order."""
    return [name for name, recorded in journal if recorded == phase]
