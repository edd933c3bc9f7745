"""
Subsystem contract.

Every pluggable gameplay module exposes this surface to the orchestrator.
`BaseSubsystem` implements it; any other object with the same attributes
satisfies it structurally.

All methods are synchronous and return nothing. Failures surface through
logging, except `initialize()`, which raises so the orchestrator's caller
can see it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class GameSubsystem(Protocol):
    """Structural interface for orchestrated subsystems."""

    @property
    def name(self) -> str: ...

    @property
    def priority(self) -> int:
        """Advisory ordering hint; execution follows registration order."""
        ...

    @property
    def is_initialized(self) -> bool: ...

    @property
    def is_running(self) -> bool: ...

    def initialize(self) -> None: ...

    def start(self) -> None: ...

    def update(self, delta_time: float) -> None: ...

    def fixed_update(self, fixed_delta_time: float) -> None: ...

    def shutdown(self) -> None: ...

    def reset(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...
