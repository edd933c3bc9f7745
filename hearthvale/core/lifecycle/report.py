"""
Lifecycle pass reports.

Every orchestrator pass returns a `LifecycleReport` listing which subsystems
completed the phase and which failed, so fault isolation can be inspected
without scraping logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from hearthvale.core.lifecycle.state import LifecyclePhase


@dataclass(frozen=True)
class LifecycleFailure:
    """One subsystem's failure within a pass."""

    subsystem: str
    phase: LifecyclePhase
    exception: BaseException

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subsystem": self.subsystem,
            "phase": self.phase.value,
            "error": str(self.exception),
            "error_type": type(self.exception).__name__,
        }


@dataclass
class LifecycleReport:
    """
    Outcome of one orchestrator pass.

    Attributes
    ----------
    phase:
        Which pass produced the report.
    succeeded:
        Subsystem names, in the order they completed.
    failures:
        `LifecycleFailure` entries, in the order they occurred.
    skipped:
        Subsystems the pass did not call (e.g. not running during update).
    rejected:
        The pass itself was refused (e.g. `start_all` before
        `initialize_all`) and had no side effects.
    """

    phase: LifecyclePhase
    succeeded: List[str] = field(default_factory=list)
    failures: List[LifecycleFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    rejected: bool = False

    @property
    def ok(self) -> bool:
        return not self.rejected and not self.failures

    @property
    def failed(self) -> List[str]:
        return [failure.subsystem for failure in self.failures]

    def add_failure(self, subsystem: str, exception: BaseException) -> None:
        self.failures.append(LifecycleFailure(subsystem, self.phase, exception))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "ok": self.ok,
            "rejected": self.rejected,
            "succeeded": list(self.succeeded),
            "skipped": list(self.skipped),
            "failures": [failure.to_dict() for failure in self.failures],
        }

    @classmethod
    def rejected_pass(cls, phase: LifecyclePhase) -> "LifecycleReport":
        return cls(phase=phase, rejected=True)
