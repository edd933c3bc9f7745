"""
EventMetrics and EventMetricsRecorder for the Hearthvale EventBus.

Purpose
-------
Observability into publishing and dispatch: how often each channel is
published, how many callbacks actually ran, and how many raised.

Design Decisions
----------------
- **Immutable snapshots**: `EventMetrics` is frozen; mutation goes through
  the recorder.
- **Listener count is not tracked here**: the registry is the source of
  truth and the bus passes the live count into `snapshot()`.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EventMetrics:
    """
    Immutable snapshot of event bus metrics.

    Examples
    --------
    >>> metrics = EventMetrics(
    ...     events_published={"Player.LevelUp": 40},
    ...     listener_errors={"Player.LevelUp": 2},
    ...     total_listeners=10,
    ... )
    >>> metrics.get_summary()["error_rate"]
    5.0
    """

    events_published: dict[str, int] = field(default_factory=dict)
    callbacks_invoked: dict[str, int] = field(default_factory=dict)
    listener_errors: dict[str, int] = field(default_factory=dict)
    total_listeners: int = 0

    def get_summary(self) -> dict[str, Any]:
        total_events = sum(self.events_published.values())
        total_errors = sum(self.listener_errors.values())
        error_rate = (total_errors / max(1, total_events)) * 100.0

        return {
            "total_events_published": total_events,
            "events_by_channel": dict(self.events_published),
            "total_callbacks_invoked": sum(self.callbacks_invoked.values()),
            "total_errors": total_errors,
            "errors_by_channel": dict(self.listener_errors),
            "total_listeners": self.total_listeners,
            "error_rate": round(error_rate, 2),
        }


class EventMetricsRecorder:
    """
    Mutable metrics recorder for the EventBus.

    Examples
    --------
    >>> recorder = EventMetricsRecorder()
    >>> recorder.record_publish("Economy.GoldGained")
    >>> recorder.snapshot(total_listeners=3).events_published
    {'Economy.GoldGained': 1}
    """

    def __init__(self) -> None:
        self._events_published: defaultdict[str, int] = defaultdict(int)
        self._callbacks_invoked: defaultdict[str, int] = defaultdict(int)
        self._listener_errors: defaultdict[str, int] = defaultdict(int)

    def record_publish(self, channel: str) -> None:
        self._events_published[channel] += 1

    def record_invocation(self, channel: str) -> None:
        self._callbacks_invoked[channel] += 1

    def record_error(self, channel: str) -> None:
        self._listener_errors[channel] += 1

    def reset(self) -> None:
        self._events_published.clear()
        self._callbacks_invoked.clear()
        self._listener_errors.clear()

    def snapshot(self, total_listeners: int = 0) -> EventMetrics:
        """Return a frozen copy; dicts are copied so later updates don't leak."""
        return EventMetrics(
            events_published=dict(self._events_published),
            callbacks_invoked=dict(self._callbacks_invoked),
            listener_errors=dict(self._listener_errors),
            total_listeners=total_listeners,
        )
