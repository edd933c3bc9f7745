"""
Host loop driving a `GameContext`.

Each frame runs zero or more fixed steps (fixed-step accumulator) followed
by exactly one variable tick. The frame delta is clamped so a long stall
(debugger, slow disk) does not trigger a burst of catch-up steps.

No sleeping and no threads: pacing is the host's concern.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from hearthvale.core.infra.application_context import GameContext
from hearthvale.core.logging.logger import LogContext, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FrameResult:
    frame: int
    delta_time: float
    fixed_steps: int


class GameLoop:
    """
    Fixed-step game loop.

    Usage:
        loop = GameLoop(context)
        loop.run(max_frames=600)
    """

    def __init__(
        self,
        context: GameContext,
        clock: Callable[[], float] = time.perf_counter,
        *,
        fixed_delta_time: Optional[float] = None,
        max_frame_delta: Optional[float] = None,
    ) -> None:
        config = context.config
        self._context = context
        self._clock = clock
        self._fixed_delta_time = (
            fixed_delta_time
            if fixed_delta_time is not None
            else config.get_float("core.loop.fixed_delta_time", 0.02)
        )
        self._max_frame_delta = (
            max_frame_delta
            if max_frame_delta is not None
            else config.get_float("core.loop.max_frame_delta", 0.25)
        )
        if self._fixed_delta_time <= 0:
            raise ValueError(f"fixed_delta_time must be positive, got {self._fixed_delta_time}")
        if self._max_frame_delta < self._fixed_delta_time:
            raise ValueError("max_frame_delta must be at least fixed_delta_time")

        self._accumulator = 0.0
        self._last_time: Optional[float] = None
        self._frame = 0
        self._running = False

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def fixed_delta_time(self) -> float:
        return self._fixed_delta_time

    def run_frame(self) -> FrameResult:
        """Advance one frame; the first frame has a delta of zero."""
        now = self._clock()
        delta = 0.0 if self._last_time is None else now - self._last_time
        self._last_time = now

        if delta > self._max_frame_delta:
            logger.debug(
                "Frame delta clamped",
                extra={"raw_delta": delta, "max_frame_delta": self._max_frame_delta},
            )
            delta = self._max_frame_delta
        delta = max(delta, 0.0)

        self._accumulator += delta
        fixed_steps = 0
        with LogContext(frame=self._frame, correlation_id=f"frame-{self._frame}"):
            while self._accumulator >= self._fixed_delta_time:
                self._context.fixed_tick(self._fixed_delta_time)
                self._accumulator -= self._fixed_delta_time
                fixed_steps += 1
            self._context.tick(delta)

        result = FrameResult(frame=self._frame, delta_time=delta, fixed_steps=fixed_steps)
        self._frame += 1
        return result

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Run frames until `stop()` is called or `max_frames` have run.

        Returns the number of frames executed by this call.
        """
        self._running = True
        executed = 0
        logger.info(
            "Game loop started",
            extra={
                "fixed_delta_time": self._fixed_delta_time,
                "max_frame_delta": self._max_frame_delta,
                "max_frames": max_frames,
            },
        )
        try:
            while self._running and (max_frames is None or executed < max_frames):
                self.run_frame()
                executed += 1
        finally:
            self._running = False
            logger.info("Game loop stopped", extra={"frames": executed})
        return executed

    def stop(self) -> None:
        self._running = False
