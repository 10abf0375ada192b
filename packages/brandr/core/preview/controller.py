"""Live preview controller.

Evaluates the timeline once per rendered frame and hands the state to a
render sink. The controller never blocks: a frame clock (UI frame callback,
or ``play`` on asyncio) calls ``tick``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum

from brandr.core.animation.models import AnimationKind, AnimationSpec, TimelineState
from brandr.core.animation.timeline import evaluate, is_complete

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
RenderSink = Callable[[TimelineState], None]


class PreviewStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    COMPLETED = "completed"
    STOPPED = "stopped"


class PreviewController:
    """Drives the timeline for one preview session.

    Completion is signalled exactly once per run, on the frame where
    progress reaches 1. Later ticks are no-ops that keep the final state
    until ``restart``.

    Args:
        spec: Animation to preview
        sink: Receives the state of every rendered frame
        on_complete: One-shot completion callback
        clock: Monotonic time source in seconds

    Example:
        >>> controller = PreviewController(spec, sink=canvas.draw)
        >>> controller.start()
        >>> controller.tick()  # from the UI frame callback
    """

    def __init__(
        self,
        spec: AnimationSpec,
        *,
        sink: RenderSink | None = None,
        on_complete: Callable[[], None] | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.spec = spec
        self.sink = sink
        self.on_complete = on_complete
        self.clock = clock
        self.status = PreviewStatus.IDLE
        self._started_at: float | None = None
        self._state = evaluate(spec, spec.kind, 0.0)

    @property
    def current_state(self) -> TimelineState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self.status == PreviewStatus.PLAYING

    def elapsed_ms(self, now: float | None = None) -> float:
        if self._started_at is None:
            return 0.0
        now = self.clock() if now is None else now
        return max(0.0, (now - self._started_at) * 1000.0)

    def start(self) -> None:
        """Begin playing from the top; no-op while already playing."""
        if self.is_playing:
            return
        self._begin()

    def restart(self) -> None:
        """Reset elapsed time to zero and replay delay-then-animate."""
        self._begin()

    def stop(self) -> None:
        """Stop ticking; the last rendered state is kept."""
        if self.status == PreviewStatus.PLAYING:
            self.status = PreviewStatus.STOPPED
            logger.debug("Preview stopped")

    def change_kind(self, kind: AnimationKind) -> None:
        """Switch animation kind and replay with the derived spec."""
        if kind == self.spec.kind:
            return
        self.spec = self.spec.with_changes(kind=kind)
        logger.debug(f"Preview kind changed to {self.spec.kind.value}")
        self.restart()

    def tick(self, now: float | None = None) -> TimelineState:
        """Evaluate and render one frame.

        Args:
            now: Frame timestamp from the clock; read from ``clock`` when None

        Returns:
            The state for this frame (the held state when not playing)
        """
        if not self.is_playing:
            return self._state

        elapsed = self.elapsed_ms(now)
        self._state = evaluate(self.spec, self.spec.kind, elapsed)
        if self.sink:
            self.sink(self._state)

        if is_complete(self.spec, elapsed):
            self.status = PreviewStatus.COMPLETED
            logger.debug(f"Preview completed after {elapsed:.0f}ms")
            if self.on_complete:
                self.on_complete()
        return self._state

    async def play(self, fps: float = 60.0) -> TimelineState:
        """Start and tick on asyncio at ``fps`` until completed or stopped."""
        if fps <= 0:
            raise ValueError("fps must be > 0")
        self.start()
        interval = 1.0 / fps
        while self.is_playing:
            self.tick()
            if self.is_playing:
                await asyncio.sleep(interval)
        return self._state

    def _begin(self) -> None:
        self._started_at = self.clock()
        self.status = PreviewStatus.PLAYING
        self._state = evaluate(self.spec, self.spec.kind, 0.0)
        logger.debug(f"Preview started ({self.spec.kind.value})")
