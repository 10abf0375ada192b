"""Timeline engine for the live preview.

Pure functions of ``(spec, kind, elapsed)``; safe to call at any frequency.
Out-of-range elapsed times are clamped, never rejected.
"""

from __future__ import annotations

import numpy as np
from pydantic import BaseModel, ConfigDict

from brandr.core.animation.behaviors import get_behavior
from brandr.core.animation.models import AnimationKind, AnimationSpec, TimelineState
from brandr.core.utils.math import clamp


class TimelineSamples(BaseModel):
    """Timeline states sampled on a fixed frame grid (one array per channel)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    elapsed_ms: np.ndarray
    opacity: np.ndarray
    offset_dx: np.ndarray
    offset_dy: np.ndarray
    rotation_radians: np.ndarray

    def __len__(self) -> int:
        return int(self.elapsed_ms.shape[0])


def progress(spec: AnimationSpec, elapsed_ms: float) -> float:
    """Normalized animation progress in [0, 1].

    ``p = clamp((elapsed - delay) / duration, 0, 1)``; 0 before the delay.
    """
    return clamp((elapsed_ms - spec.delay_ms) / spec.duration_ms, 0.0, 1.0)


def evaluate(spec: AnimationSpec, kind: AnimationKind, elapsed_ms: float) -> TimelineState:
    """Interpolated overlay state at ``elapsed_ms`` since the session started.

    Args:
        spec: Animation spec (supplies delay and duration)
        kind: Animation kind to evaluate (usually ``spec.kind``)
        elapsed_ms: Milliseconds since the preview session started

    Returns:
        Fresh TimelineState for this instant

    Raises:
        UnsupportedAnimationKind: If ``kind`` is not a known kind

    Example:
        >>> spec = AnimationSpec(kind=AnimationKind.SLIDE_FROM_RIGHT, duration_ms=1000, delay_ms=0)
        >>> evaluate(spec, spec.kind, 0).offset_dx
        1.5
    """
    return get_behavior(kind).evaluate(progress(spec, elapsed_ms))


def is_complete(spec: AnimationSpec, elapsed_ms: float) -> bool:
    """True once progress has reached 1."""
    return progress(spec, elapsed_ms) >= 1.0


def sample(
    spec: AnimationSpec,
    kind: AnimationKind | None = None,
    *,
    fps: float = 30.0,
    tail_ms: float = 0.0,
) -> TimelineSamples:
    """Sample the timeline from 0 to ``delay + duration + tail_ms`` at ``fps``.

    The final sample always lands exactly on the end time so the end state is
    included regardless of frame alignment.

    Raises:
        ValueError: If fps <= 0
    """
    if fps <= 0:
        raise ValueError("fps must be > 0")

    kind = kind or spec.kind
    end_ms = spec.end_ms + tail_ms
    step_ms = 1000.0 / fps
    times = np.arange(0.0, end_ms, step_ms)
    times = np.append(times, end_ms)

    states = [evaluate(spec, kind, float(t)) for t in times]
    return TimelineSamples(
        elapsed_ms=times,
        opacity=np.array([s.opacity for s in states]),
        offset_dx=np.array([s.offset_dx for s in states]),
        offset_dy=np.array([s.offset_dy for s in states]),
        rotation_radians=np.array([s.rotation_radians for s in states]),
    )
