from __future__ import annotations

from brandr.core.utils.math import clamp

ASSETS_READY = 0.1
PROCESSING_SPAN = 0.8
PROCESSING_CAP = 0.9


class ProgressEstimator:
    """Maps engine processed-time onto a smoothed export progress value.

    The real source length is unknown until the engine finishes, so processed
    time is scaled against an assumed total. Reported progress starts at 0.1
    once overlay assets exist, never moves backwards, and only reaches 1.0
    through ``finish``.

    Args:
        assumed_duration_s: Assumed source length in seconds

    Example:
        >>> estimator = ProgressEstimator(assumed_duration_s=30.0)
        >>> estimator.update(15.0)
        0.5
    """

    def __init__(self, assumed_duration_s: float = 30.0) -> None:
        if assumed_duration_s <= 0:
            raise ValueError("assumed_duration_s must be > 0")
        self.assumed_duration_s = assumed_duration_s
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def assets_ready(self) -> float:
        return self._advance(ASSETS_READY)

    def update(self, processed_s: float) -> float:
        """Record processed engine time (seconds) and return the new progress."""
        fraction = clamp(processed_s / self.assumed_duration_s, 0.0, PROCESSING_CAP)
        return self._advance(ASSETS_READY + fraction * PROCESSING_SPAN)

    def finish(self) -> float:
        self._value = 1.0
        return self._value

    def _advance(self, candidate: float) -> float:
        self._value = max(self._value, candidate)
        return self._value
