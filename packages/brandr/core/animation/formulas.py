"""Closed-form time formulas in the compositing engine's expression language.

The engine evaluates expressions once per output frame with the absolute
stream time bound to ``t``; there is no clock state. Everything here is plain
string building with fixed numeric formatting so the same spec always yields
byte-identical text.
"""

from __future__ import annotations

from enum import Enum

from brandr.core.animation.easing import EasingCurve, curve_expression
from brandr.core.animation.models import Anchor, AnimationSpec


class EasingApproximation(str, Enum):
    """How easing curves are rendered into engine expressions.

    LINEAR replaces every curve with linear progress (the historical export
    behavior; visibly differs from the preview for non-linear curves).
    EXACT emits the curve's closed form so export matches the preview.
    """

    LINEAR = "linear"
    EXACT = "exact"


def fmt_number(value: float) -> str:
    """Format a number for expressions.

    Integral values drop the decimal point and other values keep at most six
    decimals with trailing zeros stripped.

    Example:
        >>> fmt_number(1.0), fmt_number(0.5), fmt_number(1 / 3)
        ('1', '0.5', '0.333333')
    """
    if float(value).is_integer():
        return str(int(value))
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def target_x(anchor: Anchor) -> str:
    """Left edge placing the overlay centre at the anchor."""
    return f"W*{fmt_number(anchor.x)}-w/2"


def target_y(anchor: Anchor) -> str:
    """Top edge placing the overlay centre at the anchor."""
    return f"H*{fmt_number(anchor.y)}-h/2"


class TimeFormulas:
    """Builds progress-derived expressions for one spec.

    Args:
        spec: Animation spec supplying delay and duration
        approximation: Easing rendition mode

    Example:
        >>> f = TimeFormulas(AnimationSpec(delay_ms=500, duration_ms=1000))
        >>> f.remaining(EasingCurve.EASE_OUT)
        'min(max(1-(t-0.5)/1,0),1)'
    """

    def __init__(
        self,
        spec: AnimationSpec,
        approximation: EasingApproximation = EasingApproximation.LINEAR,
    ) -> None:
        self._delay = fmt_number(spec.delay_s)
        self._duration = fmt_number(spec.duration_s)
        self.approximation = approximation

    @property
    def progress(self) -> str:
        """Linear progress ``p`` clamped to [0, 1]."""
        return f"min(max((t-{self._delay})/{self._duration},0),1)"

    @property
    def started(self) -> str:
        """Non-zero once the delay has elapsed."""
        return f"gte(t,{self._delay})"

    def eased(self, curve: EasingCurve) -> str:
        """Curve value at the current progress."""
        if self.approximation == EasingApproximation.LINEAR:
            return self.progress
        return curve_expression(curve, self.progress)

    def remaining(self, curve: EasingCurve) -> str:
        """``1 - curve(p)``: 1 at the start state, 0 at the end state.

        In linear mode this is ``max(1-(t-delay)/duration,0)`` additionally
        capped at 1 so frames before the delay hold the start value.
        """
        if self.approximation == EasingApproximation.LINEAR:
            return f"min(max(1-(t-{self._delay})/{self._duration},0),1)"
        return f"(1-{curve_expression(curve, self.progress)})"
