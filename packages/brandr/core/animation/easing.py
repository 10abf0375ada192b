"""Easing curve table backed by easing-functions.

This table is the only thing the live timeline and the expression compiler
share besides the spec itself. Every curve has two renditions that must stay
identical: a Python callable for frame-by-frame evaluation and a closed-form
expression for the compositing engine (used by the exact approximation mode).
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, TypeGuard, cast

import numpy as np
from easing_functions import CubicEaseOut, ElasticEaseOut


class EasingCurve(str, Enum):
    """Named easing curves used by animation behaviors."""

    LINEAR = "linear"
    EASE_OUT = "ease_out"
    EASE_OUT_CUBIC = "ease_out_cubic"
    ELASTIC_OUT = "elastic_out"


class _EaseMethodEasing(Protocol):
    def ease(self, t: float) -> float: ...


def _has_ease(e: Any) -> TypeGuard[_EaseMethodEasing]:
    return hasattr(e, "ease")


EasingFn = Callable[[float], float]

_EASING_DEFAULTS: dict[str, float] = {
    "start": 0.0,
    "end": 1.0,
    "duration": 1.0,
}


def _make_easing(easing_cls: type[Any], **kwargs: Any) -> EasingFn:
    obj = easing_cls(**{**_EASING_DEFAULTS, **kwargs})

    if _has_ease(obj):
        return lambda t: float(obj.ease(t))

    if not callable(obj):
        raise TypeError(f"{type(obj).__name__} is not callable and has no .ease(t)")
    return cast(EasingFn, obj)


def _pinned(easing: EasingFn) -> EasingFn:
    """Clamp input to [0, 1] and return exact endpoint values.

    Interior values are passed through untouched so overshooting curves
    (elastic) keep their overshoot.
    """

    def curve(p: float) -> float:
        if p <= 0.0:
            return 0.0
        if p >= 1.0:
            return 1.0
        return easing(p)

    return curve


def linear(p: float) -> float:
    """Identity curve clamped to [0, 1]."""
    return min(max(p, 0.0), 1.0)


ease_out: EasingFn = _pinned(_make_easing(CubicEaseOut))
ease_out_cubic: EasingFn = _pinned(_make_easing(CubicEaseOut))
elastic_out: EasingFn = _pinned(_make_easing(ElasticEaseOut))

EASING_CURVES: dict[EasingCurve, EasingFn] = {
    EasingCurve.LINEAR: linear,
    EasingCurve.EASE_OUT: ease_out,
    EasingCurve.EASE_OUT_CUBIC: ease_out_cubic,
    EasingCurve.ELASTIC_OUT: elastic_out,
}


def evaluate_curve(curve: EasingCurve, p: float) -> float:
    """Evaluate a named curve at progress ``p``."""
    return EASING_CURVES[curve](p)


def sample_curve(curve: EasingCurve, n_samples: int) -> np.ndarray:
    """Sample a curve on a uniform grid over [0, 1] inclusive.

    Args:
        curve: Curve to sample
        n_samples: Number of samples (must be >= 2)

    Returns:
        Array of curve values, first sample at p=0 and last at p=1

    Raises:
        ValueError: If n_samples < 2
    """
    if n_samples < 2:
        raise ValueError("n_samples must be >= 2")
    fn = EASING_CURVES[curve]
    grid = np.linspace(0.0, 1.0, n_samples)
    return np.array([fn(float(p)) for p in grid])


def curve_expression(curve: EasingCurve, p: str) -> str:
    """Closed-form engine expression of a curve applied to progress ``p``.

    ``p`` must already be clamped to [0, 1]. The formulas mirror the
    easing-functions implementations: cubic ease-out is ``(p-1)^3+1`` and
    elastic ease-out is ``sin(-13*pi/2*(p+1))*2^(-10p)+1``.

    Example:
        >>> curve_expression(EasingCurve.EASE_OUT, "P")
        '(1-pow(1-(P),3))'
    """
    if curve == EasingCurve.LINEAR:
        return f"({p})"
    if curve in (EasingCurve.EASE_OUT, EasingCurve.EASE_OUT_CUBIC):
        return f"(1-pow(1-({p}),3))"
    if curve == EasingCurve.ELASTIC_OUT:
        return f"(sin(-13*PI/2*(({p})+1))*pow(2,-10*({p}))+1)"
    raise ValueError(f"No closed form for curve: {curve}")
