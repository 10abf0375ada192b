"""Animation spec, easing table, timeline engine and per-kind behaviors."""

from brandr.core.animation.behaviors import AnimationBehavior, CompileContext, get_behavior
from brandr.core.animation.easing import EasingCurve, ease_out, ease_out_cubic, elastic_out
from brandr.core.animation.formulas import EasingApproximation
from brandr.core.animation.models import (
    Anchor,
    AnimationKind,
    AnimationSpec,
    OverlayExpressions,
    OverlayRole,
    TimelineState,
    get_preset,
    list_presets,
)
from brandr.core.animation.timeline import evaluate, is_complete, progress, sample

__all__ = [
    "Anchor",
    "AnimationBehavior",
    "AnimationKind",
    "AnimationSpec",
    "CompileContext",
    "EasingApproximation",
    "EasingCurve",
    "OverlayExpressions",
    "OverlayRole",
    "TimelineState",
    "ease_out",
    "ease_out_cubic",
    "elastic_out",
    "evaluate",
    "get_behavior",
    "get_preset",
    "is_complete",
    "list_presets",
    "progress",
    "sample",
]
