"""Per-kind animation behaviors.

Each kind is one class providing both renditions of the animation:
``evaluate`` for the live timeline and ``compile`` for the export engine.

Fade kinds gate their overlay with an enable expression (they are invisible
before the delay anyway). Pure slide kinds stay enabled and clamp their
position math so the overlay sits at its off-screen start until the delay
elapses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from brandr.core.animation.easing import EasingCurve, ease_out, ease_out_cubic, elastic_out
from brandr.core.animation.formulas import (
    EasingApproximation,
    TimeFormulas,
    fmt_number,
    target_x,
    target_y,
)
from brandr.core.animation.models import (
    AnimationKind,
    AnimationSpec,
    OverlayExpressions,
    OverlayRole,
    TimelineState,
)
from brandr.core.errors import UnsupportedAnimationKind
from brandr.core.utils.math import lerp

SLIDE_UP_DISTANCE = 1.0  # frame heights below target at p=0
SLIDE_FROM_RIGHT_DISTANCE = 1.5  # frame widths right of target at p=0
REVOLVE_START_RADIANS = -0.5


@dataclass(frozen=True)
class CompileContext:
    """Inputs shared by every behavior's ``compile``."""

    spec: AnimationSpec
    role: OverlayRole
    approximation: EasingApproximation = EasingApproximation.LINEAR

    @property
    def formulas(self) -> TimeFormulas:
        return TimeFormulas(self.spec, self.approximation)

    @property
    def target_x(self) -> str:
        return target_x(self.spec.anchor_for(self.role))

    @property
    def target_y(self) -> str:
        return target_y(self.spec.anchor_for(self.role))


class AnimationBehavior(ABC):
    """Interface implemented once per ``AnimationKind``."""

    kind: ClassVar[AnimationKind]
    gates_with_enable: ClassVar[bool] = True

    @abstractmethod
    def evaluate(self, progress: float) -> TimelineState:
        """Interpolated state at clamped progress ``p`` in [0, 1]."""

    @abstractmethod
    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        """Engine expressions equivalent to ``evaluate`` over absolute time."""

    def enable_expr(self, ctx: CompileContext) -> str:
        if self.gates_with_enable:
            return ctx.formulas.started
        return "1"


class StaticBehavior(AnimationBehavior):
    kind = AnimationKind.STATIC
    gates_with_enable = False

    def evaluate(self, progress: float) -> TimelineState:
        return TimelineState()

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        return OverlayExpressions(
            x_expr=ctx.target_x,
            y_expr=ctx.target_y,
            opacity_expr="1",
            enable_expr=self.enable_expr(ctx),
        )


class FadeInBehavior(AnimationBehavior):
    kind = AnimationKind.FADE_IN

    def evaluate(self, progress: float) -> TimelineState:
        return TimelineState(opacity=ease_out(progress))

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        return OverlayExpressions(
            x_expr=ctx.target_x,
            y_expr=ctx.target_y,
            opacity_expr=ctx.formulas.eased(EasingCurve.EASE_OUT),
            enable_expr=self.enable_expr(ctx),
        )


class SlideUpBehavior(AnimationBehavior):
    kind = AnimationKind.SLIDE_UP
    gates_with_enable = False

    def evaluate(self, progress: float) -> TimelineState:
        return TimelineState(offset_dy=(1.0 - ease_out(progress)) * SLIDE_UP_DISTANCE)

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        remaining = ctx.formulas.remaining(EasingCurve.EASE_OUT)
        return OverlayExpressions(
            x_expr=ctx.target_x,
            y_expr=f"{ctx.target_y}+H*{fmt_number(SLIDE_UP_DISTANCE)}*{remaining}",
            opacity_expr="1",
            enable_expr=self.enable_expr(ctx),
        )


class SlideUpFadeBehavior(AnimationBehavior):
    kind = AnimationKind.SLIDE_UP_FADE

    def evaluate(self, progress: float) -> TimelineState:
        eased = ease_out(progress)
        return TimelineState(opacity=eased, offset_dy=(1.0 - eased) * SLIDE_UP_DISTANCE)

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        formulas = ctx.formulas
        remaining = formulas.remaining(EasingCurve.EASE_OUT)
        return OverlayExpressions(
            x_expr=ctx.target_x,
            y_expr=f"{ctx.target_y}+H*{fmt_number(SLIDE_UP_DISTANCE)}*{remaining}",
            opacity_expr=formulas.eased(EasingCurve.EASE_OUT),
            enable_expr=self.enable_expr(ctx),
        )


class SlideFromRightBehavior(AnimationBehavior):
    kind = AnimationKind.SLIDE_FROM_RIGHT
    gates_with_enable = False

    def evaluate(self, progress: float) -> TimelineState:
        return TimelineState(
            offset_dx=(1.0 - ease_out_cubic(progress)) * SLIDE_FROM_RIGHT_DISTANCE
        )

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        remaining = ctx.formulas.remaining(EasingCurve.EASE_OUT_CUBIC)
        return OverlayExpressions(
            x_expr=f"{ctx.target_x}+W*{fmt_number(SLIDE_FROM_RIGHT_DISTANCE)}*{remaining}",
            y_expr=ctx.target_y,
            opacity_expr="1",
            enable_expr=self.enable_expr(ctx),
        )


class RevolveBehavior(AnimationBehavior):
    kind = AnimationKind.REVOLVE

    def evaluate(self, progress: float) -> TimelineState:
        # elastic_out overshoots; the rotation is intentionally left unclamped
        return TimelineState(
            opacity=ease_out(progress),
            rotation_radians=lerp(REVOLVE_START_RADIANS, 0.0, elastic_out(progress)),
        )

    def compile(self, ctx: CompileContext) -> OverlayExpressions:
        formulas = ctx.formulas
        remaining = formulas.remaining(EasingCurve.ELASTIC_OUT)
        return OverlayExpressions(
            x_expr=ctx.target_x,
            y_expr=ctx.target_y,
            opacity_expr=formulas.eased(EasingCurve.EASE_OUT),
            enable_expr=self.enable_expr(ctx),
            rotation_expr=f"{fmt_number(REVOLVE_START_RADIANS)}*{remaining}",
        )


BEHAVIORS: dict[AnimationKind, AnimationBehavior] = {
    behavior.kind: behavior
    for behavior in (
        StaticBehavior(),
        FadeInBehavior(),
        SlideUpBehavior(),
        SlideUpFadeBehavior(),
        SlideFromRightBehavior(),
        RevolveBehavior(),
    )
}

_missing = set(AnimationKind) - set(BEHAVIORS)
if _missing:
    raise RuntimeError(f"Animation kinds without behavior: {sorted(k.value for k in _missing)}")


def get_behavior(kind: AnimationKind | str) -> AnimationBehavior:
    """Resolve the behavior for a kind.

    Raises:
        UnsupportedAnimationKind: If ``kind`` is not a known animation kind
    """
    try:
        return BEHAVIORS[AnimationKind(kind)]
    except (ValueError, KeyError):
        raise UnsupportedAnimationKind(kind) from None
