"""Expression compiler.

Turns an ``AnimationSpec`` into per-overlay engine expressions of absolute
time. Output is deterministic: compiling the same spec twice yields
byte-identical strings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from brandr.core.animation.behaviors import CompileContext, get_behavior
from brandr.core.animation.formulas import EasingApproximation
from brandr.core.animation.models import (
    AnimationKind,
    AnimationSpec,
    OverlayExpressions,
    OverlayRole,
)
from brandr.core.expressions.validation import validate_expression

logger = logging.getLogger(__name__)


class ExpressionCompiler:
    """Compiles animation specs into engine expressions.

    Args:
        approximation: Easing rendition (LINEAR matches the historical export,
            EXACT reproduces the preview curves)
        validate: Run syntactic validation on every emitted expression

    Example:
        >>> compiler = ExpressionCompiler()
        >>> spec = AnimationSpec(kind=AnimationKind.FADE_IN, delay_ms=500)
        >>> compiler.compile(spec, spec.kind, OverlayRole.NAME).enable_expr
        'gte(t,0.5)'
    """

    def __init__(
        self,
        approximation: EasingApproximation = EasingApproximation.LINEAR,
        *,
        validate: bool = True,
    ) -> None:
        self.approximation = EasingApproximation(approximation)
        self.validate = validate

    def compile(
        self,
        spec: AnimationSpec,
        kind: AnimationKind,
        role: OverlayRole,
    ) -> OverlayExpressions:
        """Compile expressions for one overlay.

        Args:
            spec: Animation spec
            kind: Animation kind (usually ``spec.kind``)
            role: Overlay being positioned (photo or name)

        Returns:
            OverlayExpressions for the overlay stage

        Raises:
            UnsupportedAnimationKind: If ``kind`` is not a known kind
            InvalidExpression: If validation is enabled and an expression is malformed
        """
        behavior = get_behavior(kind)
        ctx = CompileContext(spec=spec, role=OverlayRole(role), approximation=self.approximation)
        expressions = behavior.compile(ctx)

        if self.validate:
            for expr in expressions.all_expressions():
                validate_expression(expr)

        logger.debug(
            f"Compiled {behavior.kind.value} for {ctx.role.value} "
            f"({self.approximation.value}): x={expressions.x_expr} y={expressions.y_expr}"
        )
        return expressions

    def compile_roles(
        self,
        spec: AnimationSpec,
        roles: Iterable[OverlayRole],
        kind: AnimationKind | None = None,
    ) -> dict[OverlayRole, OverlayExpressions]:
        """Compile several overlays of the same spec.

        Returns:
            Map of role -> expressions, in the order given
        """
        kind = kind or spec.kind
        return {OverlayRole(role): self.compile(spec, kind, role) for role in roles}
