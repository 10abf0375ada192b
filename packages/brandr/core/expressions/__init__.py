"""Expression compiler and overlay graph builder for the export engine."""

from brandr.core.expressions.compiler import ExpressionCompiler
from brandr.core.expressions.graph import (
    BASE_LAYER,
    OUTPUT_LABEL,
    CompositionStage,
    ExpressionGraph,
    OverlayGraphBuilder,
    engine_arguments,
)
from brandr.core.expressions.validation import validate_expression

__all__ = [
    "BASE_LAYER",
    "OUTPUT_LABEL",
    "CompositionStage",
    "ExpressionCompiler",
    "ExpressionGraph",
    "OverlayGraphBuilder",
    "engine_arguments",
    "validate_expression",
]
