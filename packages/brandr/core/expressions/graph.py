"""Overlay graph builder.

Sequences the photo and name overlays onto the base video layer as an
immutable ``ExpressionGraph`` and renders it as an FFmpeg ``filter_complex``.
Composition order is fixed (base <- photo <- name) to match the preview's
z-order; each stage's output feeds the next stage's base input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from brandr.core.animation.models import OverlayExpressions, OverlayRole
from brandr.core.config.models import ExportConfig
from brandr.core.errors import CompilationError, EmptyGraph

logger = logging.getLogger(__name__)

BASE_LAYER = "0:v"
OUTPUT_LABEL = "out"
COMPOSITION_ORDER: tuple[OverlayRole, ...] = (OverlayRole.PHOTO, OverlayRole.NAME)

_TIME_SYMBOL_RE = re.compile(r"\bt\b")


class CompositionStage(BaseModel):
    """One composition step of the graph.

    An overlay stage blends ``overlay_asset`` over ``input_layer``. A
    pass-through stage (``overlay_asset is None``) forwards the input layer
    unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    input_layer: str
    output_label: str
    overlay_asset: Path | None = None
    input_index: int | None = None
    role: OverlayRole | None = None
    x_expr: str = "0"
    y_expr: str = "0"
    opacity_expr: str = "1"
    enable_expr: str = "1"
    rotation_expr: str | None = None

    @property
    def is_passthrough(self) -> bool:
        return self.overlay_asset is None

    def render(self) -> str:
        """Render this stage as ``filter_complex`` chains."""
        if self.is_passthrough:
            return f"[{self.input_layer}]copy[{self.output_label}]"

        assert self.role is not None and self.input_index is not None
        prep_label = f"{self.role.value}_prep"
        prep = [f"[{self.input_index}:v]format=rgba"]
        if self.opacity_expr != "1":
            # geq binds frame time to T rather than t
            alpha = _TIME_SYMBOL_RE.sub("T", self.opacity_expr)
            prep.append(f"geq=r='r(X,Y)':g='g(X,Y)':b='b(X,Y)':a='alpha(X,Y)*({alpha})'")
        if self.rotation_expr is not None:
            prep.append(
                f"rotate=angle='{self.rotation_expr}':fillcolor=none:"
                f"ow='rotw(iw)':oh='roth(ih)'"
            )
        overlay = (
            f"[{self.input_layer}][{prep_label}]overlay="
            f"x='{self.x_expr}':y='{self.y_expr}':"
            f"enable='{self.enable_expr}':format=auto[{self.output_label}]"
        )
        return f"{','.join(prep)}[{prep_label}];{overlay}"


class ExpressionGraph(BaseModel):
    """Ordered, read-only composition instructions for the engine.

    Attributes:
        base_layer: Label of the base video stream
        stages: Composition stages in execution order
        output_label: Label of the final composed stream
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_layer: str = BASE_LAYER
    stages: tuple[CompositionStage, ...] = Field(min_length=1)
    output_label: str = OUTPUT_LABEL

    @property
    def overlay_stages(self) -> tuple[CompositionStage, ...]:
        return tuple(s for s in self.stages if not s.is_passthrough)

    @property
    def is_passthrough(self) -> bool:
        return not self.overlay_stages

    @property
    def overlay_inputs(self) -> list[Path]:
        """Overlay asset paths ordered by engine input index."""
        ordered = sorted(self.overlay_stages, key=lambda s: s.input_index or 0)
        return [s.overlay_asset for s in ordered if s.overlay_asset is not None]

    def stage_for(self, role: OverlayRole) -> CompositionStage | None:
        return next((s for s in self.stages if s.role == role), None)

    def to_filter_complex(self) -> str:
        """Render the whole graph as a ``filter_complex`` string.

        Example:
            >>> graph = OverlayGraphBuilder().build(expressions={}, allow_passthrough=True)
            >>> graph.to_filter_complex()
            '[0:v]copy[out]'
        """
        return ";".join(stage.render() for stage in self.stages)


class OverlayGraphBuilder:
    """Builds ``ExpressionGraph`` instances from overlay assets and expressions.

    Example:
        >>> builder = OverlayGraphBuilder()
        >>> graph = builder.build(
        ...     name_asset=Path("name.png"),
        ...     expressions={OverlayRole.NAME: OverlayExpressions(x_expr="0", y_expr="0")},
        ... )
        >>> len(graph.overlay_stages)
        1
    """

    def build(
        self,
        base_layer: str = BASE_LAYER,
        *,
        photo_asset: Path | str | None = None,
        name_asset: Path | str | None = None,
        expressions: Mapping[OverlayRole, OverlayExpressions],
        allow_passthrough: bool = False,
    ) -> ExpressionGraph:
        """Compose the present overlays over ``base_layer``.

        Args:
            base_layer: Label of the base video stream
            photo_asset: Rendered circular photo, or None to skip the photo stage
            name_asset: Rendered name pill, or None to skip the name stage
            expressions: Per-role expressions; required for every present asset
            allow_passthrough: Permit a graph with no overlays (single
                pass-through stage)

        Returns:
            Immutable ExpressionGraph

        Raises:
            EmptyGraph: If no overlay is present and pass-through was not requested
            CompilationError: If a present overlay has no expressions
        """
        assets: dict[OverlayRole, Path | None] = {
            OverlayRole.PHOTO: Path(photo_asset) if photo_asset is not None else None,
            OverlayRole.NAME: Path(name_asset) if name_asset is not None else None,
        }
        present = [role for role in COMPOSITION_ORDER if assets[role] is not None]

        if not present:
            if not allow_passthrough:
                raise EmptyGraph(
                    "No overlay assets to compose; request pass-through explicitly"
                )
            logger.debug("Building pass-through graph (no overlays)")
            return ExpressionGraph(
                base_layer=base_layer,
                stages=(
                    CompositionStage(input_layer=base_layer, output_label=OUTPUT_LABEL),
                ),
            )

        stages: list[CompositionStage] = []
        previous = base_layer
        for input_index, role in enumerate(present, start=1):
            if role not in expressions:
                raise CompilationError(f"Missing expressions for {role.value} overlay")
            exprs = expressions[role]
            is_last = input_index == len(present)
            label = OUTPUT_LABEL if is_last else f"bg_{role.value}"
            stages.append(
                CompositionStage(
                    input_layer=previous,
                    output_label=label,
                    overlay_asset=assets[role],
                    input_index=input_index,
                    role=role,
                    x_expr=exprs.x_expr,
                    y_expr=exprs.y_expr,
                    opacity_expr=exprs.opacity_expr,
                    enable_expr=exprs.enable_expr,
                    rotation_expr=exprs.rotation_expr,
                )
            )
            previous = label

        logger.debug(f"Built graph with {len(stages)} overlay stage(s): {[r.value for r in present]}")
        return ExpressionGraph(base_layer=base_layer, stages=tuple(stages))


def engine_arguments(
    graph: ExpressionGraph,
    video: Path,
    output: Path,
    settings: ExportConfig | None = None,
) -> list[str]:
    """Full FFmpeg argument vector (without the binary) for one export.

    Overlay PNGs are looped still inputs; the composed stream ends with the
    source video (``-shortest``) and any source audio is copied through.

    Args:
        graph: Composition graph; its overlay inputs follow the video input
        video: Source video (engine input 0)
        output: Output file, overwritten if present
        settings: Encoder settings

    Returns:
        Argument list suitable for ``asyncio.create_subprocess_exec``
    """
    settings = settings or ExportConfig()
    args = ["-hide_banner", "-nostats", "-progress", "pipe:1", "-i", str(video)]
    for overlay in graph.overlay_inputs:
        args += ["-loop", "1", "-i", str(overlay)]
    args += [
        "-filter_complex",
        graph.to_filter_complex(),
        "-map",
        f"[{graph.output_label}]",
        "-map",
        "0:a?",
        "-c:v",
        settings.video_codec,
        "-preset",
        settings.preset,
        "-crf",
        str(settings.crf),
        "-c:a",
        settings.audio_codec,
        "-shortest",
        "-y",
        str(output),
    ]
    return args
