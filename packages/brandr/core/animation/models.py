"""Animation data models.

``AnimationSpec`` is the single declarative description shared by the live
preview and the offline export. It is frozen: derived specs are produced
with ``with_changes`` and are validated exactly like freshly built ones.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from brandr.core.errors import ConfigurationError


class AnimationKind(str, Enum):
    """Closed set of overlay animations.

    Adding a member requires a matching behavior in
    ``brandr.core.animation.behaviors`` (checked at import time).
    """

    STATIC = "static"
    FADE_IN = "fade_in"
    SLIDE_UP = "slide_up"
    SLIDE_UP_FADE = "slide_up_fade"
    REVOLVE = "revolve"
    SLIDE_FROM_RIGHT = "slide_from_right"


class OverlayRole(str, Enum):
    """Overlay layers composited over the base video, in z-order."""

    PHOTO = "photo"
    NAME = "name"


class Anchor(BaseModel):
    """Normalized overlay centre relative to the frame (0,0 = top-left)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float = Field(ge=0.0, le=1.0, description="Horizontal position (0=left, 1=right)")
    y: float = Field(ge=0.0, le=1.0, description="Vertical position (0=top, 1=bottom)")


class AnimationSpec(BaseModel):
    """Immutable description of one branding overlay animation.

    Attributes:
        kind: Animation applied to both photo and name overlays
        duration_ms: Animation length in milliseconds (> 0)
        delay_ms: Time before the animation starts in milliseconds (>= 0)
        photo_anchor: Centre of the circular photo
        name_anchor: Centre of the name pill
        photo_size: Diameter of the circular photo in output pixels
        display_name: Text rendered into the name pill (may be empty)

    Raises:
        ConfigurationError: If any field is invalid

    Example:
        >>> spec = AnimationSpec(kind=AnimationKind.FADE_IN, duration_ms=800)
        >>> spec.with_changes(delay_ms=0).delay_s
        0.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: AnimationKind = AnimationKind.SLIDE_UP_FADE
    duration_ms: int = Field(default=500, gt=0)
    delay_ms: int = Field(default=500, ge=0)
    photo_anchor: Anchor = Field(default_factory=lambda: Anchor(x=0.5, y=0.85))
    name_anchor: Anchor = Field(default_factory=lambda: Anchor(x=0.5, y=0.92))
    photo_size: float = Field(default=60.0, gt=0.0)
    display_name: str = "User Name"

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid animation spec: {e}") from e

    @field_validator("photo_anchor", "name_anchor", mode="before")
    @classmethod
    def _coerce_anchor(cls, v: Any) -> Any:
        """Accept ``(x, y)`` pairs as anchors."""
        if isinstance(v, (tuple, list)) and len(v) == 2:
            return {"x": v[0], "y": v[1]}
        return v

    @property
    def duration_s(self) -> float:
        """Duration in seconds for time expressions."""
        return self.duration_ms / 1000.0

    @property
    def delay_s(self) -> float:
        """Delay in seconds for time expressions."""
        return self.delay_ms / 1000.0

    @property
    def end_ms(self) -> int:
        """Elapsed time at which the animation reaches its end state."""
        return self.delay_ms + self.duration_ms

    def anchor_for(self, role: OverlayRole) -> Anchor:
        """Return the anchor of the given overlay role."""
        if role == OverlayRole.PHOTO:
            return self.photo_anchor
        return self.name_anchor

    def with_changes(self, **overrides: Any) -> AnimationSpec:
        """Return a validated copy with the given fields replaced.

        Raises:
            ConfigurationError: If the resulting spec is invalid
        """
        data = self.model_dump()
        data.update(overrides)
        return type(self)(**data)


class TimelineState(BaseModel):
    """Interpolated overlay state for a single preview frame.

    Offsets are in normalized frame units: ``offset_dx=1.0`` is one frame
    width to the right, ``offset_dy=1.0`` one frame height down.
    """

    model_config = ConfigDict(frozen=True)

    opacity: float = 1.0
    offset_dx: float = 0.0
    offset_dy: float = 0.0
    rotation_radians: float = 0.0

    @property
    def offset(self) -> tuple[float, float]:
        """Offset as ``(dx, dy)``."""
        return (self.offset_dx, self.offset_dy)


class OverlayExpressions(BaseModel):
    """Time-parameterized engine expressions for one overlay.

    All expressions are functions of absolute elapsed time ``t`` and the
    engine's frame symbols (``W``/``H`` for the base frame, ``w``/``h`` for
    the overlay).

    Attributes:
        x_expr: Overlay left edge
        y_expr: Overlay top edge
        opacity_expr: Alpha multiplier in [0, 1]
        enable_expr: Non-zero while the overlay stage renders
        rotation_expr: Rotation in radians, None when the overlay never rotates
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    x_expr: str
    y_expr: str
    opacity_expr: str = "1"
    enable_expr: str = "1"
    rotation_expr: str | None = None

    def all_expressions(self) -> list[str]:
        """Return every non-empty expression, in field order."""
        exprs = [self.x_expr, self.y_expr, self.opacity_expr, self.enable_expr]
        if self.rotation_expr is not None:
            exprs.append(self.rotation_expr)
        return exprs


# Built-in templates
PRESETS: dict[str, AnimationSpec] = {
    "static_bottom_center": AnimationSpec(
        kind=AnimationKind.STATIC,
        photo_anchor=(0.5, 0.85),
        name_anchor=(0.5, 0.92),
    ),
    "fade_in_bottom_center": AnimationSpec(
        kind=AnimationKind.FADE_IN,
        duration_ms=500,
        delay_ms=500,
    ),
    "slide_up_crafto": AnimationSpec(
        kind=AnimationKind.SLIDE_UP_FADE,
        duration_ms=500,
        delay_ms=500,
    ),
    "revolve": AnimationSpec(
        kind=AnimationKind.REVOLVE,
        display_name="Praveen Kandula",
    ),
    "slide_from_right": AnimationSpec(
        kind=AnimationKind.SLIDE_FROM_RIGHT,
        duration_ms=1000,
        delay_ms=0,
    ),
}


def list_presets() -> list[str]:
    """Return the names of all built-in presets."""
    return sorted(PRESETS)


def get_preset(name: str) -> AnimationSpec:
    """Look up a built-in preset by name.

    Raises:
        ConfigurationError: If no preset has that name
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown preset '{name}'. Available: {', '.join(list_presets())}"
        ) from None
