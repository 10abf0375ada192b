"""Tests for AnimationSpec, presets and result models."""

from __future__ import annotations

import pytest

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
from brandr.core.errors import ConfigurationError


class TestAnimationSpec:
    """Tests for AnimationSpec construction and derivation."""

    def test_defaults(self) -> None:
        """Defaults match the slide-up-fade branding template."""
        spec = AnimationSpec()
        assert spec.kind == AnimationKind.SLIDE_UP_FADE
        assert spec.duration_ms == 500
        assert spec.delay_ms == 500
        assert spec.photo_anchor == Anchor(x=0.5, y=0.85)
        assert spec.name_anchor == Anchor(x=0.5, y=0.92)
        assert spec.photo_size == 60.0
        assert spec.display_name == "User Name"

    def test_derived_times(self) -> None:
        """Seconds and end time are derived from milliseconds."""
        spec = AnimationSpec(duration_ms=750, delay_ms=250)
        assert spec.duration_s == 0.75
        assert spec.delay_s == 0.25
        assert spec.end_ms == 1000

    @pytest.mark.parametrize("duration_ms", [0, -1])
    def test_non_positive_duration_rejected(self, duration_ms: int) -> None:
        """duration must be > 0."""
        with pytest.raises(ConfigurationError):
            AnimationSpec(duration_ms=duration_ms)

    def test_negative_delay_rejected(self) -> None:
        """delay must be >= 0."""
        with pytest.raises(ConfigurationError):
            AnimationSpec(delay_ms=-1)

    def test_zero_delay_allowed(self) -> None:
        """A zero delay starts the animation immediately."""
        assert AnimationSpec(delay_ms=0).delay_ms == 0

    def test_configuration_error_is_value_error(self) -> None:
        """Invalid specs can be caught as ValueError."""
        with pytest.raises(ValueError):
            AnimationSpec(photo_size=0)

    def test_unknown_field_rejected(self) -> None:
        """Extra fields are forbidden."""
        with pytest.raises(ConfigurationError):
            AnimationSpec(speed=2)

    def test_anchor_out_of_range_rejected(self) -> None:
        """Anchors are normalized to [0, 1]."""
        with pytest.raises(ConfigurationError):
            AnimationSpec(photo_anchor=(1.5, 0.5))

    def test_anchor_accepts_pairs(self) -> None:
        """(x, y) pairs are coerced to anchors."""
        spec = AnimationSpec(name_anchor=(0.25, 0.75))
        assert spec.name_anchor == Anchor(x=0.25, y=0.75)

    def test_empty_display_name_valid(self) -> None:
        """An empty name still produces a valid spec."""
        assert AnimationSpec(display_name="").display_name == ""

    def test_frozen(self) -> None:
        """Specs cannot be mutated in place."""
        spec = AnimationSpec()
        with pytest.raises(Exception):
            spec.delay_ms = 0  # type: ignore[misc]

    def test_with_changes_returns_copy(self) -> None:
        """with_changes leaves the original untouched."""
        spec = AnimationSpec()
        derived = spec.with_changes(kind=AnimationKind.REVOLVE, delay_ms=0)
        assert derived.kind == AnimationKind.REVOLVE
        assert derived.delay_ms == 0
        assert spec.kind == AnimationKind.SLIDE_UP_FADE
        assert spec.delay_ms == 500
        assert derived.photo_anchor == spec.photo_anchor

    def test_with_changes_validates(self) -> None:
        """Derived specs are validated like fresh ones."""
        with pytest.raises(ConfigurationError):
            AnimationSpec().with_changes(duration_ms=0)

    def test_anchor_for_role(self) -> None:
        """Each overlay role has its own anchor."""
        spec = AnimationSpec()
        assert spec.anchor_for(OverlayRole.PHOTO) == spec.photo_anchor
        assert spec.anchor_for(OverlayRole.NAME) == spec.name_anchor


class TestPresets:
    """Tests for built-in presets."""

    def test_list_presets(self) -> None:
        """All presets are listed in sorted order."""
        assert list_presets() == [
            "fade_in_bottom_center",
            "revolve",
            "slide_from_right",
            "slide_up_crafto",
            "static_bottom_center",
        ]

    @pytest.mark.parametrize("name", list_presets())
    def test_presets_are_valid_specs(self, name: str) -> None:
        """Every preset is a validated spec."""
        preset = get_preset(name)
        assert isinstance(preset, AnimationSpec)
        assert preset.duration_ms > 0

    def test_slide_from_right_preset(self) -> None:
        """Slide from right runs 1s with no delay."""
        preset = get_preset("slide_from_right")
        assert preset.kind == AnimationKind.SLIDE_FROM_RIGHT
        assert preset.duration_ms == 1000
        assert preset.delay_ms == 0

    def test_revolve_preset_name(self) -> None:
        """Revolve preset carries its own display name."""
        assert get_preset("revolve").display_name == "Praveen Kandula"

    def test_unknown_preset(self) -> None:
        """Unknown preset names raise ConfigurationError listing options."""
        with pytest.raises(ConfigurationError, match="Available"):
            get_preset("nope")


class TestStateModels:
    """Tests for TimelineState and OverlayExpressions."""

    def test_timeline_state_defaults(self) -> None:
        """Default state is the fully visible end state."""
        state = TimelineState()
        assert state.opacity == 1.0
        assert state.offset == (0.0, 0.0)
        assert state.rotation_radians == 0.0

    def test_all_expressions_without_rotation(self) -> None:
        """Rotation is omitted when absent."""
        exprs = OverlayExpressions(x_expr="0", y_expr="1")
        assert exprs.all_expressions() == ["0", "1", "1", "1"]

    def test_all_expressions_with_rotation(self) -> None:
        """Rotation is appended when present."""
        exprs = OverlayExpressions(x_expr="0", y_expr="1", rotation_expr="t")
        assert exprs.all_expressions()[-1] == "t"
