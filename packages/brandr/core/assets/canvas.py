"""Overlay asset rendering with Pillow.

Produces the transparent PNGs the export engine composites: a circular
profile photo with a white border and a rounded "name pill".
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from brandr.core.errors import AssetGenerationFailed

logger = logging.getLogger(__name__)

RGBA = tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)
BLACK_54: RGBA = (0, 0, 0, 138)


class CanvasRenderer(Protocol):
    """Produces overlay PNGs; the core only records their paths."""

    def render_circular_photo(self, source_image: Path, size: float, output_dir: Path) -> Path:
        """Render ``source_image`` as a circular photo of diameter ``size``."""
        ...

    def render_name_pill(self, text: str, output_dir: Path) -> Path:
        """Render ``text`` into a rounded pill."""
        ...


def _timestamped(output_dir: Path, prefix: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / f"{prefix}_{time.time_ns() // 1_000_000}.png"


class PillowCanvas:
    """Pillow-backed ``CanvasRenderer``.

    Args:
        border_width: White ring around the photo in pixels
        font_size: Name pill font size
        padding_h: Horizontal pill padding
        padding_v: Vertical pill padding
        corner_radius: Pill corner radius
        font_path: Optional TrueType font; Pillow's default font otherwise
    """

    def __init__(
        self,
        *,
        border_width: int = 3,
        font_size: int = 16,
        padding_h: int = 16,
        padding_v: int = 8,
        corner_radius: int = 20,
        font_path: Path | None = None,
    ) -> None:
        self.border_width = border_width
        self.font_size = font_size
        self.padding_h = padding_h
        self.padding_v = padding_v
        self.corner_radius = corner_radius
        self.font_path = font_path

    def _font(self) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if self.font_path is not None:
            try:
                return ImageFont.truetype(str(self.font_path), self.font_size)
            except OSError as e:
                raise AssetGenerationFailed(
                    f"Failed to load font {self.font_path}: {e}", path=self.font_path
                ) from e
        return ImageFont.load_default(size=self.font_size)

    def render_circular_photo(self, source_image: Path, size: float, output_dir: Path) -> Path:
        """Centre-crop ``source_image`` to a circle with a white border.

        Raises:
            AssetGenerationFailed: If the source cannot be read or written
        """
        diameter = max(1, round(size))
        total = diameter + 2 * self.border_width
        try:
            with Image.open(source_image) as src:
                photo = ImageOps.fit(src.convert("RGBA"), (diameter, diameter))
        except (OSError, UnidentifiedImageError) as e:
            raise AssetGenerationFailed(
                f"Failed to generate circular photo: {e}", path=source_image
            ) from e

        canvas = Image.new("RGBA", (total, total), (0, 0, 0, 0))
        draw = ImageDraw.Draw(canvas)
        if self.border_width > 0:
            draw.ellipse((0, 0, total - 1, total - 1), fill=WHITE)

        mask = Image.new("L", (diameter, diameter), 0)
        ImageDraw.Draw(mask).ellipse((0, 0, diameter - 1, diameter - 1), fill=255)
        canvas.paste(photo, (self.border_width, self.border_width), mask)

        output_path = _timestamped(output_dir, "profile")
        try:
            canvas.save(output_path, format="PNG")
        except OSError as e:
            raise AssetGenerationFailed(
                f"Failed to write circular photo: {e}", path=output_path
            ) from e

        logger.debug(f"Circular photo ({diameter}px) written to {output_path}")
        return output_path

    def render_name_pill(self, text: str, output_dir: Path) -> Path:
        """Render ``text`` on a semi-transparent rounded pill.

        Empty text yields an empty pill of the font's line height.

        Raises:
            AssetGenerationFailed: If the font cannot be loaded or the pill cannot be written
        """
        font = self._font()
        probe = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        left, _, right, _ = probe.textbbox((0, 0), text, font=font) if text else (0, 0, 0, 0)
        _, line_top, _, line_bottom = probe.textbbox((0, 0), "Ag", font=font)

        text_w = right - left
        text_h = line_bottom - line_top
        width = int(text_w + 2 * self.padding_h)
        height = int(text_h + 2 * self.padding_v)

        pill = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(pill)
        radius = min(self.corner_radius, height // 2)
        draw.rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=BLACK_54)
        if text:
            draw.text((self.padding_h - left, self.padding_v - line_top), text, font=font, fill=WHITE)

        output_path = _timestamped(output_dir, "name")
        try:
            pill.save(output_path, format="PNG")
        except OSError as e:
            raise AssetGenerationFailed(f"Failed to write name pill: {e}", path=output_path) from e

        logger.debug(f"Name pill {width}x{height} written to {output_path}")
        return output_path
