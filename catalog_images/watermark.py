"""Brand watermark overlay.

The overlay is a single line of semi-transparent text centered near the
bottom edge. Font size scales with image width but never drops below a
minimum, so the label stays legible on thumbnails and scales up on full
size originals.

A WatermarkOverlay is a pure function of the target width and height
(plus the configured label). It can be exported as an SVG document or
rasterized to an RGBA layer of exactly the target size for compositing.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Optional
from xml.sax.saxutils import escape

from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel, Field

from catalog_images.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Searched in order when no font path is configured
FONT_CANDIDATES = (
    "Arial.ttf",
    "/Library/Fonts/Arial.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "/usr/share/fonts/truetype/msttcorefonts/Arial.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "DejaVuSans.ttf",
)

SVG_FONT_FAMILY = "Arial, Helvetica, sans-serif"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def watermark_font_size(
    width: int,
    ratio: float = 0.03,
    minimum: int = 18,
) -> int:
    """Font size for an image of the given width: max(round(width * ratio), minimum)."""
    return max(_round_half_up(width * ratio), minimum)


class WatermarkOverlay(BaseModel):
    """Vector description of the watermark for one target size."""

    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    text: str
    font_size: int = Field(..., ge=1)
    padding: int = Field(..., ge=0)
    opacity: float = Field(default=0.45, ge=0, le=1)
    letter_spacing: int = Field(default=1, ge=0)

    @property
    def baseline_y(self) -> int:
        """Vertical position of the text baseline."""
        return self.height - self.padding

    @property
    def fill_alpha(self) -> int:
        return _round_half_up(255 * self.opacity)

    def to_svg(self) -> str:
        """Render the overlay as a standalone SVG document."""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{self.width}" height="{self.height}">\n'
            f'  <text x="50%" y="{self.baseline_y}" text-anchor="middle" '
            f'font-size="{self.font_size}" fill="white" '
            f'fill-opacity="{self.opacity}" '
            f'font-family="{SVG_FONT_FAMILY}" '
            f'style="letter-spacing: {self.letter_spacing}px;">'
            f"{escape(self.text)}</text>\n"
            f"</svg>\n"
        )

    def render(self, font_path: str = "") -> Image.Image:
        """Rasterize to a transparent RGBA layer of the target size."""
        layer = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = load_font(self.font_size, font_path)
        fill = (255, 255, 255, self.fill_alpha)

        # Draw glyph by glyph so letter spacing is honoured
        advances = [font.getlength(ch) for ch in self.text]
        total = sum(advances) + self.letter_spacing * (len(self.text) - 1)
        x = self.width / 2 - total / 2
        for ch, advance in zip(self.text, advances):
            draw.text((x, self.baseline_y), ch, font=font, fill=fill, anchor="ls")
            x += advance + self.letter_spacing

        return layer


@lru_cache(maxsize=32)
def load_font(size: int, font_path: str = "") -> ImageFont.FreeTypeFont:
    """Load a sans-serif TrueType font at the given size.

    Tries the configured path, then common system fonts, then Pillow's
    bundled default font.
    """
    candidates = (font_path,) + FONT_CANDIDATES if font_path else FONT_CANDIDATES
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("No system font found, using Pillow default font")
    return ImageFont.load_default(size=size)


def create_watermark(
    width: int,
    height: int,
    settings: Optional[Settings] = None,
) -> WatermarkOverlay:
    """Build the watermark overlay for an image of the given dimensions.

    Args:
        width: Target image width in pixels (positive).
        height: Target image height in pixels (positive).
        settings: Pipeline settings (defaults to get_settings()).

    Returns:
        WatermarkOverlay sized to exactly width x height.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width < 1 or height < 1:
        raise ValueError(f"watermark dimensions must be positive, got {width}x{height}")

    settings = settings or get_settings()
    font_size = watermark_font_size(
        width,
        ratio=settings.watermark_font_ratio,
        minimum=settings.watermark_min_font_size,
    )
    return WatermarkOverlay(
        width=width,
        height=height,
        text=settings.watermark_text,
        font_size=font_size,
        padding=_round_half_up(font_size * settings.watermark_padding_ratio),
        opacity=settings.watermark_opacity,
        letter_spacing=settings.watermark_letter_spacing,
    )


def has_transparency(img: Image.Image) -> bool:
    """True if img carries an alpha channel or a transparent palette entry."""
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


def apply_watermark(
    img: Image.Image,
    settings: Optional[Settings] = None,
) -> Image.Image:
    """Composite a watermark sized to img onto a copy of img.

    Images without transparency come back as RGB, others as RGBA.
    """
    settings = settings or get_settings()
    width, height = img.size
    overlay = create_watermark(width, height, settings)

    has_alpha = has_transparency(img)
    base = img.convert("RGBA")
    composed = Image.alpha_composite(base, overlay.render(settings.watermark_font_path))
    return composed if has_alpha else composed.convert("RGB")
