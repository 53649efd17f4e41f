"""Per-image conversion: watermarked full-size output and thumbnail.

Both operations are best-effort. Any failure while decoding, compositing
or encoding one image is logged and returned as a failed
ConversionResult; it never aborts the batch.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Collection, Optional

from PIL import Image

from catalog_images.config import Settings, get_settings
from catalog_images.models import ConversionResult
from catalog_images.watermark import apply_watermark, has_transparency

logger = logging.getLogger(__name__)

# Product shots from phones and DSLRs can be large
Image.MAX_IMAGE_PIXELS = 300_000_000


def output_name(filename: str, settings: Settings) -> str:
    """Derived file name: source base name plus the output extension."""
    return f"{Path(filename).stem}{settings.output_extension}"


def _save(img: Image.Image, path: Path, settings: Settings) -> None:
    """Encode img at the configured quality."""
    if settings.pillow_format == "JPEG" and img.mode != "RGB":
        img = img.convert("RGB")
    img.save(path, settings.pillow_format, quality=settings.quality)


def optimize_image(
    input_path: str | Path,
    filename: str,
    tracked: Collection[str] = frozenset(),
    settings: Optional[Settings] = None,
) -> ConversionResult:
    """Write the watermarked full-size output for one source image.

    Skipped when the filename is already tracked or the source is
    already in the output format. The tracker is only consulted here;
    recording a successful conversion is left to the caller.

    Args:
        input_path: Path to the source image.
        filename: Source filename as it appears in the tracker.
        tracked: Filenames already optimized in earlier runs.
        settings: Pipeline settings (defaults to get_settings()).

    Returns:
        ConversionResult with status converted, skipped or failed.
    """
    settings = settings or get_settings()

    if filename in tracked:
        logger.debug("Already optimized: %s", filename)
        return ConversionResult(filename=filename, kind="optimized", status="skipped")
    if settings.is_output_format(filename):
        logger.debug("Already %s: %s", settings.output_format, filename)
        return ConversionResult(filename=filename, kind="optimized", status="skipped")

    output_path = settings.optimized_dir / output_name(filename, settings)

    try:
        with Image.open(input_path) as img:
            watermarked = apply_watermark(img, settings)
            _save(watermarked, output_path, settings)

        width, height = watermarked.size
        logger.info("Optimized + watermarked: %s", filename)
        return ConversionResult(
            filename=filename,
            kind="optimized",
            status="converted",
            output_path=str(output_path),
            width=width,
            height=height,
        )

    except Exception as e:
        logger.error("Failed to optimize %s: %s", filename, e)
        return ConversionResult(
            filename=filename,
            kind="optimized",
            status="failed",
            error=str(e),
        )


def _resize_to_buffer(img: Image.Image, box: int) -> io.BytesIO:
    """Fit img inside a box x box square (never enlarging) and encode as PNG."""
    mode = "RGBA" if has_transparency(img) else "RGB"
    resized = img.convert(mode)
    resized.thumbnail((box, box), Image.LANCZOS)

    buffer = io.BytesIO()
    resized.save(buffer, "PNG")
    buffer.seek(0)
    return buffer


def create_thumbnail(
    input_path: str | Path,
    filename: str,
    settings: Optional[Settings] = None,
) -> ConversionResult:
    """Write the watermarked thumbnail for one source image.

    Thumbnails are regenerated on every run regardless of the tracker.
    The resized image is re-read before the watermark is sized, so the
    overlay matches the real thumbnail dimensions even for extreme
    aspect ratios.
    """
    settings = settings or get_settings()
    thumb_path = settings.thumbnail_dir / output_name(filename, settings)

    try:
        with Image.open(input_path) as img:
            buffer = _resize_to_buffer(img, settings.thumbnail_size)

        with Image.open(buffer) as resized:
            resized.load()
            watermarked = apply_watermark(resized, settings)
            _save(watermarked, thumb_path, settings)

        width, height = watermarked.size
        logger.info("Thumbnail + watermark: %s", filename)
        return ConversionResult(
            filename=filename,
            kind="thumbnail",
            status="converted",
            output_path=str(thumb_path),
            width=width,
            height=height,
        )

    except Exception as e:
        logger.error("Failed to create thumbnail for %s: %s", filename, e)
        return ConversionResult(
            filename=filename,
            kind="thumbnail",
            status="failed",
            error=str(e),
        )
