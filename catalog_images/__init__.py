"""Catalog image preparation: WebP optimization, watermarking and thumbnails."""

__version__ = "1.0.0"
