"""Catalog image pipeline configuration.

Loads settings from environment variables (prefix ``CATALOG_IMAGES_``)
and an optional .env file using pydantic-settings. Invalid values fail
fast with a ValidationError.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Output format name → Pillow encoder name
PILLOW_FORMATS = {
    "webp": "WEBP",
    "jpeg": "JPEG",
    "png": "PNG",
}


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_IMAGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Paths ──
    image_dir: str = Field(
        default="img/products",
        description="Directory holding the source product images",
    )
    optimized_subdir: str = Field(
        default="optimized",
        description="Subdirectory of image_dir for full-size outputs",
    )
    thumbnail_subdir: str = Field(
        default="thumbnail",
        description="Subdirectory of image_dir for thumbnails",
    )
    tracker_filename: str = Field(
        default="optimized_images.json",
        description="JSON file (inside image_dir) listing already optimized sources",
    )

    # ── Encoding ──
    output_format: str = Field(default="webp", description="webp, jpeg or png")
    source_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "gif"],
        description="Extensions considered source images",
        min_length=1,
    )
    quality: int = Field(default=80, ge=1, le=100)
    thumbnail_size: int = Field(
        default=400,
        ge=1,
        description="Edge of the square box thumbnails are fitted inside",
    )

    # ── Watermark ──
    watermark_text: str = Field(default="Sapna Shri Jewellers", min_length=1)
    watermark_font_ratio: float = Field(
        default=0.03,
        gt=0,
        le=1,
        description="Font size as a fraction of image width",
    )
    watermark_min_font_size: int = Field(default=18, ge=1)
    watermark_padding_ratio: float = Field(
        default=0.8,
        ge=0,
        description="Distance of the baseline from the bottom edge, as a fraction of font size",
    )
    watermark_opacity: float = Field(default=0.45, ge=0, le=1)
    watermark_letter_spacing: int = Field(default=1, ge=0)
    watermark_font_path: str = Field(
        default="",
        description="TrueType font file; empty searches common system fonts",
    )

    # ── General ──
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got '{v}'")
        return upper

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Normalize '.WEBP' / 'jpg' style values to a known format name."""
        fmt = v.strip().lower().lstrip(".")
        if fmt == "jpg":
            fmt = "jpeg"
        if fmt not in PILLOW_FORMATS:
            raise ValueError(
                f"output_format must be one of {set(PILLOW_FORMATS)}, got '{v}'"
            )
        return fmt

    @field_validator("source_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Store extensions lowercased and without the leading dot."""
        return [ext.strip().lower().lstrip(".") for ext in v if ext.strip()]

    @property
    def image_path(self) -> Path:
        return Path(self.image_dir)

    @property
    def optimized_dir(self) -> Path:
        return self.image_path / self.optimized_subdir

    @property
    def thumbnail_dir(self) -> Path:
        return self.image_path / self.thumbnail_subdir

    @property
    def tracker_path(self) -> Path:
        return self.image_path / self.tracker_filename

    @property
    def output_extension(self) -> str:
        """File extension of generated images, e.g. '.webp'."""
        return ".jpg" if self.output_format == "jpeg" else f".{self.output_format}"

    def is_output_format(self, filename: str) -> bool:
        """True if filename already carries an output-format extension."""
        suffixes = (".jpg", ".jpeg") if self.output_format == "jpeg" else (self.output_extension,)
        return filename.lower().endswith(suffixes)

    @property
    def pillow_format(self) -> str:
        return PILLOW_FORMATS[self.output_format]


def get_settings(**overrides) -> Settings:
    """Create a Settings instance with optional overrides.

    Args:
        **overrides: Key-value pairs to override env/defaults.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If any value fails validation.
    """
    return Settings(**overrides)
