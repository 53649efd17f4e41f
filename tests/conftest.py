"""Shared fixtures for the image pipeline tests."""

from pathlib import Path

import pytest
from PIL import Image

from catalog_images.config import Settings


@pytest.fixture
def settings(tmp_path):
    """Settings with every path inside a temporary product folder."""
    image_dir = tmp_path / "img" / "products"
    image_dir.mkdir(parents=True)
    return Settings(_env_file=None, image_dir=str(image_dir))


@pytest.fixture
def make_image(settings):
    """Factory writing a solid-color image into the source directory."""

    def _make(name: str, size=(800, 600), mode="RGB", color=(40, 40, 40)) -> Path:
        path = settings.image_path / name
        img = Image.new(mode, size, color=color)
        img.save(path)
        return path

    return _make


@pytest.fixture
def sample_images(make_image):
    """Three product photos of different sizes and formats."""
    return [
        make_image("ring.jpg", size=(1600, 1200)),
        make_image("necklace.png", size=(800, 800)),
        make_image("bangle.jpeg", size=(300, 900)),
    ]
