"""Tests for the brand watermark overlay."""

import pytest
from PIL import Image, ImageChops

from catalog_images.config import Settings
from catalog_images.watermark import (
    apply_watermark,
    create_watermark,
    watermark_font_size,
)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


def test_font_size_scales_with_width():
    assert watermark_font_size(2000) == 60
    assert watermark_font_size(1000) == 30


def test_font_size_never_below_minimum():
    """Small thumbnails still get a legible label."""
    assert watermark_font_size(400) == 18
    assert watermark_font_size(10) == 18
    assert watermark_font_size(1) == 18


def test_font_size_rounds_half_up():
    assert watermark_font_size(1050, ratio=0.5, minimum=1) == 525
    assert watermark_font_size(5, ratio=0.5, minimum=1) == 3


def test_overlay_geometry(settings):
    overlay = create_watermark(2000, 1500, settings)
    assert overlay.width == 2000
    assert overlay.height == 1500
    assert overlay.font_size == 60
    assert overlay.padding == 48
    assert overlay.baseline_y == 1452
    assert overlay.text == "Sapna Shri Jewellers"


def test_overlay_padding_on_thumbnail(settings):
    overlay = create_watermark(400, 300, settings)
    assert overlay.font_size == 18
    assert overlay.padding == 14


def test_overlay_is_deterministic(settings):
    assert create_watermark(640, 480, settings) == create_watermark(640, 480, settings)


@pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
def test_non_positive_dimensions_rejected(settings, size):
    with pytest.raises(ValueError):
        create_watermark(*size, settings=settings)


def test_custom_label_and_floor():
    settings = Settings(
        _env_file=None,
        watermark_text="Acme & Co",
        watermark_min_font_size=24,
    )
    overlay = create_watermark(300, 300, settings)
    assert overlay.font_size == 24
    assert overlay.text == "Acme & Co"


def test_to_svg(settings):
    svg = create_watermark(1000, 800, settings).to_svg()
    assert svg.startswith("<svg")
    assert 'width="1000" height="800"' in svg
    assert 'font-size="30"' in svg
    assert 'y="776"' in svg
    assert 'text-anchor="middle"' in svg
    assert 'fill-opacity="0.45"' in svg
    assert "Sapna Shri Jewellers" in svg


def test_to_svg_escapes_label():
    settings = Settings(_env_file=None, watermark_text="Gold <&> Co")
    svg = create_watermark(500, 500, settings).to_svg()
    assert "Gold &lt;&amp;&gt; Co" in svg


def test_render_matches_target_size(settings):
    layer = create_watermark(640, 480, settings).render()
    assert layer.mode == "RGBA"
    assert layer.size == (640, 480)


def test_render_draws_near_bottom(settings):
    """Text is drawn in the lower part of the layer, semi-transparent."""
    layer = create_watermark(640, 480, settings).render()
    alpha = layer.getchannel("A")
    bbox = alpha.getbbox()
    assert bbox is not None
    left, top, right, bottom = bbox
    assert top > 480 // 2
    assert bottom <= 480
    assert max(alpha.getdata()) <= round(255 * 0.45)


def test_render_is_centered(settings):
    layer = create_watermark(800, 400, settings).render()
    left, _, right, _ = layer.getchannel("A").getbbox()
    assert abs((left + right) / 2 - 400) < 10


def test_apply_watermark_keeps_rgb(settings):
    img = Image.new("RGB", (600, 400), color=(0, 0, 0))
    out = apply_watermark(img, settings)
    assert out.mode == "RGB"
    assert out.size == (600, 400)
    diff = ImageChops.difference(img, out).getbbox()
    assert diff is not None
    assert diff[1] > 200


def test_apply_watermark_keeps_alpha(settings):
    img = Image.new("RGBA", (600, 400), color=(0, 0, 0, 0))
    out = apply_watermark(img, settings)
    assert out.mode == "RGBA"


def test_apply_watermark_palette_image(settings):
    img = Image.new("P", (300, 300), color=3)
    out = apply_watermark(img, settings)
    assert out.mode == "RGB"
    assert out.size == (300, 300)
