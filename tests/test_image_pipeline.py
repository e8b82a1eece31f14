# tests/test_image_pipeline.py
from __future__ import annotations

import io

import pytest
from PIL import Image, features

from reflet.core.errors import DecodeError, ImageValidationError, NotAnImage, TooLarge
from reflet.services import image_pipeline
from reflet.services.image_pipeline import (
    compress_progressive,
    create_thumbnail,
    fit_dimensions,
    optimal_format,
    resize_and_compress,
    validate,
)


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


# ---------- validate ----------
def test_validate_rejects_non_images():
    with pytest.raises(NotAnImage):
        validate("application/pdf", 10)
    with pytest.raises(NotAnImage):
        validate(None, 10)
    with pytest.raises(ImageValidationError):
        validate("text/plain", 10)


def test_validate_size_ceiling():
    validate("image/png", 100, max_bytes=100)
    with pytest.raises(TooLarge):
        validate("image/png", 101, max_bytes=100)


def test_validate_type_checked_first():
    # declared type is rejected before the size is even looked at
    with pytest.raises(NotAnImage):
        validate("video/mp4", 10 ** 9, max_bytes=100)


# ---------- fit_dimensions ----------
@pytest.mark.parametrize(
    "size,expected",
    [
        ((4000, 2000), (1200, 600)),
        ((2000, 4000), (600, 1200)),
        ((200, 100), (200, 100)),
        ((1200, 1200), (1200, 1200)),
        ((5000, 3), (1200, 1)),
    ],
)
def test_fit_dimensions(size, expected):
    assert fit_dimensions(*size, 1200, 1200) == expected


# ---------- resize_and_compress ----------
def test_resize_preserves_aspect_ratio(make_image):
    out = resize_and_compress(make_image(4000, 2000), 1200, 1200, 0.85, fmt="jpeg")
    assert (out.width, out.height) == (1200, 600)
    assert _open(out.data).size == (1200, 600)
    assert out.content_type == "image/jpeg"
    assert out.extension == "jpg"


def test_resize_never_upscales(make_image):
    out = resize_and_compress(make_image(200, 100), 1200, 1200, 0.85, fmt="jpeg")
    assert _open(out.data).size == (200, 100)


def test_resize_does_not_mutate_input(make_image):
    data = make_image(1600, 800)
    snapshot = bytes(data)
    resize_and_compress(data, 1200, 1200, 0.8, fmt="jpeg")
    assert data == snapshot


def test_jpeg_output_flattens_alpha(make_image):
    out = resize_and_compress(make_image(64, 64, mode="RGBA"), fmt="jpeg")
    assert _open(out.data).mode == "RGB"


@pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP")
def test_webp_preferred_when_available(make_image):
    assert optimal_format() == image_pipeline.WEBP
    out = resize_and_compress(make_image(300, 200))
    assert out.content_type == "image/webp"
    assert _open(out.data).format == "WEBP"


def test_unknown_output_format_rejected(make_image):
    with pytest.raises(ValueError):
        resize_and_compress(make_image(10, 10), fmt="gif")


def test_decode_error_on_garbage():
    with pytest.raises(DecodeError):
        resize_and_compress(b"ceci n'est pas une image")
    with pytest.raises(DecodeError):
        create_thumbnail(b"")


# ---------- create_thumbnail ----------
def test_thumbnail_is_square_from_center_band():
    # red | green | blue with the green band exactly where the centre crop lands
    img = Image.new("RGB", (4000, 2000), (255, 0, 0))
    img.paste((0, 255, 0), (1000, 0, 3000, 2000))
    img.paste((0, 0, 255), (3000, 0, 4000, 2000))
    buf = io.BytesIO()
    img.save(buf, format="PNG")

    thumb = create_thumbnail(buf.getvalue(), size=300, quality=0.9, fmt="jpeg")
    assert (thumb.width, thumb.height) == (300, 300)
    out = _open(thumb.data).convert("RGB")
    assert out.size == (300, 300)
    r, g, b = out.getpixel((150, 150))
    assert g > 200 and r < 60 and b < 60


def test_thumbnail_of_portrait_and_tiny_images(make_image):
    assert create_thumbnail(make_image(500, 1500), size=300, fmt="jpeg").width == 300
    tiny = create_thumbnail(make_image(40, 20), size=300, fmt="jpeg")
    assert _open(tiny.data).size == (300, 300)


# ---------- compress_progressive ----------
def test_progressive_stops_at_min_quality(make_image):
    noisy = make_image(800, 800, noise=True)
    result, quality, ext = compress_progressive(noisy, target_size_kb=10, min_quality=0.5, fmt="jpeg")
    assert quality == 0.5
    assert ext == "jpg"
    # best attempt is returned even though it is still over target
    assert result.size > 10 * 1024


def test_progressive_respects_custom_floor(make_image):
    noisy = make_image(400, 400, noise=True)
    _, quality, _ = compress_progressive(noisy, target_size_kb=1, min_quality=0.7, fmt="jpeg")
    assert quality == 0.7


def test_progressive_first_attempt_when_small_enough(make_image):
    result, quality, _ = compress_progressive(make_image(100, 100), target_size_kb=500, fmt="jpeg")
    assert quality == 0.9
    assert result.size <= 500 * 1024


def test_progressive_loop_is_bounded(make_image, monkeypatch):
    calls = []
    original = image_pipeline._encode

    def _counting(img, fmt, quality):
        calls.append(quality)
        return original(img, fmt, quality)

    monkeypatch.setattr(image_pipeline, "_encode", _counting)
    compress_progressive(make_image(300, 300, noise=True), target_size_kb=1, min_quality=0.5, fmt="jpeg")
    assert calls == [0.9, 0.8, 0.7, 0.6, 0.5]
