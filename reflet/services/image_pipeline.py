# reflet/services/image_pipeline.py
# Preprocesado de imágenes antes de subirlas: validación, redimensionado, miniatura
from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError, features

from reflet.core.errors import DecodeError, NotAnImage, TooLarge
from reflet.core.settings import settings

log = logging.getLogger(__name__)

# (pillow format, mime type, extension)
WEBP = ("WEBP", "image/webp", "webp")
JPEG = ("JPEG", "image/jpeg", "jpg")

PROGRESSIVE_START_QUALITY = 0.9
PROGRESSIVE_STEP = 0.1


@dataclass(frozen=True)
class ProcessedImage:
    data: bytes
    width: int
    height: int
    format: str
    content_type: str
    extension: str

    @property
    def size(self) -> int:
        return len(self.data)


def optimal_format() -> Tuple[str, str, str]:
    """WebP when this Pillow build can encode it, JPEG otherwise."""
    return WEBP if features.check("webp") else JPEG


def _format_for(fmt: Optional[str]) -> Tuple[str, str, str]:
    if fmt is None:
        return optimal_format()
    f = fmt.lower()
    if f in ("webp", "image/webp"):
        return WEBP
    if f in ("jpeg", "jpg", "image/jpeg"):
        return JPEG
    raise ValueError(f"Unsupported output format: {fmt}")


# ---------- Validation ----------
def validate(content_type: Optional[str], size: int, max_bytes: Optional[int] = None) -> None:
    """Cheap checks on the declared type and byte size; nothing is decoded."""
    if not content_type or not content_type.lower().startswith("image/"):
        raise NotAnImage(content_type)
    limit = settings.IMAGE_MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    if size > limit:
        raise TooLarge(size, limit)


# ---------- Helpers ----------
def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _decode(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Impossible de lire l'image: {e}") from e
    # orientation from EXIF, as a browser would display it
    return ImageOps.exif_transpose(img)


def _prepare_mode(img: Image.Image, pil_format: str) -> Image.Image:
    has_alpha = img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info)
    if pil_format == "JPEG":
        if has_alpha:
            rgba = img.convert("RGBA")
            # JPEG has no alpha channel: flatten on white
            bg = Image.new("RGB", rgba.size, (255, 255, 255))
            bg.paste(rgba, mask=rgba.split()[-1])
            return bg
        return img.convert("RGB") if img.mode != "RGB" else img
    if has_alpha:
        return img.convert("RGBA") if img.mode != "RGBA" else img
    return img.convert("RGB") if img.mode != "RGB" else img


def _quality_int(quality: float) -> int:
    return max(1, min(100, _round_half_up(quality * 100)))


def _encode(img: Image.Image, fmt: Tuple[str, str, str], quality: float) -> ProcessedImage:
    pil_format, mime, ext = fmt
    out = io.BytesIO()
    _prepare_mode(img, pil_format).save(out, format=pil_format, quality=_quality_int(quality))
    return ProcessedImage(
        data=out.getvalue(),
        width=img.width,
        height=img.height,
        format=pil_format,
        content_type=mime,
        extension=ext,
    )


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale down by min(maxW/w, maxH/h) only when a bound is exceeded."""
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, _round_half_up(width * ratio)), max(1, _round_half_up(height * ratio))


def _resized(img: Image.Image, max_width: int, max_height: int) -> Image.Image:
    w, h = fit_dimensions(img.width, img.height, max_width, max_height)
    if (w, h) == img.size:
        return img
    return img.resize((w, h), Image.Resampling.LANCZOS)


# ---------- Operations ----------
def resize_and_compress(
    data: bytes,
    max_width: int = 1200,
    max_height: int = 1200,
    quality: float = 0.85,
    fmt: Optional[str] = None,
) -> ProcessedImage:
    img = _resized(_decode(data), max_width, max_height)
    return _encode(img, _format_for(fmt), quality)


def create_thumbnail(data: bytes, size: int = 300, quality: float = 0.8, fmt: Optional[str] = None) -> ProcessedImage:
    """Centre square crop of side min(w, h), scaled to exactly size x size."""
    img = _decode(data)
    w, h = img.size
    side = min(w, h)
    sx = (w - side) / 2
    sy = (h - side) / 2
    thumb = img.resize((size, size), Image.Resampling.LANCZOS, box=(sx, sy, sx + side, sy + side))
    return _encode(thumb, _format_for(fmt), quality)


def compress_progressive(
    data: bytes,
    target_size_kb: int = 500,
    min_quality: float = 0.5,
    fmt: Optional[str] = None,
) -> Tuple[ProcessedImage, float, str]:
    """
    Re-encodes at 0.9, 0.8, ... until the output fits target_size_kb or the
    quality reaches min_quality. The last attempt is returned even if it is
    still over target.
    """
    out_fmt = _format_for(fmt)
    img = _resized(_decode(data), 1200, 1200)
    target_bytes = target_size_kb * 1024

    # tenths as integers: 9, 8, 7 ... so the floor is hit exactly
    tenths = _round_half_up(PROGRESSIVE_START_QUALITY * 10)
    floor_tenths = math.ceil(round(min_quality * 10, 6))

    result = _encode(img, out_fmt, tenths / 10)
    while result.size > target_bytes and tenths > floor_tenths:
        tenths -= 1
        result = _encode(img, out_fmt, tenths / 10)

    quality = tenths / 10
    log.debug("progressive compression: %d bytes at quality %.1f (%s)", result.size, quality, out_fmt[2])
    return result, quality, out_fmt[2]
