import io
import logging
from typing import Optional, Tuple
from PIL import Image

from .application.dto import CompressedImage, UploadableFile
from .config import Settings
from .exceptions import DecodeError

logger = logging.getLogger(__name__)

# Formats we re-encode in place; anything else decodable is re-encoded as JPEG
SAVE_FORMATS = ("JPEG", "PNG", "WEBP")
MIN_QUALITY = 10


def open_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}")


def get_image_info(data: bytes) -> dict:
    img = open_image(data)
    return {
        "width": img.width,
        "height": img.height,
        "format": img.format,
        "mode": img.mode,
        "size": len(data)
    }


def select_compression_profile(size: int, settings: Settings) -> Tuple[int, int]:
    """Pick (max_dimension, quality) for an upload of `size` bytes. Bigger files are squeezed harder."""
    max_dimension = settings.COMPRESSION_MAX_DIMENSION
    quality = settings.COMPRESSION_QUALITY
    if not settings.ADAPTIVE_COMPRESSION:
        return max_dimension, quality
    if size > 2 * 1024 * 1024:
        return min(max_dimension, 300), min(quality, 20)
    if size > 1024 * 1024:
        return min(max_dimension, 350), min(quality, 30)
    if size > 500 * 1024:
        return min(max_dimension, 400), min(quality, 40)
    return max_dimension, quality


def _encode(img: Image.Image, fmt: str, size: Tuple[int, int], quality: int) -> bytes:
    if img.size != size:
        img = img.resize(size, Image.Resampling.LANCZOS)
    if fmt == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert('RGB')
    buf = io.BytesIO()
    if fmt == "PNG":
        img.save(buf, format=fmt, optimize=True)
    else:
        img.save(buf, format=fmt, quality=quality)
    return buf.getvalue()


def compress_image(
    file: UploadableFile,
    target_quality: int,
    max_dimension: int,
    max_bytes: Optional[int] = None,
    max_attempts: int = 5
) -> CompressedImage:
    """
    Downscale and re-encode an image.

    An image already within `max_dimension` (and `max_bytes` when given) is
    returned byte-for-byte, so compressing a compressed image is a no-op.
    Otherwise the longest side is brought down to `max_dimension` and the image
    is re-encoded at `target_quality`. While the result is over `max_bytes`,
    quality drops by 10 per attempt and, from the third attempt, the size
    shrinks by a fifth. The last attempt is returned even when still too big.
    """
    with open_image(file.data) as img:
        fmt = img.format if img.format in SAVE_FORMATS else "JPEG"
        width, height = img.size

        within_size = max_bytes is None or file.size <= max_bytes
        if max(width, height) <= max_dimension and within_size and img.format == fmt:
            return CompressedImage(
                data=file.data,
                content_type=Image.MIME[fmt],
                format=fmt,
                width=width,
                height=height
            )

        if max(width, height) > max_dimension:
            scale = max_dimension / max(width, height)
            width = max(1, round(width * scale))
            height = max(1, round(height * scale))

        quality = target_quality
        data = _encode(img, fmt, (width, height), quality)
        attempts = 0
        while max_bytes is not None and len(data) > max_bytes and attempts < max_attempts:
            attempts += 1
            quality = max(MIN_QUALITY, quality - 10)
            if attempts > 2:
                width = max(1, int(width * 0.8))
                height = max(1, int(height * 0.8))
            data = _encode(img, fmt, (width, height), quality)
            logger.debug(f"Compression attempt {attempts}: {len(data) // 1024}KB at quality {quality}")

    return CompressedImage(
        data=data,
        content_type=Image.MIME[fmt],
        format=fmt,
        width=width,
        height=height,
        quality=None if fmt == "PNG" else quality
    )
