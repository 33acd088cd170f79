"""JPEG re-encoding for image uploads (Pillow)."""

from __future__ import annotations

import io
import time

from PIL import Image, UnidentifiedImageError

from kitchen.network.errors import EncodingError

DEFAULT_COMPRESSION_QUALITY = 0.8


def encode_jpeg(image: Image.Image | bytes, quality: float = DEFAULT_COMPRESSION_QUALITY) -> bytes:
    """Re-encode ``image`` as JPEG at ``quality`` in (0, 1].

    ``image`` may be a Pillow image or the raw bytes of any format Pillow
    can open.

    Raises
    ------
    EncodingError
        If the quality is out of range or the image cannot be decoded or
        encoded.
    """
    if not 0 < quality <= 1:
        raise EncodingError(message=f"Image compression quality must be in (0, 1], got {quality}")

    try:
        if isinstance(image, (bytes, bytearray)):
            image = Image.open(io.BytesIO(image))
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=round(quality * 100))
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise EncodingError(exc, message="Image compression failed") from exc
    return buffer.getvalue()


def image_file_name() -> str:
    """Timestamped upload name, e.g. ``image_1700000000.123.jpg``."""
    return f"image_{time.time()}.jpg"
