"""
Content Sniffer — infer a MIME type from the bytes themselves.

Only container-level image detection is attempted: Pillow reads the header
and, if it recognizes the format, the type is ``image/<format>``. Anything
Pillow cannot identify is reported as ``application/octet-stream``.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from ..models.asset import OCTET_STREAM, ImageMetadata
from ..validation import CodecError

logger = logging.getLogger(__name__)

# Pillow names for containers that are really a more common format
FORMAT_ALIASES = {
    "mpo": "jpeg",
}


def read_image_metadata(data: bytes) -> ImageMetadata:
    """
    Decode just enough of an image to learn its size and format.

    Raises:
        CodecError: If Pillow does not recognize the bytes as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = (img.format or "").lower()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise CodecError(f"Cannot decode image ({len(data):,} bytes): {e}") from e

    if not fmt:
        raise CodecError(f"Image format not reported for {len(data):,} bytes")

    return ImageMetadata(
        width=width,
        height=height,
        source_format=FORMAT_ALIASES.get(fmt, fmt),
    )


def sniff(data: bytes) -> str:
    """Best-effort MIME type for raw bytes. Never raises."""
    try:
        meta = read_image_metadata(data)
    except CodecError as e:
        logger.debug(f"Sniff: not an image ({e})")
        return OCTET_STREAM

    mime_type = f"image/{meta.source_format}"
    logger.debug(f"Sniff: {mime_type} {meta.width}x{meta.height}")
    return mime_type
