"""
Media Optimizer — resize and re-encode images before they are handed out.

Image pipeline:
1. Resize to fit inside max_width x max_height (never enlarges)
2. Adapt the color mode to the target container (JPEG has no alpha)
3. Re-encode to the target format at the requested quality

Re-encoding always happens once an image is selected, even when the source
is already in the target format. Only the first frame of multi-frame images
is kept.

The original bytes go in, optimized bytes come out. Non-images pass through
untouched.
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..models.options import HandlerOptions, ImageFormat
from ..validation import CodecError
from .sniff import read_image_metadata

logger = logging.getLogger(__name__)

# ── Defaults ─────────────────────────────────────────────────

RESAMPLE = Image.LANCZOS
WEBP_METHOD = 4            # compression effort (0-6)
JPEG_BACKGROUND = (255, 255, 255)

# Modes each container can store without conversion
JPEG_MODES = ("RGB", "L", "CMYK")
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")
ALPHA_AWARE_MODES = ("RGB", "RGBA")


# ── Decision helpers ─────────────────────────────────────────


def should_optimize(mime_type: Optional[str], options: HandlerOptions) -> bool:
    """True if the type names an image and optimization isn't skipped."""
    if options.skip_image_optimization:
        return False
    return mime_type is not None and mime_type.startswith("image/")


def fit_inside(
    width: int,
    height: int,
    max_width: int,
    max_height: int,
) -> Tuple[int, int]:
    """
    Scale (width, height) down to fit the bounds, keeping aspect ratio.

    Sizes already within bounds are returned unchanged.
    """
    if width <= max_width and height <= max_height:
        return width, height

    ratio = min(max_width / width, max_height / height)
    new_w = max(1, min(max_width, round(width * ratio)))
    new_h = max(1, min(max_height, round(height * ratio)))
    return new_w, new_h


# ── Image optimization ───────────────────────────────────────


def optimize_image(data: bytes, mime_type: str, options: HandlerOptions) -> Tuple[bytes, str]:
    """
    Resize (if needed) and re-encode an image.

    Args:
        data: Raw image bytes.
        mime_type: Type the bytes were tagged with (used for logging).
        options: Bounds, quality and target format.

    Returns:
        Tuple of (encoded_bytes, new_mime_type).

    Raises:
        CodecError: If the bytes do not decode as an image, or the
            installed Pillow cannot write the target format.
    """
    meta = read_image_metadata(data)
    fmt = options.format

    try:
        with Image.open(io.BytesIO(data)) as src:
            src.load()
            img = src.copy()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise CodecError(f"Cannot decode {mime_type} data: {e}", mime_type=mime_type) from e

    # ── Resize if over bounds ────────────────────────────────
    if meta.exceeds(options.max_width, options.max_height):
        new_size = fit_inside(meta.width, meta.height, options.max_width, options.max_height)
        img = img.resize(new_size, RESAMPLE)
        logger.debug(
            f"Resized: {meta.width}x{meta.height} → {new_size[0]}x{new_size[1]} "
            f"(bounds={options.max_width}x{options.max_height})"
        )

    img = _prepare_mode(img, fmt)

    # ── Encode ───────────────────────────────────────────────
    buf = io.BytesIO()
    save_kwargs = {"quality": options.quality}
    if fmt in (ImageFormat.JPEG, ImageFormat.PNG):
        save_kwargs["optimize"] = True
    elif fmt == ImageFormat.WEBP:
        save_kwargs["method"] = WEBP_METHOD

    try:
        img.save(buf, format=fmt.pillow_name, **save_kwargs)
    except (KeyError, OSError, ValueError) as e:
        raise CodecError(
            f"Cannot encode image as {fmt.value}: {e}", mime_type=mime_type
        ) from e

    optimized = buf.getvalue()
    new_mime = fmt.mime_type

    pct = len(optimized) / len(data) * 100 if data else 0
    logger.info(
        f"Optimized: {meta.width}x{meta.height} "
        f"({mime_type}) → {img.size[0]}x{img.size[1]} "
        f"({new_mime}): "
        f"{len(data):,} → {len(optimized):,} bytes "
        f"({pct:.0f}%)",
        extra={"mime_type": new_mime, "size_bytes": len(optimized)},
    )

    return optimized, new_mime


def maybe_optimize(
    data: bytes,
    mime_type: Optional[str],
    options: HandlerOptions,
) -> Tuple[bytes, Optional[str]]:
    """Optimize images, pass everything else through unchanged."""
    if not should_optimize(mime_type, options):
        return data, mime_type
    return optimize_image(data, mime_type, options)


# ── Internal helpers ─────────────────────────────────────────


def _has_alpha(img: Image.Image) -> bool:
    return "A" in img.mode or (img.mode == "P" and "transparency" in img.info)


def _has_meaningful_alpha(img: Image.Image) -> bool:
    """Check if an RGBA image actually uses transparency."""
    if img.mode != "RGBA":
        return False
    alpha = img.split()[-1]
    extrema = alpha.getextrema()
    # If min alpha is 255, the entire image is fully opaque
    return extrema[0] < 255


def _flatten(img: Image.Image) -> Image.Image:
    """Composite an image with alpha onto an opaque background."""
    rgba = img.convert("RGBA")
    bg = Image.new("RGB", rgba.size, JPEG_BACKGROUND)
    bg.paste(rgba, mask=rgba.split()[-1])
    return bg


def _prepare_mode(img: Image.Image, fmt: ImageFormat) -> Image.Image:
    """Convert the color mode to one the target container can store."""
    if fmt == ImageFormat.JPEG:
        if img.mode in JPEG_MODES:
            return img
        if _has_alpha(img):
            return _flatten(img)
        return img.convert("RGB")

    if fmt in (ImageFormat.WEBP, ImageFormat.AVIF):
        if img.mode not in ALPHA_AWARE_MODES:
            img = img.convert("RGBA" if _has_alpha(img) else "RGB")
        if img.mode == "RGBA" and not _has_meaningful_alpha(img):
            img = img.convert("RGB")
        return img

    if fmt == ImageFormat.PNG and img.mode not in PNG_MODES:
        return img.convert("RGBA" if _has_alpha(img) else "RGB")

    return img
