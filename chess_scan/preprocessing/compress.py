"""
Image Decoding, Compression & Transport Encoding
=================================================

Responsibilities:
  1. Decode arbitrary uploaded bytes into an RGBA ``uint8`` array, with
     EXIF orientation applied (phone cameras store rotation as a tag).
  2. Shrink large uploads: downscale to ``max_width`` keeping the aspect
     ratio, then JPEG-encode at ``quality``.  Uploads already below the
     pass-through size are returned untouched to avoid extra loss.
  3. Base64 data-URL helpers for the recognizer transport.

Images are always RGBA, shape ``(H, W, 4)``, dtype ``uint8``.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from chess_scan.config import JPEG_QUALITY, MAX_WIDTH, PASSTHROUGH_BYTES
from chess_scan.errors import DecodeError

log = logging.getLogger(__name__)

_DATA_URL_HEADER = re.compile(r"^data:image/[\w.+-]+;base64,")


@dataclass
class EncodedImage:
    """Encoded image bytes plus the metadata needed to ship them."""
    data: bytes
    mime_type: str             # e.g. "image/jpeg"
    width: int
    height: int
    reencoded: bool = False    # False when the upload was passed through


# ── Decoding ───────────────────────────────────────────────────────────

def _open(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(f"Could not decode image ({len(data)} bytes): {exc}") from exc
    return img


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into an ``(H, W, 4)`` RGBA ``uint8`` array.

    Raises
    ------
    DecodeError
        If *data* is not a readable image.
    """
    img = ImageOps.exif_transpose(_open(data))
    return np.asarray(img.convert("RGBA"), dtype=np.uint8).copy()


def encode_image(image: np.ndarray, fmt: str = "PNG", quality: float = JPEG_QUALITY) -> bytes:
    """Encode an RGBA array as PNG (lossless) or JPEG (alpha dropped)."""
    fmt = fmt.upper()
    pil = Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    buffer = io.BytesIO()
    if fmt in ("JPEG", "JPG"):
        pil.convert("RGB").save(buffer, format="JPEG", quality=int(round(quality * 100)))
    else:
        pil.save(buffer, format=fmt)
    return buffer.getvalue()


# ── Resize / compress ──────────────────────────────────────────────────

def scaled_size(width: int, height: int, max_width: int = MAX_WIDTH) -> tuple[int, int]:
    """Return ``(width, height)`` with width capped at *max_width*."""
    if width <= max_width:
        return width, height
    return max_width, max(1, int(round(height * max_width / width)))


def resize_image(image: np.ndarray, max_width: int = MAX_WIDTH) -> np.ndarray:
    """Downscale so the width does not exceed *max_width*."""
    h, w = image.shape[:2]
    new_w, new_h = scaled_size(w, h, max_width)
    if (new_w, new_h) == (w, h):
        return image.copy()
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)


def compress_image(
    data: bytes,
    max_width: int = MAX_WIDTH,
    quality: float = JPEG_QUALITY,
    passthrough_bytes: int = PASSTHROUGH_BYTES,
) -> EncodedImage:
    """Prepare an upload for transport.

    Parameters
    ----------
    data : bytes
        Raw uploaded file contents (any format Pillow reads).
    max_width : int
        Maximum output width in pixels.
    quality : float
        JPEG quality as a fraction in (0, 1].
    passthrough_bytes : int
        Inputs smaller than this are returned unchanged.

    Returns
    -------
    EncodedImage
    """
    if max_width <= 0:
        raise ValueError(f"max_width must be positive, got {max_width}")
    if not 0.0 < quality <= 1.0:
        raise ValueError(f"quality must be in (0, 1], got {quality}")

    img = _open(data)

    if len(data) < passthrough_bytes:
        mime = Image.MIME.get(img.format or "", "application/octet-stream")
        log.debug("Passing through %d-byte %s upload", len(data), mime)
        return EncodedImage(data=data, mime_type=mime, width=img.width, height=img.height)

    rgba = np.asarray(ImageOps.exif_transpose(img).convert("RGBA"), dtype=np.uint8)
    resized = resize_image(rgba, max_width)
    out = encode_image(resized, "JPEG", quality)
    h, w = resized.shape[:2]
    log.info(
        "Compressed upload  %dx%d → %dx%d  %d → %d bytes",
        rgba.shape[1], rgba.shape[0], w, h, len(data), len(out),
    )
    return EncodedImage(data=out, mime_type="image/jpeg", width=w, height=h, reencoded=True)


# ── Data URLs ──────────────────────────────────────────────────────────

def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(value: str) -> bytes:
    """Decode a base64 image, with or without a ``data:image/...`` header."""
    payload = _DATA_URL_HEADER.sub("", value.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 image payload: {exc}") from exc
