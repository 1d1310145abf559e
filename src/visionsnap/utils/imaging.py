"""Image processing utilities for visionsnap.

Shared resize, mirror, encoding and conversion helpers used by the
capture and relay modules.
"""

from __future__ import annotations

import logging
import re

import cv2
import numpy as np
from PIL import Image

from visionsnap.domain.models import DEFAULT_MEDIA_TYPE, SUPPORTED_MEDIA_TYPES

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:(image/\w+);base64,")


def numpy_to_pil(image: np.ndarray) -> Image.Image:
    """Convert a numpy image array (BGR) to a PIL Image (RGB)."""
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)


def pil_to_numpy(image: Image.Image) -> np.ndarray:
    """Convert a PIL Image to a numpy array (BGR)."""
    rgb_array = np.array(image.convert("RGB"))
    return cv2.cvtColor(rgb_array, cv2.COLOR_RGB2BGR)


def bounded_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Target size whose longest side is at most ``max_dimension``.

    Sizes already within the bound are returned unchanged. Otherwise the
    longest side becomes exactly ``max_dimension`` and the other side is
    rounded to the nearest integer.
    """
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height
    scale = max_dimension / longest
    if width >= height:
        return max_dimension, max(1, round(height * scale))
    return max(1, round(width * scale)), max_dimension


def resize_to_bound(image: np.ndarray, max_dimension: int = 1920) -> np.ndarray:
    """Downscale an image so its longest side fits ``max_dimension``."""
    h, w = image.shape[:2]
    new_w, new_h = bounded_size(w, h, max_dimension)
    if (new_w, new_h) == (w, h):
        return image
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)


def mirror_horizontal(image: np.ndarray) -> np.ndarray:
    return cv2.flip(image, 1)


def encode_jpeg(image: np.ndarray, quality: float) -> bytes:
    """Encode a BGR image as JPEG.

    ``quality`` is on the 0.0-1.0 scale and maps onto OpenCV's 0-100.
    """
    success, buffer = cv2.imencode(
        ".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(round(quality * 100))]
    )
    if not success:
        raise ValueError("Failed to encode image to JPEG")
    return buffer.tobytes()


def split_data_url(image: str) -> tuple[str, str]:
    """Split a possibly ``data:``-prefixed base64 image.

    Returns ``(media_type, base64_data)``. The prefix is always stripped
    when present; the media type falls back to JPEG when the prefix is
    missing or names an unsupported type.
    """
    match = DATA_URL_PREFIX.match(image)
    if match is None:
        return DEFAULT_MEDIA_TYPE, image
    media_type = match.group(1)
    if media_type not in SUPPORTED_MEDIA_TYPES:
        logger.debug("Unsupported media type %s, falling back to %s", media_type, DEFAULT_MEDIA_TYPE)
        media_type = DEFAULT_MEDIA_TYPE
    return media_type, image[match.end():]
