"""Frame encoder: turns the current camera frame into a bounded JPEG.

Policy, applied in order: read the native size, downscale so the longest
side is at most ``max_dimension``, mirror front-camera frames so the
picture matches what the subject saw, then encode as JPEG.
"""

from __future__ import annotations

import asyncio
import logging

import numpy as np

from visionsnap.capture.base import CaptureError, CaptureSource
from visionsnap.domain.models import CapturedImage, Facing
from visionsnap.utils.imaging import encode_jpeg, mirror_horizontal, resize_to_bound

logger = logging.getLogger(__name__)

MAX_DIMENSION = 1920
JPEG_QUALITY = 0.85


class FrameEncoder:
    """Encodes frames into CapturedImage instances."""

    def __init__(self, max_dimension: int = MAX_DIMENSION, quality: float = JPEG_QUALITY) -> None:
        if max_dimension <= 0:
            raise ValueError("max_dimension must be positive")
        if not 0.0 < quality <= 1.0:
            raise ValueError("quality must be in (0.0, 1.0]")
        self._max_dimension = max_dimension
        self._quality = quality

    @property
    def max_dimension(self) -> int:
        return self._max_dimension

    @property
    def quality(self) -> float:
        return self._quality

    def encode(self, frame: np.ndarray, facing: Facing) -> CapturedImage:
        h, w = frame.shape[:2]
        image = resize_to_bound(frame, self._max_dimension)
        if facing is Facing.USER:
            image = mirror_horizontal(image)
        data = encode_jpeg(image, self._quality)
        out_h, out_w = image.shape[:2]
        logger.debug(
            "Encoded %dx%d frame as %dx%d JPEG (%d bytes, %s)",
            w, h, out_w, out_h, len(data), facing.value,
        )
        return CapturedImage(
            width=out_w,
            height=out_h,
            data=data,
            media_type="image/jpeg",
            quality=self._quality,
            facing=facing,
        )

    async def capture(self, source: CaptureSource) -> CapturedImage:
        """Read the current frame from an open source and encode it.

        Raises:
            CaptureError: If the source is not open or the read fails.
        """
        facing = source.facing
        if not source.is_open or facing is None:
            raise CaptureError("Camera is not ready")
        frame = await source.read_frame()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.encode, frame, facing)
