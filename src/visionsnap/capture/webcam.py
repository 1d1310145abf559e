"""Webcam capture implementation using OpenCV.

Maps each camera facing to an OpenCV device index and requests the
largest resolution the device supports up to an ideal size.
"""

from __future__ import annotations

import asyncio
import logging

import cv2
import numpy as np

from visionsnap.capture.base import CaptureError, CaptureSource, DeviceError
from visionsnap.domain.models import Facing

logger = logging.getLogger(__name__)

DEFAULT_DEVICES = {Facing.USER: 0, Facing.ENVIRONMENT: 1}


class WebcamCapture(CaptureSource):
    """Captures frames from a webcam using OpenCV.

    Runs OpenCV's blocking calls in a thread pool executor to avoid
    blocking the async event loop.
    """

    def __init__(
        self,
        devices: dict[Facing, int] | None = None,
        resolution: tuple[int, int] | None = (4096, 3072),
    ) -> None:
        super().__init__()
        self._devices = dict(devices) if devices is not None else dict(DEFAULT_DEVICES)
        self._resolution = resolution
        self._cap: cv2.VideoCapture | None = None

    async def _open_device(self, facing: Facing) -> None:
        device_index = self._devices.get(facing)
        if device_index is None:
            raise DeviceError(f"No camera configured for facing '{facing.value}'", facing=facing)
        loop = asyncio.get_running_loop()
        cap = await loop.run_in_executor(None, cv2.VideoCapture, device_index)
        if not cap.isOpened():
            cap.release()
            raise DeviceError(
                f"Failed to open webcam device {device_index} ({facing.value})",
                facing=facing,
            )
        if self._resolution:
            w, h = self._resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        self._cap = cap
        actual_w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(
            "Opened webcam device %d for %s (%dx%d)",
            device_index, facing.value, actual_w, actual_h,
        )

    async def _close_device(self) -> None:
        """Release the webcam device."""
        cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()
            logger.info("Released webcam (%s)", self.facing.value if self.facing else "?")

    async def _read_device(self) -> np.ndarray:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_sync)

    def _read_sync(self) -> np.ndarray:
        """Synchronous frame read (runs in thread pool)."""
        if self._cap is None:
            raise CaptureError("Webcam is not open")
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise CaptureError("Failed to read frame from webcam")
        return frame
