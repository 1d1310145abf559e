"""Still image capture source.

Serves a single image file as the live frame, for headless runs and
for testing the pipeline without a camera attached.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from visionsnap.capture.base import CaptureSource, DeviceError
from visionsnap.domain.models import Facing
from visionsnap.utils.imaging import pil_to_numpy

logger = logging.getLogger(__name__)


class StillImageCapture(CaptureSource):
    """Presents an image file as a camera.

    The same file backs every facing. Loading happens on open, so a
    missing or unreadable file surfaces as a DeviceError just like an
    unavailable webcam would.
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self._path = Path(path)
        self._frame: np.ndarray | None = None

    @property
    def path(self) -> Path:
        return self._path

    async def _open_device(self, facing: Facing) -> None:
        loop = asyncio.get_running_loop()
        self._frame = await loop.run_in_executor(None, self._load)
        h, w = self._frame.shape[:2]
        logger.info("Opened still image %s (%dx%d)", self._path, w, h)

    async def _close_device(self) -> None:
        self._frame = None

    async def _read_device(self) -> np.ndarray:
        return self._frame.copy()

    def _load(self) -> np.ndarray:
        try:
            with Image.open(self._path) as image:
                return pil_to_numpy(image)
        except (OSError, UnidentifiedImageError) as e:
            raise DeviceError(f"Could not load image {self._path}: {e}") from e
