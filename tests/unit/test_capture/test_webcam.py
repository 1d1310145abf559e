"""Tests for the WebcamCapture implementation."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from visionsnap.capture.base import CaptureError, DeviceError
from visionsnap.capture.webcam import WebcamCapture
from visionsnap.domain.models import Facing


def _mock_capture(opened: bool = True, frame: np.ndarray | None = None) -> MagicMock:
    cap = MagicMock()
    cap.isOpened.return_value = opened
    cap.get.return_value = 1920
    cap.read.return_value = (frame is not None, frame)
    return cap


class TestWebcamCapture:
    def test_init_defaults(self) -> None:
        """WebcamCapture should map user to 0 and environment to 1."""
        capture = WebcamCapture()
        assert capture._devices == {Facing.USER: 0, Facing.ENVIRONMENT: 1}
        assert capture._resolution == (4096, 3072)
        assert capture.is_open is False

    @pytest.mark.asyncio
    async def test_open_uses_device_for_facing(self) -> None:
        """Opening should use the device index mapped to the facing."""
        cap = _mock_capture()
        with patch("visionsnap.capture.webcam.cv2.VideoCapture", return_value=cap) as factory:
            capture = WebcamCapture(devices={Facing.USER: 3, Facing.ENVIRONMENT: 5})
            await capture.open(Facing.ENVIRONMENT)
        factory.assert_called_once_with(5)
        assert capture.is_open
        assert cap.set.call_count == 2

    @pytest.mark.asyncio
    async def test_open_failure_raises_device_error(self) -> None:
        """A device that fails to open should raise DeviceError."""
        cap = _mock_capture(opened=False)
        with patch("visionsnap.capture.webcam.cv2.VideoCapture", return_value=cap):
            capture = WebcamCapture()
            with pytest.raises(DeviceError):
                await capture.open(Facing.USER)
        cap.release.assert_called_once()
        assert capture.is_open is False

    @pytest.mark.asyncio
    async def test_unmapped_facing_raises_device_error(self) -> None:
        """A facing with no device index should raise DeviceError."""
        capture = WebcamCapture(devices={Facing.ENVIRONMENT: 0})
        with pytest.raises(DeviceError):
            await capture.open(Facing.USER)

    @pytest.mark.asyncio
    async def test_close_releases_device(self) -> None:
        """Closing should release the OpenCV capture."""
        cap = _mock_capture()
        with patch("visionsnap.capture.webcam.cv2.VideoCapture", return_value=cap):
            capture = WebcamCapture(resolution=None)
            await capture.open(Facing.USER)
            await capture.close()
        cap.release.assert_called_once()
        cap.set.assert_not_called()
        assert capture.is_open is False

    @pytest.mark.asyncio
    async def test_read_frame(self) -> None:
        """Reading should return the frame from OpenCV."""
        frame = np.zeros((4, 6, 3), dtype=np.uint8)
        cap = _mock_capture(frame=frame)
        with patch("visionsnap.capture.webcam.cv2.VideoCapture", return_value=cap):
            capture = WebcamCapture()
            await capture.open(Facing.USER)
            result = await capture.read_frame()
        assert result.shape == (4, 6, 3)

    @pytest.mark.asyncio
    async def test_read_failure_raises(self) -> None:
        """A failed OpenCV read should raise CaptureError."""
        cap = _mock_capture(frame=None)
        with patch("visionsnap.capture.webcam.cv2.VideoCapture", return_value=cap):
            capture = WebcamCapture()
            await capture.open(Facing.USER)
            with pytest.raises(CaptureError, match="Failed to read"):
                await capture.read_frame()
