"""Tests for the FrameEncoder."""

from __future__ import annotations

import cv2
import numpy as np
import pytest

from visionsnap.capture.base import CaptureError
from visionsnap.capture.encoder import FrameEncoder
from visionsnap.domain.models import Facing


def _decode(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)


class TestFrameEncoder:
    def test_defaults(self) -> None:
        """FrameEncoder should default to 1920px and quality 0.85."""
        encoder = FrameEncoder()
        assert encoder.max_dimension == 1920
        assert encoder.quality == 0.85

    @pytest.mark.parametrize("quality", [0.0, 1.5])
    def test_rejects_bad_quality(self, quality: float) -> None:
        """Quality outside (0, 1] should be rejected."""
        with pytest.raises(ValueError):
            FrameEncoder(quality=quality)

    def test_small_frame_keeps_size(self, sample_frame: np.ndarray) -> None:
        """Frames within the bound should keep their native size."""
        image = FrameEncoder().encode(sample_frame, Facing.ENVIRONMENT)
        assert (image.width, image.height) == (64, 32)
        assert image.media_type == "image/jpeg"
        assert image.quality == 0.85
        assert image.data[:2] == b"\xff\xd8"

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            ((3840, 2160), (1920, 1080)),
            ((2000, 1001), (1920, 961)),
            ((1000, 4000), (480, 1920)),
        ],
    )
    def test_downscales_longest_side_to_bound(self, size, expected) -> None:
        """The longest side should be scaled to exactly the bound."""
        w, h = size
        frame = np.zeros((h, w, 3), dtype=np.uint8)
        image = FrameEncoder().encode(frame, Facing.ENVIRONMENT)
        assert (image.width, image.height) == expected
        decoded = _decode(image.data)
        assert decoded.shape[:2] == (expected[1], expected[0])
        assert abs(image.width / image.height - w / h) * max(image.width, image.height) <= 1.0

    def test_user_facing_is_mirrored(self, sample_frame: np.ndarray) -> None:
        """User-facing frames should be mirrored horizontally."""
        image = FrameEncoder(quality=1.0).encode(sample_frame, Facing.USER)
        decoded = _decode(image.data)
        assert decoded[:, :16].mean() < 40
        assert decoded[:, -16:].mean() > 215
        assert image.facing is Facing.USER

    def test_environment_facing_is_not_mirrored(self, sample_frame: np.ndarray) -> None:
        """Environment-facing frames should not be mirrored."""
        image = FrameEncoder(quality=1.0).encode(sample_frame, Facing.ENVIRONMENT)
        decoded = _decode(image.data)
        assert decoded[:, :16].mean() > 215
        assert decoded[:, -16:].mean() < 40

    @pytest.mark.asyncio
    async def test_capture_from_open_source(self, fake_camera) -> None:
        """capture() should encode the source's current frame."""
        await fake_camera.open(Facing.USER)
        image = await FrameEncoder().capture(fake_camera)
        assert image.facing is Facing.USER
        assert (image.width, image.height) == (64, 32)

    @pytest.mark.asyncio
    async def test_capture_requires_open_source(self, fake_camera) -> None:
        """capture() on a closed source should raise CaptureError."""
        with pytest.raises(CaptureError):
            await FrameEncoder().capture(fake_camera)
