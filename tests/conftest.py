"""Shared test fixtures for the visionsnap test suite.

Provides sample frames and images, an in-memory camera, a scripted
upstream provider, and a scripted analyze client.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

import numpy as np
import pytest

from visionsnap.capture.base import CaptureSource, DeviceError
from visionsnap.domain.models import CapturedImage, Facing
from visionsnap.interpreter.base import VisionError, VisionProvider


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeCamera(CaptureSource):
    """In-memory camera returning a fixed frame."""

    def __init__(self, frame: np.ndarray, unavailable: tuple[Facing, ...] = ()) -> None:
        super().__init__()
        self.frame = frame
        self.unavailable = set(unavailable)
        self.opened: list[Facing] = []
        self.close_count = 0

    async def _open_device(self, facing: Facing) -> None:
        if facing in self.unavailable:
            raise DeviceError("Permission denied", facing=facing)
        self.opened.append(facing)

    async def _close_device(self) -> None:
        self.close_count += 1

    async def _read_device(self) -> np.ndarray:
        return self.frame.copy()


class FakeProvider(VisionProvider):
    """Upstream provider that streams a fixed list of deltas.

    ``fail_at`` is the index of the delta at which a VisionError is
    raised instead (``len(chunks)`` fails after the last delta).
    """

    name = "fake"

    def __init__(
        self,
        chunks: tuple[str, ...] = ("Hel", "lo"),
        api_key: str = "test-key",
        fail_at: int | None = None,
        reachable: bool = True,
    ) -> None:
        super().__init__(api_key=api_key, model="fake-model")
        self.chunks = list(chunks)
        self.fail_at = fail_at
        self.reachable = reachable
        self.health_checks = 0
        self.calls: list[tuple[str, str, str]] = []

    async def stream(self, image_data: str, media_type: str, prompt: str) -> AsyncIterator[str]:
        self.calls.append((image_data, media_type, prompt))
        for i, chunk in enumerate(self.chunks):
            if self.fail_at == i:
                raise VisionError("upstream exploded", provider=self.name)
            yield chunk
        if self.fail_at == len(self.chunks):
            raise VisionError("upstream exploded", provider=self.name)

    async def health_check(self) -> bool:
        self.health_checks += 1
        return self.reachable


class ScriptedClient:
    """Stand-in for AnalyzeClient whose streams are fed by the test.

    Each analyze() call registers a queue; put text to emit a chunk,
    an exception to raise it, or None to end the stream normally.
    """

    def __init__(self) -> None:
        self.requests: list[tuple[CapturedImage, str | None, object, asyncio.Queue]] = []

    def queue(self, index: int = -1) -> asyncio.Queue:
        return self.requests[index][3]

    async def analyze(self, image, prompt=None, token=None) -> AsyncIterator[str]:
        queue: asyncio.Queue = asyncio.Queue()
        self.requests.append((image, prompt, token, queue))
        while True:
            item = await queue.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item


# ---------------------------------------------------------------------------
# Frame / Image Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_frame() -> np.ndarray:
    """A 64x32 BGR frame: white left half, black right half."""
    frame = np.zeros((32, 64, 3), dtype=np.uint8)
    frame[:, :32] = 255
    return frame


@pytest.fixture
def captured_image() -> CapturedImage:
    return CapturedImage(
        width=2,
        height=2,
        data=b"\xff\xd8\xff\xe0fakejpeg",
        media_type="image/jpeg",
        quality=0.85,
        facing=Facing.ENVIRONMENT,
    )


@pytest.fixture
def fake_camera(sample_frame: np.ndarray) -> FakeCamera:
    return FakeCamera(sample_frame)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_provider() -> type[FakeProvider]:
    """The FakeProvider class, for tests that need custom chunks or failures."""
    return FakeProvider


@pytest.fixture
def make_camera() -> type[FakeCamera]:
    """The FakeCamera class, for tests that need custom frames or failures."""
    return FakeCamera


@pytest.fixture
def scripted_client() -> ScriptedClient:
    return ScriptedClient()
