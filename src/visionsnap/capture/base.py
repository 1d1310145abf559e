"""Abstract base class for camera capture sources.

A capture source owns at most one live camera stream at a time. All
implementations conform to this interface so the controller can work
with a webcam, a still image file, or a test double interchangeably.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

import numpy as np

from visionsnap.domain.models import Facing

logger = logging.getLogger(__name__)


class CaptureSource(ABC):
    """Abstract interface for acquiring frames from a camera.

    Subclasses implement ``_open_device``, ``_close_device`` and
    ``_read_device``; this class enforces the single-owner invariant
    and serializes switching against frame reads.

    Example usage::

        async with WebcamCapture(devices={Facing.USER: 0}).session(Facing.USER) as camera:
            frame = await camera.read_frame()
    """

    def __init__(self) -> None:
        self._facing: Facing | None = None
        self._is_open: bool = False
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        """Whether a camera stream is currently open and ready."""
        return self._is_open

    @property
    def facing(self) -> Facing | None:
        """Facing of the open stream, or None when closed."""
        return self._facing

    async def open(self, facing: Facing) -> None:
        """Acquire a live stream for ``facing``.

        Raises:
            CaptureError: If a stream is already open.
            DeviceError: If no matching device can be opened.
        """
        async with self._lock:
            await self._open_locked(facing)

    async def close(self) -> None:
        """Stop the live stream and release the device. Safe to call repeatedly."""
        async with self._lock:
            await self._close_locked()

    async def switch(self, facing: Facing) -> None:
        """Close the current stream and open one for ``facing``.

        No frame read can interleave between the close and the open.
        """
        async with self._lock:
            await self._close_locked()
            await self._open_locked(facing)

    async def read_frame(self) -> np.ndarray:
        """Return the current frame as a BGR numpy array."""
        async with self._lock:
            if not self._is_open:
                raise CaptureError("Capture source is not open")
            return await self._read_device()

    @asynccontextmanager
    async def session(self, facing: Facing) -> AsyncIterator[CaptureSource]:
        """Open ``facing`` for the duration of the block, releasing on every exit path."""
        await self.open(facing)
        try:
            yield self
        finally:
            await self.close()

    async def _open_locked(self, facing: Facing) -> None:
        if self._is_open:
            raise CaptureError(
                f"A {self._facing.value} stream is already open; close it first"
            )
        await self._open_device(facing)
        self._facing = facing
        self._is_open = True

    async def _close_locked(self) -> None:
        if not self._is_open:
            return
        try:
            await self._close_device()
        finally:
            self._facing = None
            self._is_open = False

    @abstractmethod
    async def _open_device(self, facing: Facing) -> None:
        """Acquire the hardware for ``facing`` or raise DeviceError."""
        ...

    @abstractmethod
    async def _close_device(self) -> None:
        ...

    @abstractmethod
    async def _read_device(self) -> np.ndarray:
        ...

    async def __aenter__(self) -> CaptureSource:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Async context manager exit -- releases the device if still open."""
        await self.close()


class CaptureError(Exception):
    """Raised when frame capture fails."""


class DeviceError(CaptureError):
    """Raised when a camera cannot be acquired (no device, permission denied)."""

    def __init__(self, message: str, facing: Facing | None = None) -> None:
        super().__init__(message)
        self.facing = facing
