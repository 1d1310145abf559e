"""Camera capture module for visionsnap.

Provides camera stream ownership and frame encoding. The abstract base
class allows alternative capture implementations (webcam, still image).

Public API:
    CaptureSource -- Abstract base class
    CaptureError, DeviceError -- Capture failures
    FrameEncoder -- Bounded JPEG encoder
    WebcamCapture -- OpenCV webcam implementation
    StillImageCapture -- Image file implementation
"""

from visionsnap.capture.base import CaptureError, CaptureSource, DeviceError

__all__ = [
    "CaptureSource",
    "CaptureError",
    "DeviceError",
    "FrameEncoder",
    "StillImageCapture",
    "WebcamCapture",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "WebcamCapture":
        from visionsnap.capture.webcam import WebcamCapture
        return WebcamCapture
    if name == "StillImageCapture":
        from visionsnap.capture.still import StillImageCapture
        return StillImageCapture
    if name == "FrameEncoder":
        from visionsnap.capture.encoder import FrameEncoder
        return FrameEncoder
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
