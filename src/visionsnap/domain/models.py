"""Core domain models for the visionsnap system.

These models represent the data flowing through the system: encoded
snapshots from the camera, the relay's request body, and the view state
the presentation controller hands to renderers.
"""

from __future__ import annotations

import base64
import enum
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Facing(str, enum.Enum):
    """Which way the camera points."""

    USER = "user"  # Front / selfie camera, preview is mirrored
    ENVIRONMENT = "environment"  # Back camera

    @property
    def opposite(self) -> Facing:
        return Facing.ENVIRONMENT if self is Facing.USER else Facing.USER


class ViewState(str, enum.Enum):
    """User-visible state of the capture session."""

    INITIALIZING = "initializing"  # Camera not yet ready
    READY = "ready"  # Camera ready, no request in flight
    STREAMING = "streaming"  # Request in flight, response updating live
    ERROR = "error"  # Transient, clears itself after a delay


MediaType = Literal["image/jpeg", "image/png", "image/gif", "image/webp"]

SUPPORTED_MEDIA_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)

DEFAULT_MEDIA_TYPE = "image/jpeg"


# ---------------------------------------------------------------------------
# Capture Models
# ---------------------------------------------------------------------------


class CapturedImage(BaseModel):
    """An encoded still produced from a single camera frame.

    Immutable once created. Discarded after the request it was sent with
    completes or is superseded.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0, description="Encoded image width in pixels")
    height: int = Field(gt=0, description="Encoded image height in pixels")
    data: bytes = Field(description="Encoded image bytes")
    media_type: MediaType = Field(default=DEFAULT_MEDIA_TYPE)
    quality: float = Field(ge=0.0, le=1.0, description="Encoder quality factor")
    facing: Facing = Field(default=Facing.ENVIRONMENT)
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.to_base64()}"

    def to_payload(self) -> str:
        """The string sent to the relay as the ``image`` field.

        JPEG is the relay's default so it travels as bare base64; other
        media types keep their ``data:`` prefix so the relay can detect them.
        """
        if self.media_type == DEFAULT_MEDIA_TYPE:
            return self.to_base64()
        return self.to_data_url()


# ---------------------------------------------------------------------------
# Relay Models
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/analyze``."""

    model_config = ConfigDict(extra="ignore")

    image: str | None = Field(default=None, description="Base64 image, optionally a data: URL")
    prompt: str | None = Field(default=None, description="Instruction sent along with the image")


# ---------------------------------------------------------------------------
# Presentation Models
# ---------------------------------------------------------------------------


class ControllerView(BaseModel):
    """Snapshot of the presentation controller, handed to renderers."""

    model_config = ConfigDict(frozen=True)

    state: ViewState
    camera_ready: bool = False
    loading: bool = False
    facing: Facing = Facing.ENVIRONMENT
    response: str | None = Field(
        default=None, description="Accumulated response text of the current request"
    )
    error: str | None = None
