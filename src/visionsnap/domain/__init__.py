"""Domain models for visionsnap.

All models use Pydantic v2 for validation and serialization.
"""

from visionsnap.domain.models import (
    AnalyzeRequest,
    CapturedImage,
    ControllerView,
    Facing,
    MediaType,
    ViewState,
)

__all__ = [
    "AnalyzeRequest",
    "CapturedImage",
    "ControllerView",
    "Facing",
    "MediaType",
    "ViewState",
]
