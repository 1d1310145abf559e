"""Presentation layer for visionsnap.

Public API:
    CaptureController -- Session state machine
    ConsoleRenderer -- Terminal renderer
"""

from visionsnap.ui.console import ConsoleRenderer
from visionsnap.ui.controller import CaptureController

__all__ = ["CaptureController", "ConsoleRenderer"]
