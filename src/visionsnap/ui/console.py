"""Console renderer for the capture controller.

Prints state transitions as short status lines and streams response
text to the terminal as it grows.
"""

from __future__ import annotations

import sys
from typing import TextIO

from visionsnap.domain.models import ControllerView, ViewState

STATUS_TEXT = {
    ViewState.INITIALIZING: "Initializing camera...",
    ViewState.READY: "Camera ready.",
    ViewState.STREAMING: "Analyzing...",
}


class ConsoleRenderer:
    """Renders ControllerView snapshots to a text stream."""

    def __init__(self, stream: TextIO | None = None, show_status: bool = True) -> None:
        self._stream = stream or sys.stdout
        self._show_status = show_status
        self._last_state: ViewState | None = None
        self._last_error: str | None = None
        self._printed = 0

    def __call__(self, view: ControllerView) -> None:
        if view.state is not self._last_state:
            self._on_state_change(view)
            self._last_state = view.state

        response = view.response or ""
        if len(response) < self._printed:
            # A new request reset the accumulator.
            self._write("\n")
            self._printed = 0
        if len(response) > self._printed:
            self._write(response[self._printed:])
            self._printed = len(response)

        if view.error and view.error != self._last_error:
            self._write(f"\n[error] {view.error}\n")
        self._last_error = view.error

    def _on_state_change(self, view: ControllerView) -> None:
        if self._last_state is ViewState.STREAMING and self._printed:
            self._write("\n")
        if view.state is ViewState.STREAMING:
            self._printed = 0
        if self._show_status and view.state in STATUS_TEXT:
            facing = f" ({view.facing.value})" if view.state is not ViewState.STREAMING else ""
            self._write(f"-- {STATUS_TEXT[view.state]}{facing}\n")

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()
