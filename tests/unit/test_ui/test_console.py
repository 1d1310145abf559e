"""Tests for the console renderer."""

from __future__ import annotations

import io

from visionsnap.domain.models import ControllerView, Facing, ViewState
from visionsnap.ui.console import ConsoleRenderer


def _view(state: ViewState, response: str | None = None, error: str | None = None) -> ControllerView:
    return ControllerView(
        state=state,
        camera_ready=state is not ViewState.INITIALIZING,
        loading=state is ViewState.STREAMING,
        facing=Facing.ENVIRONMENT,
        response=response,
        error=error,
    )


class TestConsoleRenderer:
    def test_streams_only_new_text(self) -> None:
        """Only text not yet printed should be written."""
        out = io.StringIO()
        render = ConsoleRenderer(out, show_status=False)
        for response in ("", "Hel", "Hello"):
            render(_view(ViewState.STREAMING, response))
        render(_view(ViewState.READY, "Hello"))
        assert out.getvalue() == "Hello\n"

    def test_status_lines(self) -> None:
        """State transitions should print status lines."""
        out = io.StringIO()
        render = ConsoleRenderer(out)
        render(_view(ViewState.INITIALIZING))
        render(_view(ViewState.READY))
        assert out.getvalue() == (
            "-- Initializing camera... (environment)\n"
            "-- Camera ready. (environment)\n"
        )

    def test_error_printed_once(self) -> None:
        """A repeated error should be printed once."""
        out = io.StringIO()
        render = ConsoleRenderer(out, show_status=False)
        render(_view(ViewState.ERROR, error="API key not configured"))
        render(_view(ViewState.ERROR, error="API key not configured"))
        assert out.getvalue().count("[error] API key not configured") == 1

    def test_replaced_request_starts_new_line(self) -> None:
        """A reset response should start on a new line."""
        out = io.StringIO()
        render = ConsoleRenderer(out, show_status=False)
        render(_view(ViewState.STREAMING, "first"))
        render(_view(ViewState.STREAMING, ""))
        render(_view(ViewState.STREAMING, "second"))
        assert out.getvalue() == "first\nsecond"
