"""Presentation controller for a capture session.

Drives the user-visible state machine::

    initializing -> ready -> streaming -> ready
          \\           \\          \\
           +-----------+----------+--> error (clears after a delay)

and accumulates the streamed response. A capture while a request is
streaming cancels that request and replaces it (cancel-and-replace);
captures are never queued or blocked by an in-flight request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from visionsnap.capture.base import CaptureError, CaptureSource, DeviceError
from visionsnap.capture.encoder import FrameEncoder
from visionsnap.client.analyzer import AnalyzeClient, AnalyzeError
from visionsnap.client.cancellation import CancellationToken, RequestSlot
from visionsnap.domain.models import CapturedImage, ControllerView, Facing, ViewState

logger = logging.getLogger(__name__)

CAMERA_ERROR_MESSAGE = "Could not access camera. Please allow camera permissions."
ANALYZE_ERROR_MESSAGE = "Failed to analyze image"

Renderer = Callable[[ControllerView], None]


class CaptureController:
    """Owns the camera, the current request and the response text.

    Example usage::

        async with CaptureController(camera, encoder, client, renderer=print) as ui:
            task = await ui.capture("What is this?")
            await task
    """

    def __init__(
        self,
        camera: CaptureSource,
        encoder: FrameEncoder,
        client: AnalyzeClient,
        renderer: Renderer | None = None,
        default_facing: Facing = Facing.ENVIRONMENT,
        default_prompt: str | None = None,
        error_display_seconds: float = 4.0,
    ) -> None:
        self._camera = camera
        self._encoder = encoder
        self._client = client
        self._renderers: list[Renderer] = [renderer] if renderer else []
        self._default_prompt = default_prompt
        self._error_display_seconds = error_display_seconds

        self._slot = RequestSlot()
        self._state = ViewState.INITIALIZING
        self._facing = default_facing
        self._camera_ready = False
        self._switching = False
        self._loading = False
        self._response: str | None = None
        self._error: str | None = None
        self._error_timer: asyncio.TimerHandle | None = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def camera_ready(self) -> bool:
        return self._camera_ready

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def response(self) -> str | None:
        return self._response

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def facing(self) -> Facing:
        return self._facing

    def view(self) -> ControllerView:
        return ControllerView(
            state=self._state,
            camera_ready=self._camera_ready,
            loading=self._loading,
            facing=self._facing,
            response=self._response,
            error=self._error,
        )

    def add_renderer(self, renderer: Renderer) -> None:
        self._renderers.append(renderer)

    # ------------------------------------------------------------------
    # Camera lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open the camera for the current facing."""
        await self._open_camera(self._facing, switching=False)

    async def switch_camera(self, facing: Facing | None = None) -> bool:
        """Switch to ``facing`` (or the opposite one).

        Refused while a request is streaming or the camera is already
        initializing. Returns whether the switch was attempted.
        """
        if self._state is ViewState.STREAMING or self._slot.busy or self._switching:
            logger.info("Camera switch ignored in state %s", self._state.value)
            return False
        target = facing or self._facing.opposite
        await self._open_camera(target, switching=True)
        return True

    async def _open_camera(self, facing: Facing, switching: bool) -> None:
        self._switching = True
        self._camera_ready = False
        self._facing = facing
        self._set_state(ViewState.INITIALIZING)
        try:
            if switching or self._camera.is_open:
                await self._camera.switch(facing)
            else:
                await self._camera.open(facing)
        except DeviceError as e:
            logger.error("Camera access error: %s", e)
            await self._camera.close()
            self._fail(CAMERA_ERROR_MESSAGE)
            return
        finally:
            self._switching = False
        self._camera_ready = True
        self._set_state(ViewState.READY)

    async def close(self) -> None:
        """Cancel any request and release the camera."""
        self._slot.cancel()
        self._cancel_error_timer()
        self._loading = False
        try:
            await self._camera.close()
        finally:
            self._camera_ready = False
            self._state = ViewState.INITIALIZING

    # ------------------------------------------------------------------
    # Capture / request lifecycle
    # ------------------------------------------------------------------

    async def capture(self, prompt: str | None = None) -> asyncio.Task | None:
        """Capture a frame and start analyzing it.

        No-op returning None while the camera is not ready. Any request
        still in flight is cancelled and replaced. Returns the task that
        streams the response.
        """
        if not self._camera_ready or self._switching:
            logger.debug("Capture ignored: camera not ready")
            return None

        # The new capture supersedes the current request even if encoding fails.
        self._slot.cancel()
        try:
            image = await self._encoder.capture(self._camera)
        except CaptureError as e:
            logger.error("Frame capture failed: %s", e)
            self._fail(str(e))
            return None

        token = self._slot.replace()
        self._cancel_error_timer()
        self._error = None
        self._response = ""
        self._loading = True
        self._set_state(ViewState.STREAMING)

        task = asyncio.create_task(
            self._run_request(token, image, prompt if prompt is not None else self._default_prompt)
        )
        self._slot.attach(token, task)
        return task

    def cancel(self) -> None:
        """Cancel the in-flight request without reporting an error."""
        if not self._slot.busy:
            return
        self._slot.cancel()
        self._loading = False
        if self._state is ViewState.STREAMING:
            self._set_state(ViewState.READY)
        else:
            self._render()

    def dismiss_response(self) -> None:
        self._response = None
        self._render()

    async def _run_request(
        self, token: CancellationToken, image: CapturedImage, prompt: str | None
    ) -> None:
        try:
            async for text in self._client.analyze(image, prompt, token=token):
                if not self._slot.is_current(token):
                    break
                self._response += text
                self._render()
        except AnalyzeError as e:
            if self._slot.is_current(token):
                logger.error("Analyze request failed: %s", e)
                self._fail(str(e) or ANALYZE_ERROR_MESSAGE)
        except Exception:
            if self._slot.is_current(token):
                logger.exception("Unexpected error while streaming the response")
                self._fail(ANALYZE_ERROR_MESSAGE)
        finally:
            if self._slot.is_current(token):
                self._loading = False
                if self._state is ViewState.STREAMING:
                    self._set_state(ViewState.READY)
                else:
                    self._render()

    # ------------------------------------------------------------------
    # Errors and rendering
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> None:
        self._cancel_error_timer()
        self._error = message
        self._loading = False
        self._set_state(ViewState.ERROR)
        loop = asyncio.get_running_loop()
        self._error_timer = loop.call_later(self._error_display_seconds, self._clear_error)

    def _clear_error(self) -> None:
        self._error_timer = None
        self._error = None
        if self._state is ViewState.ERROR:
            self._set_state(ViewState.READY if self._camera_ready else ViewState.INITIALIZING)
        else:
            self._render()

    def _cancel_error_timer(self) -> None:
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None

    def _set_state(self, state: ViewState) -> None:
        if state is not self._state:
            logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state
        self._render()

    def _render(self) -> None:
        view = self.view()
        for renderer in self._renderers:
            renderer(view)

    async def __aenter__(self) -> CaptureController:
        await self.start()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
