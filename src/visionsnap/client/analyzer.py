"""HTTP client for the relay's analyze endpoint.

Posts a captured image and streams the relay's event stream back as
text chunks, honouring a cancellation token at every read boundary.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx

from visionsnap.client.cancellation import CancellationToken
from visionsnap.domain.models import CapturedImage
from visionsnap.relay.events import StreamDecoder

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"


class AnalyzeClient:
    """Sends captured images to the relay and yields the streamed answer.

    Example usage::

        async with AnalyzeClient("http://localhost:8000") as client:
            async for text in client.analyze(image, "What is this?"):
                print(text, end="")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.debug("Analyze client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def analyze(
        self,
        image: CapturedImage,
        prompt: str | None = None,
        token: CancellationToken | None = None,
    ) -> AsyncIterator[str]:
        """Stream the model's description of ``image``.

        Yields text chunks in the order the relay sent them. Stops
        silently once ``token`` is cancelled; leaving the response
        context closes the connection, aborting the transport read.

        Raises:
            AnalyzeError: On an error status, a transport failure, or a
                stream that ends without the DONE frame.
        """
        await self.connect()
        payload: dict[str, str] = {"image": image.to_payload()}
        if prompt is not None:
            payload["prompt"] = prompt

        decoder = StreamDecoder()
        try:
            async with self._client.stream("POST", ANALYZE_PATH, json=payload) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise AnalyzeError(
                        _error_message(response), status_code=response.status_code
                    )
                async for chunk in response.aiter_raw():
                    if token is not None and token.cancelled:
                        logger.debug("Request cancelled, abandoning stream")
                        return
                    for text in decoder.feed(chunk):
                        if token is not None and token.cancelled:
                            return
                        yield text
                    if decoder.done:
                        return
        except httpx.HTTPError as e:
            if token is not None and token.cancelled:
                return
            raise AnalyzeError(f"Failed to analyze image: {e}") from e

        if token is not None and token.cancelled:
            return
        logger.warning("Relay stream closed before DONE (%d unparsed chars)", len(decoder.pending))
        raise AnalyzeError("Response stream ended unexpectedly")

    async def __aenter__(self) -> AnalyzeClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Failed to analyze image (HTTP {response.status_code})"


class AnalyzeError(Exception):
    """Raised when an analyze request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
