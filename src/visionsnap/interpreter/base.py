"""Abstract base class for vision-language model providers.

All provider implementations conform to this interface, enabling the
relay to swap between upstream APIs without changing its streaming
logic.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class VisionProvider(ABC):
    """Abstract interface for streaming multimodal LLM providers."""

    name: str = "vision"

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._client = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        """Whether an upstream credential is available."""
        return bool(self._api_key)

    @abstractmethod
    def stream(self, image_data: str, media_type: str, prompt: str) -> AsyncIterator[str]:
        """Stream the model's description of an image as text deltas.

        Args:
            image_data: Base64-encoded image bytes, without any data: prefix.
            media_type: One of the supported image media types.
            prompt: Instruction sent alongside the image.

        Yields:
            Text deltas in the order the model emits them.

        Raises:
            VisionError: If the upstream call fails.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the provider is reachable and authenticated."""
        ...

    async def aclose(self) -> None:
        """Release the underlying API client, if one was created."""
        if self._client is not None:
            await self._client.close()
            self._client = None


class VisionError(Exception):
    """Raised when an upstream model call fails."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider
