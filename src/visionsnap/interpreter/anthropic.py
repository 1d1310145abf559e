"""Anthropic Claude provider implementation.

Uses the Anthropic Python SDK's streaming Messages API to describe a
base64 image, yielding text deltas as Claude produces them.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import anthropic

from visionsnap.interpreter.base import VisionError, VisionProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(VisionProvider):
    """Vision provider using Anthropic's Claude API.

    Example usage::

        provider = AnthropicProvider(api_key="sk-ant-...")
        async for text in provider.stream(b64, "image/jpeg", "What is this?"):
            print(text, end="")
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        super().__init__(api_key=api_key, model=model, max_tokens=max_tokens)
        self._client = client

    def _ensure_client(self) -> anthropic.AsyncAnthropic:
        """Lazily initialize the Anthropic async client."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
            logger.info("Initialized Anthropic client (model=%s)", self._model)
        return self._client

    async def stream(self, image_data: str, media_type: str, prompt: str) -> AsyncIterator[str]:
        client = self._ensure_client()
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": image_data,
                },
            },
            {"type": "text", "text": prompt},
        ]
        try:
            async with client.messages.stream(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": content}],
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIError as e:
            raise VisionError(f"Anthropic API call failed: {e}", provider=self.name) from e

    async def health_check(self) -> bool:
        """Check that the API key is accepted by listing models."""
        try:
            await self._ensure_client().models.list(limit=1)
            return True
        except anthropic.APIError as e:
            logger.warning("Health check failed: %s", e)
            return False
