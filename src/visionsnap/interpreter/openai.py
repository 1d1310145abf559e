"""OpenAI-compatible provider implementation.

Works with OpenAI, OpenRouter, and any OpenAI-compatible API
by setting a custom base_url.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import openai
from openai import AsyncOpenAI

from visionsnap.interpreter.base import VisionError, VisionProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(VisionProvider):
    """Vision provider using the chat completions streaming API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        max_tokens: int = 1024,
        client: AsyncOpenAI | None = None,
    ) -> None:
        super().__init__(api_key=api_key, model=model, max_tokens=max_tokens)
        self._base_url = base_url
        self._client = client

    def _ensure_client(self) -> AsyncOpenAI:
        """Lazily initialize the OpenAI async client."""
        if self._client is None:
            kwargs = {"api_key": self._api_key}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = AsyncOpenAI(**kwargs)
            logger.info("Initialized OpenAI client (model=%s, base_url=%s)", self._model, self._base_url)
        return self._client

    async def stream(self, image_data: str, media_type: str, prompt: str) -> AsyncIterator[str]:
        client = self._ensure_client()
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{media_type};base64,{image_data}",
                            "detail": "high",
                        },
                    },
                    {"type": "text", "text": prompt},
                ],
            },
        ]
        try:
            response = await client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=messages,
                stream=True,
            )
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except openai.OpenAIError as e:
            raise VisionError(f"OpenAI API call failed: {e}", provider=self.name) from e

    async def health_check(self) -> bool:
        """Check if the API is reachable."""
        try:
            await self._ensure_client().models.list()
            return True
        except openai.OpenAIError as e:
            logger.warning("Health check failed: %s", e)
            return False
