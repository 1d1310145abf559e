"""Upstream vision model providers for visionsnap.

Provides a provider-agnostic interface for streaming a model's
description of an image.

Public API:
    VisionProvider -- Abstract base class
    VisionError -- Upstream failure
    AnthropicProvider -- Claude API implementation
    OpenAIProvider -- OpenAI / OpenRouter implementation
    create_provider -- Build the provider named in the settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from visionsnap.interpreter.base import VisionError, VisionProvider

if TYPE_CHECKING:
    from visionsnap.config.settings import Settings

__all__ = [
    "VisionProvider",
    "VisionError",
    "AnthropicProvider",
    "OpenAIProvider",
    "create_provider",
]


def create_provider(settings: Settings) -> VisionProvider:
    """Build the upstream provider configured in ``settings.mllm``."""
    mllm = settings.mllm
    if mllm.provider == "openai":
        from visionsnap.interpreter.openai import OpenAIProvider
        return OpenAIProvider(
            api_key=settings.upstream_api_key(),
            model=mllm.model,
            base_url=settings.upstream_base_url(),
            max_tokens=mllm.max_tokens,
        )
    from visionsnap.interpreter.anthropic import AnthropicProvider
    return AnthropicProvider(
        api_key=settings.upstream_api_key(),
        model=mllm.model,
        max_tokens=mllm.max_tokens,
    )


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "AnthropicProvider":
        from visionsnap.interpreter.anthropic import AnthropicProvider
        return AnthropicProvider
    if name == "OpenAIProvider":
        from visionsnap.interpreter.openai import OpenAIProvider
        return OpenAIProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
