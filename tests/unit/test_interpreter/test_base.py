"""Tests for the VisionProvider base class and provider factory."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from visionsnap.config.settings import MLLMConfig, Settings
from visionsnap.interpreter import VisionError, VisionProvider, create_provider
from visionsnap.interpreter.anthropic import AnthropicProvider
from visionsnap.interpreter.openai import OpenAIProvider


class TestVisionProviderInterface:
    def test_cannot_instantiate_abstract_class(self) -> None:
        """VisionProvider should not be instantiable directly."""
        with pytest.raises(TypeError):
            VisionProvider(api_key="k", model="m")  # type: ignore[abstract]

    def test_is_configured_follows_api_key(self, make_provider) -> None:
        """is_configured should reflect whether a key is set."""
        assert make_provider(api_key="key").is_configured
        assert not make_provider(api_key="").is_configured

    def test_vision_error_carries_provider(self) -> None:
        """VisionError should carry the provider name."""
        error = VisionError("boom", provider="anthropic")
        assert str(error) == "boom"
        assert error.provider == "anthropic"

    @pytest.mark.asyncio
    async def test_aclose_closes_client_once(self) -> None:
        """aclose() should close the SDK client once."""
        client = AsyncMock()
        provider = AnthropicProvider(api_key="key", client=client)
        await provider.aclose()
        await provider.aclose()
        client.close.assert_awaited_once()


class TestCreateProvider:
    def test_anthropic_by_default(self) -> None:
        """The factory should build an Anthropic provider by default."""
        provider = create_provider(Settings(anthropic_api_key="sk-ant"))
        assert isinstance(provider, AnthropicProvider)
        assert provider.is_configured
        assert provider.model == "claude-sonnet-4-20250514"

    def test_openai_provider(self) -> None:
        """The factory should build an OpenAI provider when configured."""
        settings = Settings(
            mllm=MLLMConfig(provider="openai", model="gpt-4o-mini"),
            openai_api_key="sk-openai",
        )
        provider = create_provider(settings)
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o-mini"
        assert provider.is_configured

    def test_missing_key_is_not_configured(self) -> None:
        """A provider built without a key should not be configured."""
        provider = create_provider(Settings(anthropic_api_key=""))
        assert not provider.is_configured
