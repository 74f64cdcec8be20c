"""Unit tests for LLM provider adapters: OpenAI, Anthropic, Ollama."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.config.settings import Settings
from src.utils.errors import GenerationUnavailableError


# ======================================================================
# Shared helpers
# ======================================================================

def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "anthropic_api_key": "test-anthropic",
        "anthropic_model": "",
        "ollama_base_url": "http://localhost:11434",
        "ollama_model": "",
        "_env_file": None,
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _chat_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=120)
    return response


def _openai_client(response: MagicMock) -> AsyncMock:
    client = AsyncMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        assert OpenAILLMProvider(settings).get_provider_name() == "openai"

    def test_custom_base_url_changes_label(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        provider = OpenAILLMProvider(_settings(openai_base_url="https://api.groq.com/openai/v1"))
        assert provider.get_provider_name() == "openai-compatible"

    def test_is_available_without_key(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_success(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = _openai_client(_chat_response("LLM response text"))
        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            result = await provider.complete("system prompt", "user prompt")

        assert result == "LLM response text"
        request = mock_client.chat.completions.create.call_args.kwargs
        assert request["model"] == "gpt-4o-mini"
        assert "response_format" not in request

    @pytest.mark.asyncio
    async def test_json_mode_requests_json_object(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = _openai_client(_chat_response('{"recommendations": []}'))
        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            await provider.complete("s", "u", temperature=0.8, json_mode=True)

        request = mock_client.chat.completions.create.call_args.kwargs
        assert request["response_format"] == {"type": "json_object"}
        assert request["temperature"] == 0.8

    @pytest.mark.asyncio
    async def test_json_mode_skipped_for_compatible_backends(self) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = _openai_client(_chat_response("[]"))
        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings(openai_base_url="https://example.test/v1"))
            await provider.complete("s", "u", json_mode=True)

        assert "response_format" not in mock_client.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_complete_error(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(
                message="Rate limit exceeded",
                request=MagicMock(),
                body=None,
            )
        )

        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(GenerationUnavailableError) as exc_info:
                await provider.complete("system", "user")

        assert exc_info.value.provider_name == "openai"
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_empty_content_is_unavailable(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = _openai_client(_chat_response(None))
        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            with pytest.raises(GenerationUnavailableError):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_validate_credentials_success(self, settings: Settings) -> None:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(return_value=MagicMock())

        with patch("src.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            assert await provider.validate_credentials() is True


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider
        assert AnthropicLLMProvider(settings).get_provider_name() == "anthropic"

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(type="text", text='{"recommendations":'),
            MagicMock(type="tool_use", text="ignored"),
            MagicMock(type="text", text="[]}"),
        ]
        mock_response.usage = MagicMock(input_tokens=10, output_tokens=20)

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch(
            "src.providers.llm.anthropic_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = AnthropicLLMProvider(settings)
            result = await provider.complete("system", "user", json_mode=True)

        assert result == '{"recommendations":\n[]}'
        request = mock_client.messages.create.call_args.kwargs
        assert request["system"] == "system"
        assert request["model"] == "claude-sonnet-4-20250514"

    @pytest.mark.asyncio
    async def test_complete_error(self, settings: Settings) -> None:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider
        import anthropic

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIError(
                message="Overloaded",
                request=MagicMock(),
                body=None,
            )
        )

        with patch(
            "src.providers.llm.anthropic_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = AnthropicLLMProvider(settings)
            with pytest.raises(GenerationUnavailableError):
                await provider.complete("system", "user")


# ======================================================================
# Ollama LLM Provider
# ======================================================================


class TestOllamaLLMProvider:
    def test_points_openai_client_at_ollama(self) -> None:
        from src.providers.llm.ollama_provider import OllamaLLMProvider

        with patch("src.providers.llm.ollama_provider.openai.AsyncOpenAI") as client_cls:
            OllamaLLMProvider(_settings(ollama_base_url="http://gpu-box:11434/"))

        assert client_cls.call_args.kwargs["base_url"] == "http://gpu-box:11434/v1"

    @pytest.mark.asyncio
    async def test_complete_uses_default_model(self) -> None:
        from src.providers.llm.ollama_provider import OllamaLLMProvider

        mock_client = _openai_client(_chat_response("[]"))
        with patch("src.providers.llm.ollama_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OllamaLLMProvider(_settings())
            result = await provider.complete("s", "u", json_mode=True)

        assert result == "[]"
        request = mock_client.chat.completions.create.call_args.kwargs
        assert request["model"] == "llama3.1"
        assert request["response_format"] == {"type": "json_object"}


# ======================================================================
# Provider selection
# ======================================================================


class TestProviderSelection:
    def test_openai_first(self) -> None:
        from src.main import _build_llm_provider
        assert _build_llm_provider(_settings()).get_provider_name() == "openai"

    def test_anthropic_when_no_openai_key(self) -> None:
        from src.main import _build_llm_provider
        provider = _build_llm_provider(_settings(openai_api_key=""))
        assert provider.get_provider_name() == "anthropic"

    def test_ollama_when_no_keys(self) -> None:
        from src.main import _build_llm_provider
        provider = _build_llm_provider(_settings(openai_api_key="", anthropic_api_key=""))
        assert provider.get_provider_name() == "ollama"
