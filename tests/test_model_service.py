"""Tests for the model service adapters."""

from unittest.mock import MagicMock, patch

import anthropic
import groq
import httpx
import pytest

from proposal_generator.config import Settings
from proposal_generator.errors import ConfigurationError, ModelServiceError, QuotaExceeded
from proposal_generator.key_pool import is_quota_error
from proposal_generator.model_service import (
    AnthropicModelService,
    GroqModelService,
    OpenAIModelService,
    create_model_service,
)


def rate_limit_response(url):
    return httpx.Response(429, request=httpx.Request("POST", url))


def chat_response(content):
    response = MagicMock()
    response.choices[0].message.content = content
    return response


@pytest.fixture
def mock_groq():
    with patch("proposal_generator.model_service.Groq") as mock_class:
        yield mock_class


class TestGroqModelService:
    """Tests for GroqModelService."""

    def test_complete_returns_content(self, mock_groq):
        mock_groq.return_value.chat.completions.create.return_value = chat_response("Cover letter")
        service = GroqModelService("llama-test", timeout_seconds=15)

        assert service.complete("prompt", api_key="key-a") == "Cover letter"

        mock_groq.assert_called_once_with(api_key="key-a", timeout=15, max_retries=0)
        kwargs = mock_groq.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-test"
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}

    def test_one_client_per_key(self, mock_groq):
        mock_groq.return_value.chat.completions.create.return_value = chat_response("ok")
        service = GroqModelService("llama-test")

        service.complete("p", api_key="key-a")
        service.complete("p", api_key="key-a")
        service.complete("p", api_key="key-b")

        assert [c.kwargs["api_key"] for c in mock_groq.call_args_list] == ["key-a", "key-b"]

    def test_rate_limit_becomes_quota_exceeded(self, mock_groq):
        error = groq.RateLimitError(
            "Rate limit reached",
            response=rate_limit_response("https://api.groq.com/openai/v1/chat/completions"),
            body=None,
        )
        mock_groq.return_value.chat.completions.create.side_effect = error

        with pytest.raises(QuotaExceeded) as exc_info:
            GroqModelService("llama-test").complete("prompt", api_key="key-a")

        assert exc_info.value.__cause__ is error
        assert is_quota_error(exc_info.value)

    def test_other_errors_become_model_service_error(self, mock_groq):
        mock_groq.return_value.chat.completions.create.side_effect = RuntimeError("invalid argument")

        with pytest.raises(ModelServiceError, match="invalid argument") as exc_info:
            GroqModelService("llama-test").complete("prompt", api_key="key-a")

        assert not isinstance(exc_info.value, QuotaExceeded)

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_response_is_an_error(self, mock_groq, content):
        mock_groq.return_value.chat.completions.create.return_value = chat_response(content)

        with pytest.raises(ModelServiceError, match="empty response"):
            GroqModelService("llama-test").complete("prompt", api_key="key-a")


class TestOpenAIModelService:
    """Tests for OpenAIModelService."""

    @patch("proposal_generator.model_service.openai.Client")
    def test_complete(self, mock_client):
        mock_client.return_value.chat.completions.create.return_value = chat_response("Letter")

        result = OpenAIModelService("gpt-4o", timeout_seconds=30).complete("prompt", api_key="sk-a")

        assert result == "Letter"
        mock_client.assert_called_once_with(api_key="sk-a", timeout=30, max_retries=0)


class TestAnthropicModelService:
    """Tests for AnthropicModelService."""

    @patch("proposal_generator.model_service.Anthropic")
    def test_complete(self, mock_anthropic):
        response = MagicMock()
        response.content[0].text = "Letter"
        mock_anthropic.return_value.messages.create.return_value = response

        result = AnthropicModelService("claude-test").complete("prompt", api_key="ant-a")

        assert result == "Letter"
        kwargs = mock_anthropic.return_value.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert "system" in kwargs

    @patch("proposal_generator.model_service.Anthropic")
    def test_rate_limit(self, mock_anthropic):
        mock_anthropic.return_value.messages.create.side_effect = anthropic.RateLimitError(
            "rate_limit_error",
            response=rate_limit_response("https://api.anthropic.com/v1/messages"),
            body=None,
        )

        with pytest.raises(QuotaExceeded):
            AnthropicModelService("claude-test").complete("prompt", api_key="ant-a")


class TestCreateModelService:
    """Tests for create_model_service."""

    @pytest.mark.parametrize("provider, expected", [
        ("groq", GroqModelService),
        ("openai", OpenAIModelService),
        ("anthropic", AnthropicModelService),
    ])
    def test_provider_mapping(self, provider, expected):
        settings = Settings(api_keys=("k",), provider=provider, model_name="m", timeout_seconds=5)

        service = create_model_service(settings)

        assert isinstance(service, expected)
        assert service.model_name == "m"
        assert service.timeout_seconds == 5

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            create_model_service(Settings(api_keys=(), provider="gemini"))
