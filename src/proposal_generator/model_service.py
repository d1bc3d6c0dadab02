"""Language model adapters over the Groq, OpenAI and Anthropic SDKs."""

import threading
from typing import Dict

import anthropic
import groq
import openai
from anthropic import Anthropic
from groq import Groq

from .config import Settings
from .errors import ConfigurationError, ModelServiceError, QuotaExceeded

SYSTEM_PROMPT = "You are an expert Upwork proposal writer."


class ModelService:
    """Text in, text out call to a hosted language model.

    Subclasses create the SDK client and perform the request. One client
    is cached per API key so rotating keys does not rebuild connections.
    SDK-level retries are disabled; the RetryExecutor owns retrying.
    """

    RATE_LIMIT_ERROR = ()

    def __init__(
        self,
        model_name: str,
        timeout_seconds: float = 60.0,
        max_tokens: int = 2000,
        temperature: float = 0.7,
    ):
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._clients: Dict[str, object] = {}
        self._clients_lock = threading.Lock()

    def _make_client(self, api_key: str):
        raise NotImplementedError

    def _create_completion(self, client, prompt: str) -> str:
        raise NotImplementedError

    def _client_for(self, api_key: str):
        with self._clients_lock:
            client = self._clients.get(api_key)
            if client is None:
                client = self._make_client(api_key)
                self._clients[api_key] = client
            return client

    def complete(self, prompt: str, api_key: str) -> str:
        """Send a single prompt and return the model's text.

        Args:
            prompt: Full prompt text
            api_key: Key to authenticate this request with

        Returns:
            The response text

        Raises:
            QuotaExceeded: The provider reported a rate limit or exhausted quota
            ModelServiceError: Any other failure, including an empty response
        """
        client = self._client_for(api_key)
        try:
            content = self._create_completion(client, prompt)
        except self.RATE_LIMIT_ERROR as e:
            raise QuotaExceeded(f"Rate limit or quota exceeded: {e}") from e
        except Exception as e:
            raise ModelServiceError(f"{self.model_name} request failed: {e}") from e

        if not content or not content.strip():
            raise ModelServiceError(f"{self.model_name} returned an empty response")
        return content


class GroqModelService(ModelService):
    """Groq chat completions."""

    RATE_LIMIT_ERROR = groq.RateLimitError

    def _make_client(self, api_key: str):
        return Groq(api_key=api_key, timeout=self.timeout_seconds, max_retries=0)

    def _create_completion(self, client, prompt: str) -> str:
        response = client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content


class OpenAIModelService(ModelService):
    """OpenAI chat completions."""

    RATE_LIMIT_ERROR = openai.RateLimitError

    def _make_client(self, api_key: str):
        return openai.Client(api_key=api_key, timeout=self.timeout_seconds, max_retries=0)

    def _create_completion(self, client, prompt: str) -> str:
        response = client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content


class AnthropicModelService(ModelService):
    """Anthropic messages API."""

    RATE_LIMIT_ERROR = anthropic.RateLimitError

    def _make_client(self, api_key: str):
        return Anthropic(api_key=api_key, timeout=self.timeout_seconds, max_retries=0)

    def _create_completion(self, client, prompt: str) -> str:
        response = client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": prompt}
            ]
        )
        return response.content[0].text


MODEL_SERVICES = {
    "groq": GroqModelService,
    "openai": OpenAIModelService,
    "anthropic": AnthropicModelService,
}


def create_model_service(settings: Settings) -> ModelService:
    """Build the model service for the configured provider."""
    service_class = MODEL_SERVICES.get(settings.provider)
    if service_class is None:
        raise ConfigurationError(f"Unsupported LLM provider: {settings.provider}")
    return service_class(settings.model_name, timeout_seconds=settings.timeout_seconds)
