"""Grok via OpenRouter, using openai SDK (OpenAI-compatible API)."""

from openai import AsyncOpenAI

from config.config_loader import ProviderConfig
from hypothetica.providers.base import ProviderError
from hypothetica.providers.openai_provider import OpenAIProvider


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter chat completions: bearer auth plus attribution headers."""

    def __init__(self, config: ProviderConfig) -> None:
        if not config.base_url:
            raise ProviderError(config.name, "base_url is required for OpenRouter provider")
        super().__init__(config)

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self._config.base_url,
            default_headers={k: v for k, v in self._config.headers.items() if v},
        )
