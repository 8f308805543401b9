"""Provider gateway: routes calls by provider id and never lets a failure escape."""

import logging
from collections.abc import Mapping

from config.config_loader import AppConfig, DefaultsConfig
from hypothetica.models import CallOptions
from hypothetica.providers.anthropic import AnthropicProvider
from hypothetica.providers.base import AIProvider, ProviderError
from hypothetica.providers.gemini import GeminiProvider
from hypothetica.providers.openai_provider import OpenAIProvider
from hypothetica.providers.openrouter import OpenRouterProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
    "openrouter": OpenRouterProvider,
}

_GLITCH_LIMIT = 180


def fallback_reply(error: Exception | str) -> str:
    """In-universe placeholder used when a provider cannot answer."""
    return f"…silence… (a glitch whispers: {str(error)[:_GLITCH_LIMIT]})"


def build_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Build one provider per configured provider id, keyed by id."""
    providers: dict[str, AIProvider] = {}
    for name, provider_cfg in config.providers.items():
        if provider_cfg.sdk not in PROVIDER_CLASSES:
            raise ValueError(f"Provider '{name}' uses unknown sdk: {provider_cfg.sdk}")
        providers[name] = PROVIDER_CLASSES[provider_cfg.sdk](provider_cfg)
    return providers


class Gateway:
    """Issue model calls and always come back with text.

    Args:
        providers: Provider instances keyed by provider id.
        defaults: Generation defaults applied when CallOptions leaves them unset.
    """

    def __init__(self, providers: Mapping[str, AIProvider], defaults: DefaultsConfig | None = None) -> None:
        self._providers = dict(providers)
        self._defaults = defaults or DefaultsConfig()

    async def call_model(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        options: CallOptions | None = None,
    ) -> str:
        """Call one provider, retrying once on timeout.

        Any failure is logged and converted into a placeholder reply, so one
        unavailable provider cannot stall a multi-speaker turn.
        """
        options = options or CallOptions()
        try:
            return await self._call_with_retry(provider, model, messages, options)
        except Exception as exc:
            logger.warning("Provider %s (%s) failed, using fallback reply: %s", provider, model, exc)
            return fallback_reply(exc)

    async def _call_with_retry(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        options: CallOptions,
    ) -> str:
        target = self._providers.get(provider)
        if target is None:
            raise ProviderError(provider, "Unknown provider")

        temperature = options.temperature if options.temperature is not None else self._defaults.temperature
        max_tokens = options.max_tokens if options.max_tokens is not None else self._defaults.max_tokens

        try:
            return await target.complete(model, messages, temperature, max_tokens, api_key=options.api_key)
        except ProviderError as exc:
            if not exc.timed_out:
                raise
            logger.warning("Provider %s timed out, retrying once", provider)
            return await target.complete(model, messages, temperature, max_tokens, api_key=options.api_key)
