"""Abstract base for all AI model providers."""

import os
from abc import ABC, abstractmethod
from typing import Any

from config.config_loader import ProviderConfig


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(
        self,
        provider_name: str,
        message: str,
        status: int | None = None,
        body: str | None = None,
        timed_out: bool = False,
    ) -> None:
        self.provider_name = provider_name
        self.status = status
        self.body = body
        self.timed_out = timed_out
        super().__init__(f"[{provider_name}] {message}")


class AIProvider(ABC):
    """Abstract base for all AI model providers.

    Subclasses translate the generic ``{role, content}`` message list into
    their wire schema, call the SDK and pull the reply text out of the
    response envelope.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._clients: dict[str, Any] = {}

    def name(self) -> str:
        """Return the provider id (e.g. 'GPT', 'Claude')."""
        return self._config.name

    @property
    def timeout_sec(self) -> float:
        return self._config.timeout_sec

    def _resolve_api_key(self, override: str | None) -> str:
        if override:
            return override
        for env_name in self._config.api_key_env:
            api_key = os.environ.get(env_name, "").strip()
            if api_key:
                return api_key
        raise ProviderError(self.name(), f"Missing API key: {' or '.join(self._config.api_key_env)}")

    def _client(self, api_key_override: str | None) -> Any:
        api_key = self._resolve_api_key(api_key_override)
        if api_key not in self._clients:
            self._clients[api_key] = self._make_client(api_key)
        return self._clients[api_key]

    @abstractmethod
    def _make_client(self, api_key: str) -> Any:
        """Build the SDK client for one credential."""
        ...

    @abstractmethod
    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        api_key: str | None = None,
    ) -> str:
        """Generate a reply for the given conversation.

        Args:
            model: Concrete model identifier.
            messages: Ordered ``{role, content}`` dicts, roles system/user/assistant.
            temperature: Sampling temperature.
            max_tokens: Reply length cap.
            api_key: Optional credential overriding the environment.

        Returns:
            The trimmed reply text of the first candidate.

        Raises:
            ProviderError: On missing key, API failure, timeout, or empty reply.
        """
        ...
