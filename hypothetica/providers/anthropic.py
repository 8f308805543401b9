"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time
from typing import Any

import anthropic as anthropic_sdk

from hypothetica.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


def to_anthropic_messages(messages: list[dict[str, str]]) -> tuple[str, list[dict[str, Any]]]:
    """Split out the system prompt and wrap each turn as a typed text block.

    Returns:
        (system, messages) where messages holds only user/assistant turns.
    """
    system = next((m["content"] for m in messages if m["role"] == "system"), "")
    turns = [
        {
            "role": "assistant" if m["role"] == "assistant" else "user",
            "content": [{"type": "text", "text": m["content"]}],
        }
        for m in messages
        if m["role"] != "system"
    ]
    return system, turns


class AnthropicProvider(AIProvider):
    """Anthropic Messages API via anthropic SDK (x-api-key auth)."""

    def _make_client(self, api_key: str) -> anthropic_sdk.AsyncAnthropic:
        return anthropic_sdk.AsyncAnthropic(api_key=api_key)

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        api_key: str | None = None,
    ) -> str:
        client = self._client(api_key)
        system, turns = to_anthropic_messages(messages)
        request: dict[str, Any] = {
            "model": model,
            "messages": turns,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system:
            request["system"] = system

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.messages.create(**request),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, anthropic_sdk.APITimeoutError) as exc:
            raise ProviderError(
                self.name(), f"Request timed out after {self._config.timeout_sec}s", timed_out=True
            ) from exc
        except anthropic_sdk.APIStatusError as exc:
            body = exc.response.text
            raise ProviderError(self.name(), f"{exc.status_code}: {body}", status=exc.status_code, body=body) from exc
        except Exception as exc:
            raise ProviderError(self.name(), f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        first = response.content[0] if response.content else None
        text = (getattr(first, "text", None) or "").strip()
        if not text:
            raise ProviderError(self.name(), "returned empty content")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("%s %s: %.2fs, %s tokens", self.name(), model, latency, token_count)
        return text
