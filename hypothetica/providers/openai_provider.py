"""OpenAI provider (GPT) using openai SDK with native async."""

import asyncio
import logging
import time

import openai
from openai import AsyncOpenAI

from hypothetica.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


def to_openai_messages(messages: list[dict[str, str]]) -> list[dict[str, str]]:
    """OpenAI-style chat keeps role/content as-is."""
    return [{"role": m["role"], "content": m["content"]} for m in messages]


class OpenAIProvider(AIProvider):
    """OpenAI chat completions via openai SDK (bearer auth)."""

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key, base_url=self._config.base_url)

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        api_key: str | None = None,
    ) -> str:
        client = self._client(api_key)
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=model,
                    messages=to_openai_messages(messages),
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, openai.APITimeoutError) as exc:
            raise ProviderError(
                self.name(), f"Request timed out after {self._config.timeout_sec}s", timed_out=True
            ) from exc
        except openai.APIStatusError as exc:
            body = exc.response.text
            raise ProviderError(self.name(), f"{exc.status_code}: {body}", status=exc.status_code, body=body) from exc
        except Exception as exc:
            raise ProviderError(self.name(), f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        text = (choice.message.content or "").strip() if choice else ""
        if not text:
            raise ProviderError(self.name(), "returned empty content")

        logger.info(
            "%s %s: %.2fs, %s tokens",
            self.name(),
            model,
            latency,
            response.usage.total_tokens if response.usage else None,
        )
        return text
