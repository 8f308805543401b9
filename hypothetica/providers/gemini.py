"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import time
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from hypothetica.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


def to_gemini_contents(messages: list[dict[str, str]]) -> tuple[str, list[dict[str, Any]]]:
    """Split out the system instruction and map turns to Gemini contents.

    assistant becomes "model", everything else "user"; content is wrapped as parts.
    """
    system = next((m["content"] for m in messages if m["role"] == "system"), "")
    contents = [
        {
            "role": "model" if m["role"] == "assistant" else "user",
            "parts": [{"text": m["content"]}],
        }
        for m in messages
        if m["role"] != "system"
    ]
    return system, contents


class GeminiProvider(AIProvider):
    """Google Gemini generateContent via google-genai SDK (API key auth)."""

    def _make_client(self, api_key: str) -> genai.Client:
        return genai.Client(api_key=api_key)

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        api_key: str | None = None,
    ) -> str:
        client = self._client(api_key)
        system, contents = to_gemini_contents(messages)

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=model,
                    contents=contents,
                    config=genai_types.GenerateContentConfig(
                        system_instruction=system or None,
                        temperature=temperature,
                        max_output_tokens=max_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(
                self.name(), f"Request timed out after {self._config.timeout_sec}s", timed_out=True
            ) from exc
        except genai_errors.APIError as exc:
            body = str(exc.message or exc.details or "")
            raise ProviderError(self.name(), f"{exc.code}: {body}", status=exc.code, body=body) from exc
        except Exception as exc:
            raise ProviderError(self.name(), f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text = ""
        if response.candidates:
            content = response.candidates[0].content
            if content and content.parts:
                text = (content.parts[0].text or "").strip()
        if not text:
            raise ProviderError(self.name(), "returned empty content")

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("%s %s: %.2fs, %s tokens", self.name(), model, latency, token_count)
        return text
