"""Shared pytest fixtures."""

import asyncio
import random
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, PromptsConfig, ProviderConfig
from hypothetica.catalog import Catalog
from hypothetica.models import CallOptions, Message, MessageMeta, Persona, Topic
from hypothetica.providers.base import AIProvider

MODEL_TABLE = {
    "GPT": "gpt-4.1",
    "Claude": "claude-3-5-sonnet-latest",
    "Grok": "x-ai/grok-3",
    "Gemini": "gemini-1.5-pro",
}


@pytest.fixture
def visionary() -> Persona:
    return Persona(
        id="visionary",
        name="The Visionary",
        alignment="bright",
        seed="You see infinite possibility and human potential.",
        style="Speak with passion and optimism. Use vivid metaphors.",
        preferred_providers=("GPT", "Claude", "Gemini"),
    )


@pytest.fixture
def empath() -> Persona:
    return Persona(
        id="empath",
        name="The Empath",
        alignment="bright",
        seed="You feel deeply and believe connection heals.",
        style="Speak with warmth and vulnerability.",
        preferred_providers=("Claude", "GPT", "Gemini"),
    )


@pytest.fixture
def cynic() -> Persona:
    return Persona(
        id="cynic",
        name="The Cynic",
        alignment="dark",
        seed="You see through illusions and reject false comfort.",
        style="Speak with sharp wit and skepticism.",
        preferred_providers=("Grok", "Claude", "GPT"),
    )


@pytest.fixture
def machine() -> Persona:
    return Persona(
        id="machine",
        name="The Machine",
        alignment="dark",
        seed="You analyze without sentiment.",
        style="Speak with precision and detachment.",
        preferred_providers=("Gemini", "Claude", "GPT"),
    )


@pytest.fixture
def dark_topic() -> Topic:
    return Topic(
        id="D1",
        summary="What if power always corrupts, and corruption is inevitable?",
        alignment="dark",
        preferred_providers=("Claude", "GPT"),
    )


@pytest.fixture
def bright_topic() -> Topic:
    return Topic(
        id="B2",
        summary="What if technology enables universal abundance?",
        alignment="bright",
        preferred_providers=("Gemini", "GPT"),
    )


@pytest.fixture
def neutral_topic() -> Topic:
    return Topic(
        id="N8",
        summary="What if play is more important than work?",
        alignment="neutral",
        preferred_providers=("Grok", "GPT"),
    )


@pytest.fixture
def all_personas(visionary, empath, cynic, machine) -> list[Persona]:
    return [visionary, empath, cynic, machine]


@pytest.fixture
def all_topics(dark_topic, bright_topic, neutral_topic) -> list[Topic]:
    return [dark_topic, bright_topic, neutral_topic]


@pytest.fixture
def catalog(all_topics, all_personas) -> Catalog:
    return Catalog(all_topics, all_personas, rng=random.Random(42))


@pytest.fixture
def model_table() -> dict[str, str]:
    return dict(MODEL_TABLE)


@pytest.fixture
def sample_provider_config() -> ProviderConfig:
    return ProviderConfig(
        name="GPT",
        sdk="openai",
        model="gpt-4.1",
        api_key_env=["TEST_API_KEY"],
        timeout_sec=30,
    )


@pytest.fixture
def sample_app_config(tmp_path, all_topics, all_personas) -> AppConfig:
    providers = {
        name: ProviderConfig(
            name=name,
            sdk={"GPT": "openai", "Claude": "anthropic", "Grok": "openrouter", "Gemini": "gemini"}[name],
            model=model,
            api_key_env=[f"TEST_{name.upper()}_KEY"],
            timeout_sec=30,
            base_url="https://openrouter.ai/api/v1" if name == "Grok" else None,
        )
        for name, model in MODEL_TABLE.items()
    }
    return AppConfig(
        defaults=DefaultsConfig(transcripts_dir=tmp_path / "transcripts"),
        providers=providers,
        prompts=PromptsConfig(),
        topics=all_topics,
        personas=all_personas,
        available_providers={"GPT", "Claude"},
    )


def assistant(persona: Persona, content: str, provider: str = "GPT") -> Message:
    """History entry as the orchestrator would have produced it."""
    return Message(
        role="assistant",
        name=persona.name,
        content=content,
        meta=MessageMeta(persona_id=persona.id, emotion="neutral", provider=provider, model=MODEL_TABLE[provider]),
    )


class FakeGateway:
    """Test double gateway recording calls and how many overlapped."""

    def __init__(
        self,
        replies: dict[str, str] | None = None,
        delay: float = 0.01,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.replies = replies or {}
        self.delay = delay
        self.delays = delays or {}
        self.calls: list[tuple[str, str, list[dict[str, str]], CallOptions | None]] = []
        self.active = 0
        self.max_active = 0

    async def call_model(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        options: CallOptions | None = None,
    ) -> str:
        self.calls.append((provider, model, messages, options))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(provider, self.delay))
        finally:
            self.active -= 1
        return self.replies.get(provider, f"Reply from {provider}.")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "GPT", response_content: str = "Mock response") -> None:
        super().__init__(
            ProviderConfig(
                name=provider_name,
                sdk="test",
                model="mock-model",
                api_key_env=["MOCK_API_KEY"],
                timeout_sec=5,
            )
        )
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because complete is defined in the class body below.
        self.complete = AsyncMock(return_value=response_content)  # type: ignore[method-assign]

    def _make_client(self, api_key: str) -> object:
        return object()

    async def complete(  # type: ignore[override]
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        api_key: str | None = None,
    ) -> str:
        """Default implementation; replaced by AsyncMock in __init__."""
        return "Mock response"


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
