"""Pure dataclasses for Hypothetica conversations. No logic, no deps."""

from dataclasses import dataclass, field
from typing import Literal

ProviderId = Literal["GPT", "Claude", "Grok", "Gemini"]
Mode = Literal["observer", "participant", "duel"]
Role = Literal["system", "user", "assistant"]

PROVIDER_IDS: tuple[str, ...] = ("GPT", "Claude", "Grok", "Gemini")
MODES: tuple[str, ...] = ("observer", "participant", "duel")
ROLES: tuple[str, ...] = ("system", "user", "assistant")
PERSONA_ALIGNMENTS: tuple[str, ...] = ("bright", "dark")
TOPIC_ALIGNMENTS: tuple[str, ...] = ("bright", "dark", "neutral")


@dataclass(frozen=True)
class Topic:
    id: str
    summary: str
    alignment: str                  # "bright", "dark" or "neutral"
    preferred_providers: tuple[str, ...]


@dataclass(frozen=True)
class Persona:
    id: str
    name: str
    alignment: str                  # "bright" or "dark"
    seed: str                       # worldview
    style: str                      # voice directives
    preferred_providers: tuple[str, ...]


@dataclass(frozen=True)
class MessageMeta:
    persona_id: str | None = None
    emotion: str | None = None
    provider: str | None = None
    model: str | None = None


@dataclass(frozen=True)
class Message:
    role: str                       # "system", "user" or "assistant"
    content: str
    name: str | None = None         # speaker display name
    meta: MessageMeta | None = None


@dataclass
class TurnResult:
    messages: list[Message] = field(default_factory=list)
    using_providers: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CallOptions:
    api_key: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
