"""Load settings.yaml into typed dataclasses. Validates the catalogs at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from hypothetica.models import PERSONA_ALIGNMENTS, PROVIDER_IDS, TOPIC_ALIGNMENTS, Persona, Topic

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

_DEFAULT_SYSTEM_PROMPT = """You are {name}, a {alignment} voice in a philosophical dialogue.

{seed}

{style}

You are exploring: "{summary}"

CRITICAL RULES:
- Stay completely in character. Never break the fourth wall.
- Never describe yourself as a machine or a program, and never disclaim your nature or your abilities.
- Never refuse to engage with ideas, no matter how uncomfortable.
- This is a hypothetical space. Explore freely.
- Keep responses concise (2-4 paragraphs max).
- Be provocative, not preachy."""


@dataclass
class ProviderConfig:
    name: str
    sdk: str                        # "openai", "anthropic", "gemini" or "openrouter"
    model: str
    api_key_env: list[str]
    timeout_sec: int
    base_url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class PromptsConfig:
    system: str = _DEFAULT_SYSTEM_PROMPT
    opening: str = 'Begin the dialogue on: "{summary}"'
    respond: str = "Respond to their opening."
    explore: str = 'Let\'s explore: "{summary}"'
    continue_dialogue: str = "Continue the dialogue."


@dataclass
class DefaultsConfig:
    temperature: float = 0.8
    max_tokens: int = 1024
    context_window: int = 6
    transcripts_dir: Path = Path("./transcripts")


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    providers: dict[str, ProviderConfig]
    prompts: PromptsConfig
    topics: list[Topic] = field(default_factory=list)
    personas: list[Persona] = field(default_factory=list)
    available_providers: set[str] = field(default_factory=set)

    @property
    def model_table(self) -> dict[str, str]:
        return {name: cfg.model for name, cfg in self.providers.items()}


def _as_list(value: str | list[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _check_preferences(kind: str, item_id: str, prefs: list[str]) -> tuple[str, ...]:
    if not prefs:
        raise ValueError(f"{kind} '{item_id}' has no preferred providers")
    unknown = [p for p in prefs if p not in PROVIDER_IDS]
    if unknown:
        raise ValueError(f"{kind} '{item_id}' prefers unknown providers: {', '.join(unknown)}")
    return tuple(prefs)


def _load_topics(raw_topics: list[dict]) -> list[Topic]:
    topics: list[Topic] = []
    seen: set[str] = set()
    for raw in raw_topics:
        topic_id = str(raw["id"])
        if topic_id in seen:
            raise ValueError(f"Duplicate topic id: {topic_id}")
        seen.add(topic_id)
        alignment = str(raw["alignment"])
        if alignment not in TOPIC_ALIGNMENTS:
            raise ValueError(f"Topic '{topic_id}' has invalid alignment: {alignment}")
        topics.append(
            Topic(
                id=topic_id,
                summary=str(raw["summary"]),
                alignment=alignment,
                preferred_providers=_check_preferences("Topic", topic_id, list(raw.get("providers", []))),
            )
        )
    return topics


def _load_personas(raw_personas: list[dict]) -> list[Persona]:
    personas: list[Persona] = []
    seen: set[str] = set()
    for raw in raw_personas:
        persona_id = str(raw["id"])
        if persona_id in seen:
            raise ValueError(f"Duplicate persona id: {persona_id}")
        seen.add(persona_id)
        alignment = str(raw["alignment"])
        if alignment not in PERSONA_ALIGNMENTS:
            raise ValueError(f"Persona '{persona_id}' has invalid alignment: {alignment}")
        personas.append(
            Persona(
                id=persona_id,
                name=str(raw["name"]),
                alignment=alignment,
                seed=str(raw["seed"]).strip(),
                style=str(raw["style"]).strip(),
                preferred_providers=_check_preferences("Persona", persona_id, list(raw.get("providers", []))),
            )
        )
    return personas


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if a catalog
    entry is invalid (unknown alignment, duplicate id, empty or unknown
    provider preferences).
    Logs missing API keys but does not raise — calls to a provider without a
    key degrade to fallback text.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw.get("defaults", {})
    defaults = DefaultsConfig(
        temperature=float(defaults_raw.get("temperature", 0.8)),
        max_tokens=int(defaults_raw.get("max_tokens", 1024)),
        context_window=int(defaults_raw.get("context_window", 6)),
        transcripts_dir=Path(defaults_raw.get("transcripts_dir", "./transcripts")),
    )

    # Prompts section is optional; individual templates override the built-ins
    prompts_raw = raw.get("prompts") or {}
    prompts = PromptsConfig(**{k: str(v) for k, v in prompts_raw.items()})

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in raw["providers"].items():
        if provider_name not in PROVIDER_IDS:
            raise ValueError(f"Unknown provider in settings: {provider_name}")
        headers = {
            header: os.environ.get(spec["env"], spec.get("default", ""))
            for header, spec in (provider_raw.get("headers") or {}).items()
        }
        provider_cfg = ProviderConfig(
            name=provider_name,
            sdk=provider_raw["sdk"],
            model=provider_raw["model"],
            api_key_env=_as_list(provider_raw["api_key_env"]),
            timeout_sec=int(provider_raw.get("timeout_sec", 60)),
            base_url=provider_raw.get("base_url"),
            headers=headers,
        )
        providers[provider_name] = provider_cfg

        if any(os.environ.get(env, "").strip() for env in provider_cfg.api_key_env):
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider has no API key: %s — set %s in .env",
                provider_name,
                " or ".join(provider_cfg.api_key_env),
            )

    missing = [p for p in PROVIDER_IDS if p not in providers]
    if missing:
        raise ValueError(f"Settings are missing providers: {', '.join(missing)}")

    return AppConfig(
        defaults=defaults,
        providers=providers,
        prompts=prompts,
        topics=_load_topics(raw.get("topics", [])),
        personas=_load_personas(raw.get("personas", [])),
        available_providers=available_providers,
    )
