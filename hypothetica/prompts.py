"""System prompt rendering and turn instructions."""

from collections.abc import Sequence

from config.config_loader import PromptsConfig
from hypothetica.models import Message, Persona, Topic

_DEFAULT_PROMPTS = PromptsConfig()


def build_system_prompt(persona: Persona, topic: Topic, template: str = _DEFAULT_PROMPTS.system) -> str:
    """Render the in-character system prompt for a persona exploring a topic."""
    return template.format(
        name=persona.name,
        alignment=persona.alignment,
        seed=persona.seed,
        style=persona.style,
        summary=topic.summary,
    )


def opening_instruction(topic: Topic, prompts: PromptsConfig = _DEFAULT_PROMPTS) -> str:
    return prompts.opening.format(summary=topic.summary)


def explore_instruction(topic: Topic, prompts: PromptsConfig = _DEFAULT_PROMPTS) -> str:
    return prompts.explore.format(summary=topic.summary)


def speaker_line(name: str | None, content: str) -> str:
    """Prefix content with the speaker's display name so models can tell voices apart."""
    return f"{name}: {content}" if name else content


def history_to_context(history: Sequence[Message]) -> list[dict[str, str]]:
    """Map history messages to provider-neutral role/content pairs."""
    return [{"role": m.role, "content": speaker_line(m.name, m.content)} for m in history]
