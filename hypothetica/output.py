"""Rich console rendering of turns and catalogs."""

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from hypothetica.models import Message, Persona, Topic, TurnResult

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_ALIGNMENT_STYLES = {"bright": "yellow", "dark": "magenta", "neutral": "cyan"}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def default_transcript_path(output_dir: Path, topic: Topic) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return output_dir / f"{timestamp}_{topic.id.lower()}_{_slug(topic.summary)}.json"


def _message_panel(message: Message, alignment: str | None) -> Panel:
    meta = message.meta
    subtitle = f"{meta.emotion} · {meta.provider} ({meta.model})" if meta else None
    return Panel(
        message.content or "[dim](empty)[/dim]",
        title=f"[bold]{message.name or message.role}[/bold]",
        subtitle=subtitle,
        border_style=_ALIGNMENT_STYLES.get(alignment or "", "dim"),
    )


def print_topic_header(topic: Topic, mode: str) -> None:
    style = _ALIGNMENT_STYLES.get(topic.alignment, "white")
    console.print(Rule(f"[bold {style}]{topic.id}[/bold {style}] {topic.summary}"))
    console.print(Text(f"Mode: {mode} | Alignment: {topic.alignment}", style="dim"))


def print_turn(result: TurnResult, personas: dict[str, Persona]) -> None:
    """Print each new message in a panel colored by its persona's alignment."""
    for message in result.messages:
        persona = personas.get(message.meta.persona_id) if message.meta and message.meta.persona_id else None
        console.print(_message_panel(message, persona.alignment if persona else None))
    console.print(Text(f"Providers: {', '.join(result.using_providers)}", style="dim"))


def print_topics(topics: Iterable[Topic]) -> None:
    table = Table(title="Topics")
    table.add_column("ID", style="bold")
    table.add_column("Alignment")
    table.add_column("Summary")
    table.add_column("Providers", style="dim")
    for topic in topics:
        style = _ALIGNMENT_STYLES.get(topic.alignment, "white")
        table.add_row(topic.id, f"[{style}]{topic.alignment}[/{style}]", topic.summary, ", ".join(topic.preferred_providers))
    console.print(table)


def print_personas(personas: Iterable[Persona]) -> None:
    table = Table(title="Personas")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Alignment")
    table.add_column("Worldview")
    for persona in personas:
        style = _ALIGNMENT_STYLES.get(persona.alignment, "white")
        table.add_row(persona.id, persona.name, f"[{style}]{persona.alignment}[/{style}]", persona.seed)
    console.print(table)
