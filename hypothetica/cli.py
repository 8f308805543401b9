"""Click CLI — validates ids, runs a turn, renders it and keeps the transcript."""

import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import NoReturn

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from hypothetica.catalog import Catalog
from hypothetica.gateway import Gateway, build_providers
from hypothetica.healthcheck import run_health_checks
from hypothetica.models import MODES, TOPIC_ALIGNMENTS, Message, Persona, TurnResult
from hypothetica.orchestrator import TurnError, TurnOrchestrator
from hypothetica.output import (
    console,
    default_transcript_path,
    print_personas,
    print_topic_header,
    print_topics,
    print_turn,
)
from hypothetica.transcript import Transcript, load_transcript, save_transcript

logger = logging.getLogger(__name__)

# Exit code for requests the caller must fix (bad ids, inconsistent history)
_EXIT_BAD_REQUEST = 2


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _fail(message: str, code: int = _EXIT_BAD_REQUEST) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    sys.exit(code)


def _build_gateway(config: AppConfig) -> Gateway:
    return Gateway(build_providers(config), config.defaults)


def _build_orchestrator(config: AppConfig, catalog: Catalog) -> TurnOrchestrator:
    return TurnOrchestrator(
        gateway=_build_gateway(config),
        catalog=catalog,
        model_table=config.model_table,
        prompts=config.prompts,
        context_window=config.defaults.context_window,
    )


def _lookup_persona(catalog: Catalog, persona_id: str | None, expected_alignment: str) -> Persona | None:
    if not persona_id:
        return None
    persona = catalog.get_persona(persona_id)
    if persona is None:
        _fail(f"{expected_alignment.title()} persona not found: {persona_id}")
    if persona.alignment != expected_alignment:
        _fail(f"Persona '{persona_id}' is {persona.alignment}, not {expected_alignment}")
    return persona


def _record_personas(transcript: Transcript, result: TurnResult, catalog: Catalog) -> None:
    """Remember which personas spoke so later turns can be resumed."""
    for message in result.messages:
        persona = catalog.get_persona(message.meta.persona_id) if message.meta and message.meta.persona_id else None
        if persona is None:
            continue
        if persona.alignment == "bright":
            transcript.bright_persona_id = persona.id
        else:
            transcript.dark_persona_id = persona.id


def _run_turn(coro):
    """Run one orchestrator call, mapping request errors to exit code 2."""
    try:
        return asyncio.run(coro)
    except TurnError as exc:
        _fail(str(exc))
    except Exception as exc:
        logger.exception("Turn failed")
        _fail(f"Internal failure: {exc}", code=1)


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Settings file (default: config/settings.yaml)")
@click.option("--seed", type=int, default=None, help="Seed for random topic and persona picks")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, seed: int | None, verbose: bool) -> None:
    """Hypothetica -- philosophical "what if" dialogues between AI personas.

    \b
    Examples:
      hypothetica start --mode observer --topic D3
      hypothetica start --mode participant --text "Is hope a trap?" --save chat.json
      hypothetica turn chat.json --text "But what about love?"
      hypothetica topics --alignment neutral
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config(config_path) if config_path else load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    ctx.obj = {
        "config": config,
        "catalog": Catalog(config.topics, config.personas, rng=random.Random(seed)),
    }


@main.command()
@click.option("--mode", type=click.Choice(MODES), required=True, help="Conversation topology")
@click.option("--topic", "topic_id", default=None, help="Topic id (default: random)")
@click.option("--bright", "bright_id", default=None, help="Bright persona id")
@click.option("--dark", "dark_id", default=None, help="Dark persona id")
@click.option("--text", "user_text", default=None, help="Your opening line (participant and duel)")
@click.option("--save", "save_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Transcript file (default: timestamped file in the transcripts dir)")
@click.pass_obj
def start(
    obj: dict,
    mode: str,
    topic_id: str | None,
    bright_id: str | None,
    dark_id: str | None,
    user_text: str | None,
    save_path: Path | None,
) -> None:
    """Start a new conversation."""
    config: AppConfig = obj["config"]
    catalog: Catalog = obj["catalog"]

    topic = catalog.get_topic(topic_id) if topic_id else catalog.pick_random_topic()
    if topic is None:
        _fail(f"Topic not found: {topic_id}")
    bright = _lookup_persona(catalog, bright_id, "bright")
    dark = _lookup_persona(catalog, dark_id, "dark")

    orchestrator = _build_orchestrator(config, catalog)
    print_topic_header(topic, mode)
    result: TurnResult = _run_turn(
        orchestrator.start_turn(mode, topic, user_text=user_text, bright_persona=bright, dark_persona=dark)
    )
    print_turn(result, {p.id: p for p in catalog.personas})

    transcript = Transcript(mode=mode, topic_id=topic.id)
    if user_text and mode != "observer":
        transcript.messages.append(Message(role="user", content=user_text))
    transcript.messages.extend(result.messages)
    _record_personas(transcript, result, catalog)

    path = save_path or default_transcript_path(config.defaults.transcripts_dir, topic)
    save_transcript(transcript, path)
    console.print(f"\n[dim]Saved to: {path}[/dim]")


@main.command()
@click.argument("transcript_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--text", "user_text", default=None, help="Your next line (participant and duel)")
@click.pass_obj
def turn(obj: dict, transcript_path: Path, user_text: str | None) -> None:
    """Continue a saved conversation."""
    config: AppConfig = obj["config"]
    catalog: Catalog = obj["catalog"]

    try:
        transcript = load_transcript(transcript_path)
    except (KeyError, ValueError) as exc:
        _fail(f"Invalid transcript {transcript_path}: {exc}")

    if transcript.mode not in MODES:
        _fail(f"Invalid mode in transcript: {transcript.mode}")
    topic = catalog.get_topic(transcript.topic_id)
    if topic is None:
        _fail(f"Topic not found: {transcript.topic_id}")
    bright = _lookup_persona(catalog, transcript.bright_persona_id, "bright")
    dark = _lookup_persona(catalog, transcript.dark_persona_id, "dark")

    orchestrator = _build_orchestrator(config, catalog)
    result: TurnResult = _run_turn(
        orchestrator.continue_turn(
            transcript.mode,
            topic,
            transcript.messages,
            user_text=user_text,
            bright_persona=bright,
            dark_persona=dark,
        )
    )
    print_turn(result, {p.id: p for p in catalog.personas})

    if user_text and transcript.mode != "observer":
        transcript.messages.append(Message(role="user", content=user_text))
    transcript.messages.extend(result.messages)
    save_transcript(transcript, transcript_path)


@main.command()
@click.option("--alignment", type=click.Choice(TOPIC_ALIGNMENTS), default=None, help="Only this alignment")
@click.pass_obj
def topics(obj: dict, alignment: str | None) -> None:
    """List available topics."""
    catalog: Catalog = obj["catalog"]
    print_topics(t for t in catalog.topics if alignment is None or t.alignment == alignment)


@main.command()
@click.pass_obj
def personas(obj: dict) -> None:
    """List available personas."""
    print_personas(obj["catalog"].personas)


@main.command()
@click.pass_obj
def check(obj: dict) -> None:
    """Ping every provider that has an API key."""
    config: AppConfig = obj["config"]
    providers = {n: p for n, p in build_providers(config).items() if n in config.available_providers}
    if not providers:
        _fail("No providers available. Check API keys in .env.", code=1)

    console.print("\n[bold]Checking providers...[/bold]")
    results = asyncio.run(run_health_checks(providers, config.model_table))

    failed = False
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            failed = True
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {short_err}")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
