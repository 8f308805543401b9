"""Turn orchestration: who speaks, with which prompt, on which provider.

The orchestrator keeps no session state. Every call rebuilds what it needs
from its arguments, and the caller resends the full history on each turn.
``Message.meta.persona_id`` is how a follow-up turn learns who spoke before.

Modes:

    observer     two personas debate each other; the user only watches
    participant  the user talks with one persona
    duel         the user talks with a bright and a dark persona at once
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Protocol

from config.config_loader import PromptsConfig
from hypothetica.catalog import Catalog
from hypothetica.models import CallOptions, Message, MessageMeta, Persona, Topic, TurnResult
from hypothetica.postprocess import classify_emotion, strip_disclaimers
from hypothetica.prompts import (
    build_system_prompt,
    explore_instruction,
    history_to_context,
    opening_instruction,
    speaker_line,
)
from hypothetica.selection import choose_provider, resolve_model

logger = logging.getLogger(__name__)


class TurnError(Exception):
    """Base for request errors the caller must fix (client-side failures)."""


class InvalidMode(TurnError):
    """Mode is not one of observer, participant, duel."""


class MissingHistory(TurnError):
    """A continuation was requested without history."""


class PersonaMismatch(TurnError):
    """The supplied persona is not the one the history says was speaking."""


class InsufficientHistory(TurnError):
    """Observer or duel continuation without two prior assistant turns."""


class MissingPersona(TurnError):
    """A persona the turn needs was not supplied or cannot be resolved."""


class ModelGateway(Protocol):
    async def call_model(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        options: CallOptions | None = None,
    ) -> str: ...


class TurnOrchestrator:
    """Builds prompts, picks providers and assembles the messages of one turn.

    Args:
        gateway: Anything with an async ``call_model``; it must always return text.
        catalog: Topic and persona catalog used for random persona picks.
        model_table: Provider id to concrete model identifier.
        prompts: Prompt templates.
        context_window: History entries shown to observer and duel continuations.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        catalog: Catalog,
        model_table: Mapping[str, str],
        prompts: PromptsConfig | None = None,
        context_window: int = 6,
    ) -> None:
        self._gateway = gateway
        self._catalog = catalog
        self._model_table = dict(model_table)
        self._prompts = prompts or PromptsConfig()
        self._context_window = context_window

    async def start_turn(
        self,
        mode: str,
        topic: Topic,
        user_text: str | None = None,
        bright_persona: Persona | None = None,
        dark_persona: Persona | None = None,
        options: CallOptions | None = None,
    ) -> TurnResult:
        """Produce the opening message(s) of a conversation.

        Raises:
            InvalidMode: If mode is not recognized.
        """
        logger.info("Starting %s conversation on topic %s", mode, topic.id)

        if mode == "observer":
            bright = bright_persona or self._catalog.pick_persona_by_alignment("bright")
            dark = dark_persona or self._catalog.pick_persona_by_alignment("dark")
            opener, responder = (dark, bright) if topic.alignment == "dark" else (bright, dark)

            opening = opening_instruction(topic, self._prompts)
            first = await self._speak(opener, topic, [{"role": "user", "content": opening}], options)
            # The responder must see the opener's cleaned text, so this call waits for it
            second = await self._speak(
                responder,
                topic,
                [
                    {"role": "user", "content": opening},
                    {"role": "assistant", "content": speaker_line(opener.name, first.content)},
                    {"role": "user", "content": self._prompts.respond},
                ],
                options,
            )
            return _result(first, second)

        if mode == "participant":
            persona = bright_persona or dark_persona or self._catalog.pick_persona_for_topic(topic.alignment)
            prompt = user_text or explore_instruction(topic, self._prompts)
            message = await self._speak(persona, topic, [{"role": "user", "content": prompt}], options)
            return _result(message)

        if mode == "duel":
            bright = bright_persona or self._catalog.pick_persona_by_alignment("bright")
            dark = dark_persona or self._catalog.pick_persona_by_alignment("dark")
            prompt = user_text or explore_instruction(topic, self._prompts)
            return await self._duel(bright, dark, topic, [{"role": "user", "content": prompt}], options)

        raise InvalidMode(f"Unknown mode: {mode}")

    async def continue_turn(
        self,
        mode: str,
        topic: Topic,
        history: Sequence[Message],
        user_text: str | None = None,
        bright_persona: Persona | None = None,
        dark_persona: Persona | None = None,
        options: CallOptions | None = None,
    ) -> TurnResult:
        """Produce the next message(s) of an existing conversation.

        Raises:
            MissingHistory: If history is empty.
            PersonaMismatch: If the participant persona differs from the last speaker.
            InsufficientHistory: If observer/duel history lacks two assistant turns.
            MissingPersona: If a required persona is absent or cannot be resolved.
            InvalidMode: If mode is not recognized.
        """
        if not history:
            raise MissingHistory("continue_turn requires history. Use start_turn for the first turn.")

        last_two = [m for m in history if m.role == "assistant"][-2:]
        logger.info(
            "Continuing %s conversation on topic %s (%d history entries)", mode, topic.id, len(history)
        )

        if mode == "participant":
            last_persona_id = last_two[-1].meta.persona_id if last_two and last_two[-1].meta else None
            if not last_persona_id:
                raise MissingPersona("Cannot continue: no persona in history")
            persona = bright_persona or dark_persona
            if persona is None or persona.id != last_persona_id:
                raise PersonaMismatch(
                    f"Persona mismatch in participant mode: history speaker is '{last_persona_id}', "
                    f"got '{persona.id if persona else None}'"
                )
            turns = history_to_context(history)
            turns.append({"role": "user", "content": user_text or self._prompts.continue_dialogue})
            message = await self._speak(persona, topic, turns, options)
            return _result(message)

        if mode == "observer":
            if len(last_two) < 2:
                raise InsufficientHistory("Observer mode requires at least 2 assistant messages in history")
            # Alternates back to the earlier of the last two speakers
            earlier_id = last_two[0].meta.persona_id if last_two[0].meta else None
            if bright_persona is not None and bright_persona.id == earlier_id:
                next_persona = bright_persona
            elif dark_persona is not None and dark_persona.id == earlier_id:
                next_persona = dark_persona
            else:
                raise MissingPersona(f"Cannot find next persona (expected '{earlier_id}')")
            turns = self._window(history)
            turns.append({"role": "user", "content": self._prompts.continue_dialogue})
            message = await self._speak(next_persona, topic, turns, options)
            return _result(message)

        if mode == "duel":
            if len(last_two) < 2:
                raise InsufficientHistory("Duel mode requires at least 2 assistant messages in history")
            if bright_persona is None or dark_persona is None:
                raise MissingPersona("Both bright and dark personas are required for duel mode")
            turns = self._window(history)
            turns.append({"role": "user", "content": user_text or self._prompts.continue_dialogue})
            return await self._duel(bright_persona, dark_persona, topic, turns, options)

        raise InvalidMode(f"Unknown mode: {mode}")

    def _window(self, history: Sequence[Message]) -> list[dict[str, str]]:
        return history_to_context(history[-self._context_window:])

    async def _duel(
        self,
        bright: Persona,
        dark: Persona,
        topic: Topic,
        turns: list[dict[str, str]],
        options: CallOptions | None,
    ) -> TurnResult:
        # The gateway absorbs provider failures, so the join only ever sees text
        bright_message, dark_message = await asyncio.gather(
            self._speak(bright, topic, list(turns), options),
            self._speak(dark, topic, list(turns), options),
        )
        return _result(bright_message, dark_message)

    async def _speak(
        self,
        persona: Persona,
        topic: Topic,
        turns: list[dict[str, str]],
        options: CallOptions | None,
    ) -> Message:
        """One persona's reply: select provider, call, clean, tag."""
        provider = choose_provider(topic.preferred_providers, persona.preferred_providers)
        model = resolve_model(provider, self._model_table)
        system = build_system_prompt(persona, topic, self._prompts.system)
        messages = [{"role": "system", "content": system}, *turns]

        logger.debug("%s speaks via %s/%s with %d messages", persona.id, provider, model, len(messages))
        raw = await self._gateway.call_model(provider, model, messages, options)
        content = strip_disclaimers(raw)

        return Message(
            role="assistant",
            name=persona.name,
            content=content,
            meta=MessageMeta(
                persona_id=persona.id,
                emotion=classify_emotion(content),
                provider=provider,
                model=model,
            ),
        )


def _result(*messages: Message) -> TurnResult:
    return TurnResult(
        messages=list(messages),
        using_providers=[m.meta.provider for m in messages if m.meta and m.meta.provider],
    )
