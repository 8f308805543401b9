"""JSON transcripts: the history a caller resends to continue a conversation."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hypothetica.models import ROLES, Message, MessageMeta

logger = logging.getLogger(__name__)


@dataclass
class Transcript:
    mode: str
    topic_id: str
    bright_persona_id: str | None = None
    dark_persona_id: str | None = None
    messages: list[Message] = field(default_factory=list)


def message_to_dict(message: Message) -> dict[str, Any]:
    data: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.name:
        data["name"] = message.name
    if message.meta:
        meta = {
            "personaId": message.meta.persona_id,
            "emotion": message.meta.emotion,
            "provider": message.meta.provider,
            "model": message.meta.model,
        }
        data["meta"] = {k: v for k, v in meta.items() if v is not None}
    return data


def message_from_dict(data: dict[str, Any]) -> Message:
    """Parse one history entry. Raises ValueError on an unknown role."""
    role = data.get("role")
    if role not in ROLES:
        raise ValueError(f"Invalid message role: {role!r}")
    meta_raw = data.get("meta")
    meta = None
    if meta_raw:
        meta = MessageMeta(
            persona_id=meta_raw.get("personaId"),
            emotion=meta_raw.get("emotion"),
            provider=meta_raw.get("provider"),
            model=meta_raw.get("model"),
        )
    return Message(role=role, content=str(data.get("content", "")), name=data.get("name"), meta=meta)


def save_transcript(transcript: Transcript, path: Path) -> Path:
    """Write the transcript as JSON, creating parent directories. Returns path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "mode": transcript.mode,
        "topicId": transcript.topic_id,
        "brightPersonaId": transcript.bright_persona_id,
        "darkPersonaId": transcript.dark_persona_id,
        "history": [message_to_dict(m) for m in transcript.messages],
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Transcript saved to: %s", path)
    return path


def load_transcript(path: Path) -> Transcript:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return Transcript(
        mode=raw["mode"],
        topic_id=raw["topicId"],
        bright_persona_id=raw.get("brightPersonaId"),
        dark_persona_id=raw.get("darkPersonaId"),
        messages=[message_from_dict(m) for m in raw.get("history", [])],
    )
