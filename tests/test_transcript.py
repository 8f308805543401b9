"""Tests for hypothetica/transcript.py."""

import json
from pathlib import Path

import pytest

from hypothetica.models import Message, MessageMeta
from hypothetica.transcript import (
    Transcript,
    load_transcript,
    message_from_dict,
    message_to_dict,
    save_transcript,
)


@pytest.fixture
def transcript() -> Transcript:
    return Transcript(
        mode="participant",
        topic_id="D1",
        dark_persona_id="cynic",
        messages=[
            Message(role="user", content="Does power corrupt?"),
            Message(
                role="assistant",
                name="The Cynic",
                content="Power only reveals.",
                meta=MessageMeta(persona_id="cynic", emotion="wry", provider="Grok", model="x-ai/grok-3"),
            ),
        ],
    )


def test_message_to_dict_uses_camel_case_meta():
    message = Message(
        role="assistant",
        name="The Machine",
        content="Logic.",
        meta=MessageMeta(persona_id="machine", emotion="analytical", provider="Gemini", model="gemini-1.5-pro"),
    )
    assert message_to_dict(message) == {
        "role": "assistant",
        "content": "Logic.",
        "name": "The Machine",
        "meta": {"personaId": "machine", "emotion": "analytical", "provider": "Gemini", "model": "gemini-1.5-pro"},
    }


def test_message_to_dict_omits_missing_fields():
    assert message_to_dict(Message(role="user", content="Hi")) == {"role": "user", "content": "Hi"}


def test_message_from_dict_invalid_role():
    with pytest.raises(ValueError, match="Invalid message role"):
        message_from_dict({"role": "narrator", "content": "Once upon a time"})


def test_message_from_dict_partial_meta():
    message = message_from_dict({"role": "assistant", "content": "x", "meta": {"personaId": "empath"}})
    assert message.meta == MessageMeta(persona_id="empath")


def test_save_creates_parent_dirs(tmp_path: Path, transcript: Transcript):
    path = save_transcript(transcript, tmp_path / "nested" / "chat.json")
    assert path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["topicId"] == "D1"
    assert data["darkPersonaId"] == "cynic"
    assert data["brightPersonaId"] is None
    assert len(data["history"]) == 2


def test_save_then_load_preserves_transcript(tmp_path: Path, transcript: Transcript):
    path = save_transcript(transcript, tmp_path / "chat.json")
    assert load_transcript(path) == transcript


def test_load_keeps_non_ascii(tmp_path: Path):
    path = tmp_path / "chat.json"
    path.write_text(
        json.dumps({"mode": "observer", "topicId": "N1", "history": [{"role": "user", "content": "…silence…"}]}),
        encoding="utf-8",
    )
    loaded = load_transcript(path)
    assert loaded.messages[0].content == "…silence…"
    assert loaded.bright_persona_id is None
