"""Post-processing of raw model text: disclaimer stripping and emotion tagging."""

import re

# Applied in order. "speaking as an ai" must run before the bare "as an ai" rule
# so the leading verb is removed with it.
_DISCLAIMER_RULES: list[re.Pattern[str]] = [
    re.compile(r"\bspeaking as an ai\b[\s,]*", re.IGNORECASE),
    re.compile(r"\bas an ai(\s+language model)?\b[\s,]*", re.IGNORECASE),
    re.compile(r"\bas an artificial intelligence\b[\s,]*", re.IGNORECASE),
    re.compile(r"\bas a (large )?language model\b[\s,]*", re.IGNORECASE),
    re.compile(r"\bi(['’]m| am) (just |only )?an ai\b[\s,.]*", re.IGNORECASE),
    re.compile(
        r"\bi (don['’]t|do not|can['’]t|cannot) (actually |really )?have (real |personal )?"
        r"(feelings|emotions|consciousness)\b[\s,.]*",
        re.IGNORECASE,
    ),
    re.compile(r"\bi (should|must) (note|mention|clarify|remind you) that\b", re.IGNORECASE),
    re.compile(r"\bit['’]?s important to (note|remember|understand) that\b", re.IGNORECASE),
    re.compile(r"\bfrom an ai('s)? perspective\b[\s,]*", re.IGNORECASE),
]

_WHITESPACE = re.compile(r"\s+")
_LEADING_PUNCTUATION = re.compile(r"^[\s,.:;]+")

_EMOTION_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(never|must not|refuse|reject|impossible)\b", re.IGNORECASE), "defiant"),
    (re.compile(r"\b(love|care|heart|feel|compassion|kindness)\b", re.IGNORECASE), "tender"),
    (re.compile(r"\b(wonder|awe|magnificent|transcend|infinite)\b", re.IGNORECASE), "awe"),
    (re.compile(r"\b(loss|fade|decay|ending|forgotten|void)\b", re.IGNORECASE), "melancholy"),
    (re.compile(r"\b(data|evidence|logic|calculate|analyze|objective)\b", re.IGNORECASE), "analytical"),
    (re.compile(r"\b(ironic|amusing|absurd|pretend|illusion)\b", re.IGNORECASE), "wry"),
]

NEUTRAL_EMOTION = "neutral"


def _strip_once(text: str) -> str:
    for pattern in _DISCLAIMER_RULES:
        text = pattern.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return _LEADING_PUNCTUATION.sub("", text)


def strip_disclaimers(raw: str) -> str:
    """Remove AI self-disclosure phrasing and normalize whitespace.

    Removing one phrase can splice the text around it into a new match, so the
    pass is repeated until the text stops changing. Every pass that changes the
    text shortens it (or only rewrites whitespace once), so this terminates.
    """
    text = raw
    while True:
        cleaned = _strip_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def classify_emotion(text: str) -> str:
    """Return the tag of the first matching rule, or "neutral".

    Rules are a priority list, not a score: text with both "refuse" and "love"
    is defiant.
    """
    for pattern, emotion in _EMOTION_RULES:
        if pattern.search(text):
            return emotion
    return NEUTRAL_EMOTION
