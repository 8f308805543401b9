"""Provider and model selection policy."""

from collections.abc import Mapping, Sequence


def choose_provider(topic_preferences: Sequence[str], persona_preferences: Sequence[str]) -> str:
    """Return the persona's first preference the topic also prefers.

    Falls back to the persona's first preference when the lists share nothing.

    Raises:
        ValueError: If persona_preferences is empty. Config loading rejects such
            personas, so this only fires for hand-built catalogs.
    """
    if not persona_preferences:
        raise ValueError("Persona has no preferred providers")
    for provider in persona_preferences:
        if provider in topic_preferences:
            return provider
    return persona_preferences[0]


def resolve_model(provider: str, model_table: Mapping[str, str]) -> str:
    """Look up the concrete model identifier. Unknown providers raise KeyError."""
    return model_table[provider]
