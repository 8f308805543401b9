"""Read-only topic and persona catalog with injectable randomness."""

import random
from collections.abc import Sequence

from hypothetica.models import Persona, Topic


class Catalog:
    """Lookup and uniform random selection over the static catalogs.

    Args:
        topics: All known topics.
        personas: All known personas.
        rng: Random source for the pickers. Tests pass a seeded
            ``random.Random`` to get reproducible selections.
    """

    def __init__(
        self,
        topics: Sequence[Topic],
        personas: Sequence[Persona],
        rng: random.Random | None = None,
    ) -> None:
        self._topics = tuple(topics)
        self._personas = tuple(personas)
        self._topics_by_id = {t.id: t for t in self._topics}
        self._personas_by_id = {p.id: p for p in self._personas}
        self._rng = rng if rng is not None else random.Random()

    @property
    def topics(self) -> tuple[Topic, ...]:
        return self._topics

    @property
    def personas(self) -> tuple[Persona, ...]:
        return self._personas

    def get_topic(self, topic_id: str) -> Topic | None:
        return self._topics_by_id.get(topic_id)

    def get_persona(self, persona_id: str) -> Persona | None:
        return self._personas_by_id.get(persona_id)

    def pick_random_topic(self, alignment: str | None = None) -> Topic:
        """Pick a topic of the given alignment, or any topic when alignment is None."""
        pool = [t for t in self._topics if alignment is None or t.alignment == alignment]
        return self._pick(pool, f"topic (alignment={alignment})")

    def pick_persona_by_alignment(self, alignment: str) -> Persona:
        pool = [p for p in self._personas if p.alignment == alignment]
        return self._pick(pool, f"persona (alignment={alignment})")

    def pick_persona_for_topic(self, topic_alignment: str) -> Persona:
        """Neutral topics draw from every persona; others from matching alignment."""
        if topic_alignment == "neutral":
            return self._pick(list(self._personas), "persona")
        return self.pick_persona_by_alignment(topic_alignment)

    def _pick(self, pool: list, what: str):
        if not pool:
            raise LookupError(f"No {what} available in catalog")
        return self._rng.choice(pool)
