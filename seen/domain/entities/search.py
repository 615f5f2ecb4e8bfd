"""Domain entity for ranked search results."""

from dataclasses import dataclass

from seen.domain.entities.link import Link


@dataclass(frozen=True)
class SearchHit:
    """A link scored by its best-matching chunk."""

    link: Link
    score: float
    excerpt: str = ""
