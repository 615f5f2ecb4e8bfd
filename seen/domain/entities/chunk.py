"""Domain entity for a chunk — a bounded segment of a document's extracted text."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """A segment of normalized text, the unit of embedding.

    ``start``/``end`` are character offsets into the text the chunk was cut
    from; ``text`` is that slice with surrounding whitespace trimmed.
    """

    index: int
    start: int
    end: int
    text: str

    def __len__(self) -> int:
        return len(self.text)
