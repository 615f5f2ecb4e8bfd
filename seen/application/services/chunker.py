"""Chunker — splits normalized text into bounded, ordered segments for embedding.

Splits on paragraph breaks first, then lines, sentences and words, and only
hard-cuts a segment when no separator is left. Adjacent pieces are merged
back together up to ``max_chars`` so chunks stay close to the bound.
"""

from seen.domain.entities import Chunk

# ── Chunking constants ──────────────────────────────────────────────
_DEFAULT_CHUNK_SIZE = 1200  # ~300 tokens (rough 4:1 char-to-token ratio)
_DEFAULT_CHUNK_OVERLAP = 0
_SEPARATORS = ("\n\n", "\n", ". ", " ")


class Chunker:
    """Deterministic recursive character splitter with character offsets."""

    def __init__(
        self,
        max_chars: int = _DEFAULT_CHUNK_SIZE,
        overlap: int = _DEFAULT_CHUNK_OVERLAP,
    ):
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        if not 0 <= overlap < max_chars:
            raise ValueError("overlap must be in [0, max_chars)")
        self._max_chars = max_chars
        self._overlap = overlap

    @property
    def max_chars(self) -> int:
        return self._max_chars

    def split(self, text: str) -> list[Chunk]:
        """Split text into chunks of at most ``max_chars`` characters, in order."""
        if not text or not text.strip():
            return []

        spans: list[tuple[int, int]] = []
        self._segment(text, 0, len(text), 0, spans)

        chunks: list[Chunk] = []
        for start, end in self._merge(spans):
            chunk = self._make_chunk(text, start, end, len(chunks))
            if chunk is not None:
                chunks.append(chunk)
        return chunks

    # ── Internals ────────────────────────────────────────────────────

    def _segment(
        self, text: str, start: int, end: int, level: int, spans: list[tuple[int, int]]
    ) -> None:
        """Cut [start, end) into contiguous spans no longer than max_chars."""
        if end - start <= self._max_chars:
            spans.append((start, end))
            return

        if level >= len(_SEPARATORS):
            for cut in range(start, end, self._max_chars):
                spans.append((cut, min(cut + self._max_chars, end)))
            return

        sep = _SEPARATORS[level]
        piece_start = start
        pos = text.find(sep, start, end)
        if pos == -1:
            self._segment(text, start, end, level + 1, spans)
            return

        while pos != -1:
            piece_end = pos + len(sep)  # separator stays with the preceding piece
            self._segment(text, piece_start, piece_end, level + 1, spans)
            piece_start = piece_end
            pos = text.find(sep, piece_start, end)
        if piece_start < end:
            self._segment(text, piece_start, end, level + 1, spans)

    def _merge(self, spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
        """Greedily join adjacent spans while the result fits in max_chars."""
        merged: list[tuple[int, int]] = []
        if not spans:
            return merged

        current_start, current_end = spans[0]
        for start, end in spans[1:]:
            if end - current_start <= self._max_chars:
                current_end = end
                continue
            merged.append((current_start, current_end))
            # Overlap: reach back into the previous chunk without exceeding the bound
            current_start = max(start - self._overlap, end - self._max_chars, current_start)
            current_end = end
        merged.append((current_start, current_end))
        return merged

    @staticmethod
    def _make_chunk(text: str, start: int, end: int, index: int) -> Chunk | None:
        """Trim surrounding whitespace, adjusting offsets. Blank spans yield None."""
        while start < end and text[start].isspace():
            start += 1
        while end > start and text[end - 1].isspace():
            end -= 1
        if start >= end:
            return None
        return Chunk(index=index, start=start, end=end, text=text[start:end])
