"""Intermediate values produced while ingesting a document."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedContent:
    """Raw bytes retrieved from a URL."""

    url: str
    content: bytes
    content_type: str  # raw header value, may carry parameters

    @property
    def mime_type(self) -> str:
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ExtractedDocument:
    """Normalized plain text and an optional title extracted from raw content."""

    text: str
    title: str | None = None


@dataclass(frozen=True)
class DocumentSummary:
    """Oracle-generated title and summary for a whole document."""

    title: str
    summary: str
