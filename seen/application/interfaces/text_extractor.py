"""Abstract interface (port) for text extraction from raw content."""

from abc import ABC, abstractmethod

from seen.domain.entities import ExtractedDocument


class TextExtractor(ABC):
    """Port for text extraction — implemented in the infrastructure layer."""

    @abstractmethod
    async def extract(self, content: bytes, mime_type: str) -> ExtractedDocument:
        """Normalize raw bytes into plain text plus an optional title.

        Must be deterministic for identical input bytes.

        Raises:
            UnsupportedContentTypeError: if no strategy handles ``mime_type``.
        """
        ...

    @abstractmethod
    def supports(self, mime_type: str) -> bool:
        """Check if the extractor supports the given MIME type."""
        ...
