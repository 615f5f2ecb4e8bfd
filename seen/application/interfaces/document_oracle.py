"""Abstract interface (port) for the external summarisation/embedding oracle."""

from abc import ABC, abstractmethod

from seen.domain.entities import DocumentSummary


class DocumentOracle(ABC):
    """Capability interface over the AI oracle.

    Every failure surfaces as ``OracleError``; implementations retry only
    rate-limited calls, once, with backoff.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Dimensionality of every vector returned by ``embed``/``embed_query``."""
        ...

    @abstractmethod
    async def summarize(self, text: str) -> DocumentSummary:
        """Title and summary for a whole document."""
        ...

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """One vector per text, in input order."""
        ...

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Vector for a search query, in the same space as ``embed``."""
        ...
