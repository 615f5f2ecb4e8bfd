"""Abstract interface (port) for the vector index."""

from abc import ABC, abstractmethod

from seen.domain.entities import VectorMatch, VectorRecord


class VectorIndex(ABC):
    """Port for nearest-neighbour search over chunk embeddings.

    All methods raise ``VectorIndexError`` on backend failure.
    """

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or replace records by id."""
        ...

    @abstractmethod
    async def query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        """Return up to ``top_k`` matches ordered by descending cosine similarity."""
        ...

    @abstractmethod
    async def delete(self, ids: list[str]) -> int:
        """Delete records by id. Returns the number removed."""
        ...

    @abstractmethod
    async def delete_by_link(self, link_id: str) -> int:
        """Delete every record tagged with ``link_id``."""
        ...

    @abstractmethod
    async def count_by_link(self, link_id: str) -> int:
        """Number of records tagged with ``link_id``."""
        ...
