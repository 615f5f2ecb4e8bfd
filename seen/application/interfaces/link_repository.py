"""Abstract repository interface (port) for Link metadata."""

from abc import ABC, abstractmethod

from seen.domain.entities import Link


class LinkRepository(ABC):
    """Port for Link persistence in the relational store."""

    @abstractmethod
    async def get_by_id(self, link_id: str) -> Link | None:
        """Retrieve a single link by its id."""
        ...

    @abstractmethod
    async def get_by_url(self, url: str) -> Link | None:
        """Retrieve a link by its stored (normalized) URL."""
        ...

    @abstractmethod
    async def get_many(self, link_ids: list[str]) -> dict[str, Link]:
        """Retrieve several links at once, keyed by id. Missing ids are absent."""
        ...

    @abstractmethod
    async def get_recent(self, limit: int = 10) -> list[Link]:
        """Most recently created links, newest first."""
        ...

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Link]:
        """Paginated links, newest first."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Total number of links."""
        ...

    @abstractmethod
    async def create(self, link: Link) -> Link:
        """Insert a new link.

        Raises:
            DuplicateLinkError: if a row with the same id exists.
            MetadataStoreError: if the store is unavailable.
        """
        ...

    @abstractmethod
    async def delete(self, link_id: str) -> bool:
        """Delete a link row. Returns True if deleted, False if not found."""
        ...
