"""Abstract interface (port) for raw content storage."""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Port for keyed byte storage — implemented in the infrastructure layer."""

    @abstractmethod
    async def put(self, key: str, content: bytes, content_type: str) -> None:
        """Write ``content`` under ``key``, replacing any previous value.

        Raises:
            BlobStoreError: if the write fails.
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key`` or None if absent."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False if it did not exist."""
        ...
