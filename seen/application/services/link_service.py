"""Application service for reading and removing archived links."""

import logging

from seen.application.interfaces import BlobStore, LinkRepository, VectorIndex
from seen.domain.entities import Link, LinkStats
from seen.domain.exceptions import BlobStoreError, LinkNotFoundError, VectorIndexError
from seen.domain.identifiers import link_id_for_url, normalize_url

logger = logging.getLogger(__name__)

_RECENT_LINKS = 10


class LinkService:
    """Lookups, archive statistics, deletion and consistency checks."""

    def __init__(
        self,
        link_repository: LinkRepository,
        vector_index: VectorIndex,
        blob_store: BlobStore,
    ):
        self._links = link_repository
        self._vectors = vector_index
        self._blobs = blob_store

    async def get_link(self, link_id: str) -> Link:
        link = await self._links.get_by_id(link_id)
        if link is None:
            raise LinkNotFoundError(link_id)
        return link

    async def get_link_by_url(self, url: str) -> Link:
        """Find a link by URL, including content archived with that URL as its source."""
        normalized = normalize_url(url)
        link = await self._links.get_by_id(link_id_for_url(normalized))
        if link is None:
            link = await self._links.get_by_url(normalized)
        if link is None:
            raise LinkNotFoundError(url)
        return link

    async def list_links(self, skip: int = 0, limit: int = 100) -> list[Link]:
        return await self._links.get_all(skip=skip, limit=limit)

    async def get_stats(self) -> LinkStats:
        total = await self._links.count()
        recent = await self._links.get_recent(_RECENT_LINKS)
        return LinkStats(total=total, recent=recent)

    async def delete_link(self, link_id: str) -> Link:
        """Remove a link, its vectors and its raw content.

        The row goes first so the link disappears from search immediately;
        vectors or blobs that survive a later failure are inert orphans.
        """
        link = await self.get_link(link_id)
        if not await self._links.delete(link_id):
            raise LinkNotFoundError(link_id)

        try:
            removed = await self._vectors.delete_by_link(link_id)
            logger.info("Deleted link %s and %d vectors", link_id, removed)
        except VectorIndexError as exc:
            logger.warning("Link %s deleted but its vectors remain: %s", link_id, exc)

        try:
            await self._blobs.delete(link.bucket_path)
        except BlobStoreError as exc:
            logger.warning("Link %s deleted but blob %s remains: %s", link_id, link.bucket_path, exc)

        return link

    async def reconcile(self, link_id: str) -> tuple[int, int]:
        """Return ``(chunk_count, indexed_vectors)`` for one link."""
        link = await self.get_link(link_id)
        indexed = await self._vectors.count_by_link(link_id)
        if indexed != link.chunk_count:
            logger.warning(
                "Link %s records %d chunks but the index holds %d vectors",
                link_id,
                link.chunk_count,
                indexed,
            )
        return link.chunk_count, indexed
