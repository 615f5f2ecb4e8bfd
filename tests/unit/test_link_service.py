"""Unit tests for the LinkService."""

import pytest

from seen.application.services import LinkService
from seen.domain.entities import VectorRecord
from seen.domain.exceptions import LinkNotFoundError
from seen.domain.identifiers import link_id_for_url
from tests.fakes import DIMENSIONS, FakeBlobStore, FakeLinkRepository, FlakyVectorIndex, make_link


def _records(link_id: str, count: int) -> list[VectorRecord]:
    return [
        VectorRecord(id=f"{link_id}-a1-{i}", link_id=link_id, chunk_index=i, vector=[1.0] * DIMENSIONS)
        for i in range(count)
    ]


class TestLinkService:
    @pytest.fixture
    def stores(self):
        links = FakeLinkRepository()
        vectors = FlakyVectorIndex()
        blobs = FakeBlobStore()
        return links, vectors, blobs, LinkService(links, vectors, blobs)

    @pytest.mark.asyncio
    async def test_delete_removes_row_vectors_and_blob(self, stores):
        links, vectors, blobs, service = stores
        link = make_link("abc", chunk_count=2)
        links.links[link.id] = link
        blobs.blobs[link.bucket_path] = b"<html></html>"
        await vectors.upsert(_records("abc", 2) + _records("other", 1))

        deleted = await service.delete_link("abc")

        assert deleted == link
        assert links.links == {}
        assert blobs.blobs == {}
        assert await vectors.count_by_link("abc") == 0
        assert await vectors.count_by_link("other") == 1

    @pytest.mark.asyncio
    async def test_delete_unknown_link_raises(self, stores):
        *_, service = stores
        with pytest.raises(LinkNotFoundError):
            await service.delete_link("missing")

    @pytest.mark.asyncio
    async def test_delete_survives_vector_index_outage(self, stores):
        links, vectors, blobs, service = stores
        links.links["abc"] = make_link("abc")
        await vectors.upsert(_records("abc", 1))
        vectors.fail_delete = True

        await service.delete_link("abc")

        assert links.links == {}
        # Leftover vectors are orphans: no row references them
        assert await vectors.count_by_link("abc") == 1

    @pytest.mark.asyncio
    async def test_reconcile_reports_counts(self, stores):
        links, vectors, _, service = stores
        links.links["abc"] = make_link("abc", chunk_count=3)
        await vectors.upsert(_records("abc", 3))

        assert await service.reconcile("abc") == (3, 3)

    @pytest.mark.asyncio
    async def test_get_link_by_url_normalizes(self, stores):
        links, _, _, service = stores
        url = "https://example.com/page"
        link = make_link(link_id_for_url(url), url=url)
        links.links[link.id] = link

        assert await service.get_link_by_url("HTTPS://EXAMPLE.com/page#section") == link

    @pytest.mark.asyncio
    async def test_stats_lists_recent_links_newest_first(self, stores):
        links, _, _, service = stores
        for day in range(1, 13):
            link = make_link(f"l{day:02d}", created_at=f"2024-01-{day:02d}T00:00:00+00:00")
            links.links[link.id] = link

        stats = await service.get_stats()

        assert stats.total == 12
        assert len(stats.recent) == 10
        assert stats.recent[0].id == "l12"

    @pytest.mark.asyncio
    async def test_get_link_by_url_finds_content_archived_under_that_url(self, stores):
        links, _, _, service = stores
        link = make_link("content-hash", url="https://example.com/notes")
        links.links[link.id] = link

        assert await service.get_link_by_url("https://EXAMPLE.com/notes/") == link
