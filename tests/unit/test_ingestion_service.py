"""Unit tests for the IngestionService pipeline and its commit protocol."""

import asyncio

import pytest

from seen.application.services import Chunker, IngestionService
from seen.domain.exceptions import (
    FetchError,
    MetadataStoreError,
    OracleError,
    UnsupportedContentTypeError,
    VectorIndexError,
)
from seen.domain.identifiers import link_id_for_content, link_id_for_url
from tests.fakes import (
    FakeBlobStore,
    FakeContentFetcher,
    FakeDocumentOracle,
    FakeLinkRepository,
    FakeTextExtractor,
    FlakyVectorIndex,
    make_link,
)

ARTICLE_URL = "https://example.com/articles/cloudflare"
ARTICLE = (
    "Cloudflare Workers tutorial\n\n"
    "Workers run JavaScript at the edge close to your users.\n\n"
    "Durable objects give each worker a small consistent store."
).encode()


class Harness:
    def __init__(self, pages=None, chunk_chars=80, summary_input_chars=24_000):
        self.links = FakeLinkRepository()
        self.fetcher = FakeContentFetcher(pages if pages is not None else {
            ARTICLE_URL: (ARTICLE, "text/html; charset=utf-8"),
        })
        self.oracle = FakeDocumentOracle()
        self.blobs = FakeBlobStore()
        self.vectors = FlakyVectorIndex()
        self.service = IngestionService(
            self.links,
            self.fetcher,
            FakeTextExtractor(),
            self.oracle,
            self.blobs,
            self.vectors,
            chunker=Chunker(max_chars=chunk_chars),
            summary_input_chars=summary_input_chars,
        )

    def assert_nothing_written(self):
        assert self.links.links == {}
        assert len(self.vectors) == 0
        assert self.blobs.blobs == {}


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.mark.asyncio
async def test_ingest_commits_link_with_matching_vectors(harness: Harness):
    result = await harness.service.ingest(ARTICLE_URL, "42")

    link = result.link
    assert result.created is True
    assert link.id == link_id_for_url(ARTICLE_URL)
    assert link.title == "Cloudflare Workers tutorial"
    assert link.content_type == "text/html; charset=utf-8"
    assert link.size == len(ARTICLE)
    assert link.chunk_count > 1
    assert await harness.vectors.count_by_link(link.id) == link.chunk_count
    assert harness.blobs.blobs[link.bucket_path] == ARTICLE
    assert link.bucket_path == f"content/{link.id}.html"


@pytest.mark.asyncio
async def test_resubmitting_same_url_is_idempotent(harness: Harness):
    first = await harness.service.ingest(ARTICLE_URL)
    vectors_after_first = len(harness.vectors)

    second = await harness.service.ingest("HTTPS://Example.com:443/articles/cloudflare/#top")

    assert second.created is False
    assert second.link == first.link
    assert len(harness.links.links) == 1
    assert len(harness.vectors) == vectors_after_first
    assert harness.fetcher.calls == [first.link.url]
    assert harness.oracle.summarize_calls == 1


@pytest.mark.asyncio
async def test_concurrent_ingestion_of_same_url_fetches_once(harness: Harness):
    results = await asyncio.gather(*(harness.service.ingest(ARTICLE_URL) for _ in range(5)))

    assert sum(r.created for r in results) == 1
    assert len({r.link_id for r in results}) == 1
    assert len(harness.fetcher.calls) == 1
    assert len(harness.vectors) == results[0].link.chunk_count


@pytest.mark.asyncio
async def test_losing_duplicate_race_adopts_winner_and_discards_own_vectors(harness: Harness):
    link_id = link_id_for_url(ARTICLE_URL)
    winner = make_link(link_id, url=ARTICLE_URL, title="Committed elsewhere", chunk_count=0)

    async def concurrent_commit(_):
        harness.links.links[link_id] = winner

    harness.links.before_create = concurrent_commit

    result = await harness.service.ingest(ARTICLE_URL)

    assert result.created is False
    assert result.link == winner
    assert await harness.vectors.count_by_link(link_id) == 0


@pytest.mark.asyncio
async def test_too_large_fetch_writes_nothing(harness: Harness):
    harness.fetcher.error = FetchError("too-large", "Response exceeds 20 MB")

    with pytest.raises(FetchError) as exc_info:
        await harness.service.ingest(ARTICLE_URL)

    assert exc_info.value.reason == "too-large"
    harness.assert_nothing_written()


@pytest.mark.asyncio
async def test_unsupported_content_type_writes_nothing():
    harness = Harness(pages={"https://example.com/app.zip": (b"PK\x03\x04", "application/zip")})

    with pytest.raises(UnsupportedContentTypeError):
        await harness.service.ingest("https://example.com/app.zip")

    harness.assert_nothing_written()
    assert harness.oracle.summarize_calls == 0


@pytest.mark.asyncio
async def test_oracle_failure_writes_nothing(harness: Harness):
    harness.oracle.error = OracleError("quota", "Insufficient credits", status_code=402)

    with pytest.raises(OracleError):
        await harness.service.ingest(ARTICLE_URL)

    harness.assert_nothing_written()


@pytest.mark.asyncio
async def test_vector_upsert_failure_leaves_no_link(harness: Harness):
    harness.vectors.fail_upsert = True

    with pytest.raises(VectorIndexError):
        await harness.service.ingest(ARTICLE_URL)

    assert harness.links.links == {}
    assert len(harness.vectors) == 0


@pytest.mark.asyncio
async def test_commit_failure_discards_attempt_vectors(harness: Harness):
    harness.links.fail_create = MetadataStoreError("database is locked")

    with pytest.raises(MetadataStoreError):
        await harness.service.ingest(ARTICLE_URL)

    assert harness.links.links == {}
    assert len(harness.vectors) == 0


@pytest.mark.asyncio
async def test_image_without_text_is_archived_with_zero_chunks():
    url = "https://example.com/media/diagram.png"
    harness = Harness(pages={url: (b"\x89PNG\r\n", "image/png")})

    result = await harness.service.ingest(url)

    assert result.created is True
    assert result.link.chunk_count == 0
    assert result.link.title == "diagram.png"
    assert result.link.bucket_path.endswith(".png")
    assert harness.oracle.summarize_calls == 0
    assert harness.oracle.embed_calls == 0
    assert await harness.vectors.count_by_link(result.link_id) == 0


@pytest.mark.asyncio
async def test_ingest_content_is_keyed_by_bytes(harness: Harness):
    body = b"Meeting notes\n\nShip the archive bot on Friday."

    first = await harness.service.ingest_content(body, "text/plain")
    second = await harness.service.ingest_content(body, "text/plain")

    assert first.created is True
    assert second.created is False
    assert first.link_id == link_id_for_content(body)
    assert first.link.url == f"content:{first.link_id}"
    assert harness.fetcher.calls == []


@pytest.mark.asyncio
async def test_summary_input_is_bounded():
    long_text = ("word " * 10_000).encode()
    url = "https://example.com/long"
    harness = Harness(pages={url: (long_text, "text/plain")}, chunk_chars=1000, summary_input_chars=2000)
    seen_lengths = []
    original = harness.oracle.summarize

    async def recording_summarize(text):
        seen_lengths.append(len(text))
        return await original(text)

    harness.oracle.summarize = recording_summarize
    await harness.service.ingest(url)

    assert seen_lengths == [2000]


@pytest.mark.asyncio
async def test_non_http_url_is_rejected_before_fetching(harness: Harness):
    with pytest.raises(FetchError) as exc_info:
        await harness.service.ingest("ftp://example.com/file.txt")

    assert exc_info.value.reason == "unsupported-scheme"
    assert harness.fetcher.calls == []


@pytest.mark.asyncio
async def test_content_with_source_url_dedups_later_url_ingest(harness: Harness):
    notes = b"Cloudflare notes\n\nCopied from the article."

    saved = await harness.service.ingest_content(notes, "text/plain", source_url=ARTICLE_URL + "#intro")
    again = await harness.service.ingest(ARTICLE_URL)

    assert saved.created is True
    assert saved.link.url == ARTICLE_URL
    assert again.created is False
    assert again.link == saved.link
    assert harness.fetcher.calls == []
    assert len(harness.links.links) == 1


@pytest.mark.asyncio
async def test_content_for_an_already_archived_url_returns_the_existing_link(harness: Harness):
    first = await harness.service.ingest(ARTICLE_URL)

    second = await harness.service.ingest_content(b"other bytes", "text/plain", source_url=ARTICLE_URL)

    assert second.created is False
    assert second.link == first.link
    assert len(harness.links.links) == 1
