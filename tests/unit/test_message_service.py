"""Unit tests for the chat front-end MessageService."""

import pytest

from seen.application.services import (
    Chunker,
    IngestionService,
    LinkService,
    MessageService,
    RetrievalService,
)
from seen.application.services.message_service import HELP_TEXT, START_TEXT, UNKNOWN_TEXT
from seen.config import AllowList
from seen.domain.exceptions import AuthorizationError
from tests.fakes import (
    FakeBlobStore,
    FakeContentFetcher,
    FakeDocumentOracle,
    FakeLinkRepository,
    FakeTextExtractor,
    FlakyVectorIndex,
)

PAGE_URL = "https://example.com/post"
PAGE = b"Edge caching guide\n\nHow to cache API responses at the edge."


class RecordingIngestionService(IngestionService):
    """Counts calls so tests can prove the orchestrator was never reached."""

    calls = 0

    async def ingest(self, url, caller=None):
        type(self).calls += 1
        return await super().ingest(url, caller)


@pytest.fixture
def service() -> MessageService:
    RecordingIngestionService.calls = 0
    links = FakeLinkRepository()
    oracle = FakeDocumentOracle()
    vectors = FlakyVectorIndex()
    blobs = FakeBlobStore()
    fetcher = FakeContentFetcher({PAGE_URL: (PAGE, "text/html")})
    ingestion = RecordingIngestionService(
        links, fetcher, FakeTextExtractor(), oracle, blobs, vectors, chunker=Chunker(max_chars=200)
    )
    return MessageService(
        AllowList.parse("1001, 1002"),
        ingestion,
        RetrievalService(links, oracle, vectors),
        LinkService(links, vectors, blobs),
    )


@pytest.mark.asyncio
async def test_unauthorized_caller_is_rejected_before_any_work(service: MessageService):
    with pytest.raises(AuthorizationError):
        await service.handle(9999, PAGE_URL)

    assert RecordingIngestionService.calls == 0


@pytest.mark.asyncio
async def test_static_commands(service: MessageService):
    assert await service.handle(1001, "/start") == START_TEXT
    assert await service.handle(1001, "/help") == HELP_TEXT
    assert await service.handle("1002", "hello there") == UNKNOWN_TEXT


@pytest.mark.asyncio
async def test_url_is_saved_then_reported_as_known(service: MessageService):
    first = await service.handle(1001, PAGE_URL)
    second = await service.handle(1001, PAGE_URL)

    assert first.startswith("✅ Link saved successfully!")
    assert "Title: Edge caching guide" in first
    assert second.startswith("ℹ️ Link already saved.")


@pytest.mark.asyncio
async def test_search_and_list_after_saving(service: MessageService):
    await service.handle(1001, PAGE_URL)

    results = await service.handle(1001, "/search caching api responses")
    listing = await service.handle(1001, "/list")

    assert "Edge caching guide" in results
    assert PAGE_URL in results
    assert listing.startswith("Total links saved: 1")


@pytest.mark.asyncio
async def test_delete_command_removes_link(service: MessageService):
    await service.handle(1001, PAGE_URL)

    reply = await service.handle(1001, f"/delete {PAGE_URL}")
    listing = await service.handle(1001, "/list")

    assert reply == f"🗑️ Deleted {PAGE_URL}"
    assert "No links saved yet." in listing


@pytest.mark.asyncio
async def test_pipeline_errors_are_rendered_for_the_user(service: MessageService):
    reply = await service.handle(1001, "https://example.com/missing")

    assert reply.startswith("⚠️ ")
    assert "404" in reply


@pytest.mark.asyncio
async def test_commands_without_arguments_prompt_for_one(service: MessageService):
    assert "search query" in await service.handle(1001, "/search")
    assert "link to delete" in await service.handle(1001, "/delete   ")
