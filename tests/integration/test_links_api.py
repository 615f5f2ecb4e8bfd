"""End-to-end tests for the REST and webhook endpoints, wired to in-memory fakes."""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from seen.application.services import (
    Chunker,
    IngestionService,
    LinkService,
    MessageService,
    RetrievalService,
)
from seen.config import AllowList, get_allow_list
from seen.infrastructure.dependencies import (
    get_ingestion_service,
    get_link_service,
    get_message_service,
    get_retrieval_service,
    get_telegram_client,
)
from seen.infrastructure.telegram.telegram_client import TelegramClient
from seen.main import app
from tests.fakes import (
    FakeBlobStore,
    FakeContentFetcher,
    FakeDocumentOracle,
    FakeLinkRepository,
    FakeTextExtractor,
    FlakyVectorIndex,
)

CALLER = {"X-Caller-Id": "1001"}
PAGE_URL = "https://example.com/guide"
PAGES = {
    PAGE_URL: (b"Edge caching guide\n\nCache API responses close to users.", "text/html"),
    "https://example.com/archive.zip": (b"PK\x03\x04", "application/zip"),
}


class Wiring:
    """One set of fakes shared by every dependency override of a test."""

    def __init__(self):
        self.links = FakeLinkRepository()
        self.oracle = FakeDocumentOracle()
        self.vectors = FlakyVectorIndex()
        self.blobs = FakeBlobStore()
        self.fetcher = FakeContentFetcher(PAGES)
        self.allow_list = AllowList.parse("1001")
        self.sent: list[dict] = []

    def ingestion(self) -> IngestionService:
        return IngestionService(
            self.links, self.fetcher, FakeTextExtractor(), self.oracle,
            self.blobs, self.vectors, chunker=Chunker(max_chars=200),
        )

    def retrieval(self) -> RetrievalService:
        return RetrievalService(self.links, self.oracle, self.vectors)

    def link_service(self) -> LinkService:
        return LinkService(self.links, self.vectors, self.blobs)

    def messages(self) -> MessageService:
        return MessageService(self.allow_list, self.ingestion(), self.retrieval(), self.link_service())

    def telegram(self) -> TelegramClient:
        def handler(request: httpx.Request) -> httpx.Response:
            self.sent.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        return TelegramClient(
            bot_token="123:abc",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )


@pytest_asyncio.fixture
async def wired():
    wiring = Wiring()
    app.dependency_overrides[get_allow_list] = lambda: wiring.allow_list
    app.dependency_overrides[get_ingestion_service] = wiring.ingestion
    app.dependency_overrides[get_retrieval_service] = wiring.retrieval
    app.dependency_overrides[get_link_service] = wiring.link_service
    app.dependency_overrides[get_message_service] = wiring.messages
    app.dependency_overrides[get_telegram_client] = wiring.telegram

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, wiring

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_requests_without_an_allowed_caller_are_refused(wired):
    client, wiring = wired

    missing = await client.get("/api/v1/links")
    unknown = await client.get("/api/v1/links", headers={"X-Caller-Id": "9999"})

    assert missing.status_code == 401
    assert unknown.status_code == 403
    assert wiring.fetcher.calls == []


@pytest.mark.asyncio
async def test_ingest_returns_201_then_200_for_the_same_url(wired):
    client, _ = wired

    first = await client.post("/api/v1/links", json={"url": PAGE_URL}, headers=CALLER)
    second = await client.post("/api/v1/links", json={"url": PAGE_URL + "#top"}, headers=CALLER)

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["title"] == "Edge caching guide"


@pytest.mark.asyncio
async def test_pipeline_errors_map_to_status_codes(wired):
    client, _ = wired

    unsupported = await client.post(
        "/api/v1/links", json={"url": "https://example.com/archive.zip"}, headers=CALLER
    )
    not_found = await client.post(
        "/api/v1/links", json={"url": "https://example.com/missing"}, headers=CALLER
    )

    assert unsupported.status_code == 415
    assert unsupported.json()["detail"]["reason"] == "unsupported-content-type"
    assert not_found.status_code == 422
    assert not_found.json()["detail"]["reason"] == "non-2xx"


@pytest.mark.asyncio
async def test_get_reconcile_and_delete_link(wired):
    client, _ = wired
    created = (await client.post("/api/v1/links", json={"url": PAGE_URL}, headers=CALLER)).json()
    link_id = created["id"]

    fetched = await client.get(f"/api/v1/links/{link_id}", headers=CALLER)
    reconcile = await client.get(f"/api/v1/links/{link_id}/reconcile", headers=CALLER)
    deleted = await client.delete(f"/api/v1/links/{link_id}", headers=CALLER)
    gone = await client.get(f"/api/v1/links/{link_id}", headers=CALLER)

    assert fetched.status_code == 200
    assert reconcile.json()["consistent"] is True
    assert reconcile.json()["indexed_vectors"] == created["chunk_count"]
    assert deleted.status_code == 204
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_search_ranks_saved_links(wired):
    client, _ = wired
    await client.post("/api/v1/links", json={"url": PAGE_URL}, headers=CALLER)
    await client.post(
        "/api/v1/links/content",
        json={"content": "Sourdough notes\n\nFeed the starter twice a day.", "content_type": "text/plain"},
        headers=CALLER,
    )

    response = await client.post(
        "/api/v1/search", json={"query": "cache api responses", "top_k": 1}, headers=CALLER
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_hits"] == 1
    assert data["hits"][0]["link"]["url"] == PAGE_URL


@pytest.mark.asyncio
async def test_stats_counts_saved_links(wired):
    client, _ = wired
    await client.post("/api/v1/links", json={"url": PAGE_URL}, headers=CALLER)

    stats = (await client.get("/api/v1/links/stats", headers=CALLER)).json()

    assert stats["total"] == 1
    assert stats["recent"][0]["url"] == PAGE_URL


def _update(chat_id: int, text: str | None) -> dict:
    message = {"message_id": 1, "chat": {"id": chat_id, "type": "private"}}
    if text is not None:
        message["text"] = text
    return {"update_id": 10, "message": message}


@pytest.mark.asyncio
async def test_webhook_replies_to_allowed_chats(wired):
    client, wiring = wired

    response = await client.post("/api/v1/telegram/webhook", json=_update(1001, PAGE_URL))

    assert response.json() == {"ok": True, "handled": True, "delivered": True}
    assert wiring.sent[0]["chat_id"] == 1001
    assert wiring.sent[0]["text"].startswith("✅ Link saved successfully!")


@pytest.mark.asyncio
async def test_webhook_ignores_unknown_chats_and_non_text_updates(wired):
    client, wiring = wired

    stranger = await client.post("/api/v1/telegram/webhook", json=_update(4242, PAGE_URL))
    sticker = await client.post("/api/v1/telegram/webhook", json=_update(1001, None))

    assert stranger.status_code == 200
    assert stranger.json() == {"ok": True, "handled": False}
    assert sticker.json() == {"ok": True, "handled": False}
    assert wiring.sent == []
    assert wiring.fetcher.calls == []
