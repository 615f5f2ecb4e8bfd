"""Ingestion service — turns a URL (or submitted content) into a searchable Link.

Pipeline: Dedup → Fetch → Extract → Chunk → Summarize/Embed → Blob → Vectors → Commit

Vectors are written before the Link row. A crash between the two leaves
orphaned vectors that retrieval ignores; it never leaves a visible Link whose
chunks are missing from the index.
"""

import logging
import uuid
from dataclasses import dataclass
from urllib.parse import urlsplit

from seen.application.interfaces import (
    BlobStore,
    ContentFetcher,
    DocumentOracle,
    LinkRepository,
    TextExtractor,
    VectorIndex,
)
from seen.application.services.chunker import Chunker
from seen.domain.entities import (
    Chunk,
    DocumentSummary,
    ExtractedDocument,
    FetchedContent,
    Link,
    VectorRecord,
)
from seen.domain.exceptions import DuplicateLinkError, OracleError, VectorIndexError
from seen.domain.identifiers import (
    bucket_path_for,
    link_id_for_content,
    link_id_for_url,
    normalize_url,
    vector_id_for,
)
from seen.infrastructure.concurrency.keyed_locks import KeyedLocks
from seen.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("IngestionService")

_MAX_BATCH_SIZE = 50  # Max texts per embedding API call
_DEFAULT_SUMMARY_INPUT_CHARS = 24_000
_EXCERPT_CHARS = 300


@dataclass(frozen=True)
class IngestionResult:
    """The committed (or pre-existing) link and whether this call created it."""

    link: Link
    created: bool

    @property
    def link_id(self) -> str:
        return self.link.id


class IngestionService:
    """Application service that sequences the ingestion pipeline and its commit protocol."""

    def __init__(
        self,
        link_repository: LinkRepository,
        content_fetcher: ContentFetcher,
        text_extractor: TextExtractor,
        oracle: DocumentOracle,
        blob_store: BlobStore,
        vector_index: VectorIndex,
        *,
        chunker: Chunker | None = None,
        locks: KeyedLocks | None = None,
        summary_input_chars: int = _DEFAULT_SUMMARY_INPUT_CHARS,
        embed_batch_size: int = _MAX_BATCH_SIZE,
    ):
        self._links = link_repository
        self._fetcher = content_fetcher
        self._extractor = text_extractor
        self._oracle = oracle
        self._blobs = blob_store
        self._vectors = vector_index
        self._chunker = chunker or Chunker()
        self._locks = locks or KeyedLocks()
        self._summary_input_chars = summary_input_chars
        self._embed_batch_size = max(1, embed_batch_size)

    # ── Entry points ─────────────────────────────────────────────────

    async def ingest(self, url: str, caller: str | None = None) -> IngestionResult:
        """Archive the page behind ``url``. Resubmitting a known URL returns the stored link."""
        normalized = normalize_url(url)
        link_id = link_id_for_url(normalized)
        plog.separator(f"Ingesting: {normalized}")
        plog.step_start(PipelineStage.DEDUP, "Checking archive", link_id=link_id, caller=caller)

        existing = await self._find_existing(link_id, normalized)
        if existing is not None:
            plog.step_complete(PipelineStage.DEDUP, "Already archived", link_id=existing.id)
            return IngestionResult(link=existing, created=False)

        async with self._locks.hold(link_id):
            # Another task may have committed while we waited for the lock
            existing = await self._find_existing(link_id, normalized)
            if existing is not None:
                plog.step_complete(PipelineStage.DEDUP, "Archived by a concurrent request", link_id=existing.id)
                return IngestionResult(link=existing, created=False)

            with plog.timed_step(PipelineStage.FETCH, f"Fetching {normalized}"):
                fetched = await self._fetcher.fetch(normalized)
            plog.detail("Fetched", content_type=fetched.content_type, size_bytes=fetched.size)

            return await self._process(link_id, fetched)

    async def ingest_content(
        self,
        content: bytes,
        content_type: str,
        caller: str | None = None,
        source_url: str | None = None,
    ) -> IngestionResult:
        """Archive directly submitted content (e.g. a chat attachment).

        With a ``source_url`` the content also counts as that URL's copy: a
        later ``ingest`` of the URL returns this link instead of fetching.
        """
        link_id = link_id_for_content(content)
        url = normalize_url(source_url) if source_url else f"content:{link_id}"
        # Serialize with ingest() of the same URL
        lock_key = link_id_for_url(url) if source_url else link_id
        plog.separator(f"Ingesting content: {url}")
        plog.step_start(PipelineStage.DEDUP, "Checking archive", link_id=link_id, caller=caller)

        async with self._locks.hold(lock_key):
            existing = await self._find_existing(link_id, url if source_url else None)
            if existing is not None:
                plog.step_complete(PipelineStage.DEDUP, "Already archived", link_id=existing.id)
                return IngestionResult(link=existing, created=False)

            fetched = FetchedContent(url=url, content=content, content_type=content_type)
            return await self._process(link_id, fetched)

    async def _find_existing(self, link_id: str, url: str | None) -> Link | None:
        """Look a link up by id, then by its stored URL."""
        existing = await self._links.get_by_id(link_id)
        if existing is None and url is not None:
            existing = await self._links.get_by_url(url)
        return existing

    # ── Pipeline ─────────────────────────────────────────────────────

    async def _process(self, link_id: str, fetched: FetchedContent) -> IngestionResult:
        with plog.timed_step(PipelineStage.EXTRACT, "Extracting text", mime_type=fetched.mime_type):
            extracted = await self._extractor.extract(fetched.content, fetched.mime_type)

        chunks = self._chunker.split(extracted.text)
        plog.step_complete(
            PipelineStage.CHUNK, "Chunked text",
            characters=len(extracted.text), chunks=len(chunks),
        )

        summary, embeddings = await self._analyze(fetched.url, extracted, chunks)

        bucket_path = bucket_path_for(link_id, fetched.content_type)
        with plog.timed_step(PipelineStage.BLOB, "Storing raw content", path=bucket_path):
            await self._blobs.put(bucket_path, fetched.content, fetched.content_type)

        attempt = uuid.uuid4().hex[:8]
        records = [
            VectorRecord(
                id=vector_id_for(link_id, attempt, chunk.index),
                link_id=link_id,
                chunk_index=chunk.index,
                vector=vector,
                excerpt=chunk.text[:_EXCERPT_CHARS],
            )
            for chunk, vector in zip(chunks, embeddings, strict=True)
        ]
        if records:
            with plog.timed_step(PipelineStage.VECTORS, f"Upserting {len(records)} vectors", attempt=attempt):
                try:
                    await self._vectors.upsert(records)
                except VectorIndexError:
                    await self._discard(records)
                    raise

        link = Link(
            id=link_id,
            url=fetched.url,
            bucket_path=bucket_path,
            content_type=fetched.content_type,
            size=fetched.size,
            title=summary.title,
            summary=summary.summary,
            chunk_count=len(records),
        )
        return await self._commit(link, records)

    async def _analyze(
        self, url: str, extracted: ExtractedDocument, chunks: list[Chunk]
    ) -> tuple[DocumentSummary, list[list[float]]]:
        """Ask the oracle for a title/summary and one vector per chunk, in chunk order."""
        if not extracted.text.strip():
            title = extracted.title or _title_from_url(url)
            plog.detail("No text to summarize — skipping oracle", title=title)
            return DocumentSummary(title=title, summary=""), []

        with plog.timed_step(PipelineStage.ORACLE, "Summarizing document"):
            summary = await self._oracle.summarize(extracted.text[: self._summary_input_chars])
        if not summary.title and extracted.title:
            summary = DocumentSummary(title=extracted.title, summary=summary.summary)

        embeddings: list[list[float]] = []
        if chunks:
            with plog.timed_step(PipelineStage.ORACLE, f"Embedding {len(chunks)} chunks"):
                texts = [c.text for c in chunks]
                for batch_start in range(0, len(texts), self._embed_batch_size):
                    batch = texts[batch_start : batch_start + self._embed_batch_size]
                    embeddings.extend(await self._oracle.embed(batch))

        if len(embeddings) != len(chunks):
            raise OracleError(
                "malformed-response",
                f"Oracle returned {len(embeddings)} vectors for {len(chunks)} chunks",
            )
        return summary, embeddings

    async def _commit(self, link: Link, records: list[VectorRecord]) -> IngestionResult:
        """Insert the Link row. Only after this does the document become searchable."""
        plog.step_start(PipelineStage.COMMIT, "Committing link", link_id=link.id, chunk_count=link.chunk_count)
        try:
            created = await self._links.create(link)
        except DuplicateLinkError:
            # Lost a race to another ingestion of the same id: adopt the winner
            await self._discard(records)
            winner = await self._links.get_by_id(link.id)
            if winner is None:
                raise
            plog.step_complete(PipelineStage.COMMIT, "Adopted concurrently committed link", link_id=winner.id)
            return IngestionResult(link=winner, created=False)
        except Exception as exc:
            plog.step_error(PipelineStage.COMMIT, "Commit failed — discarding vectors", error=exc)
            await self._discard(records)
            raise

        plog.step_complete(
            PipelineStage.COMPLETE, f"Archived '{created.title}'",
            link_id=created.id, chunks=created.chunk_count,
        )
        return IngestionResult(link=created, created=True)

    async def _discard(self, records: list[VectorRecord]) -> None:
        """Best-effort removal of this attempt's vectors; failures leave inert orphans."""
        if not records:
            return
        try:
            removed = await self._vectors.delete([r.id for r in records])
            plog.detail("Discarded attempt vectors", removed=removed)
        except VectorIndexError as exc:
            logger.warning(
                "Could not discard %d vectors for link %s; leaving orphans: %s",
                len(records),
                records[0].link_id,
                exc,
            )


def _title_from_url(url: str) -> str:
    """Fallback title: last path segment, or the host."""
    parts = urlsplit(url)
    segments = [s for s in parts.path.split("/") if s]
    if segments:
        return segments[-1]
    return parts.netloc or url
