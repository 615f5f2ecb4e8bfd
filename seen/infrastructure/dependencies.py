"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from seen.application.interfaces import BlobStore, DocumentOracle, VectorIndex
from seen.application.services import (
    Chunker,
    IngestionService,
    LinkService,
    MessageService,
    RetrievalService,
)
from seen.config import AllowList, get_allow_list, get_settings
from seen.infrastructure.concurrency.keyed_locks import KeyedLocks
from seen.infrastructure.database.repositories import PgVectorIndex, SQLAlchemyLinkRepository
from seen.infrastructure.database.session import async_session_factory
from seen.infrastructure.extractors.multi_format_text_extractor import MultiFormatTextExtractor
from seen.infrastructure.fetch.http_content_fetcher import HttpContentFetcher
from seen.infrastructure.openrouter import (
    OpenRouterClient,
    OpenRouterDocumentOracle,
    OpenRouterEmbeddingProvider,
)
from seen.infrastructure.storage.local_file_storage import LocalFileStorage
from seen.infrastructure.telegram.telegram_client import TelegramClient
from seen.infrastructure.vector.in_memory_vector_index import InMemoryVectorIndex


# ── Process-wide singletons ──────────────────────────────────────────


@lru_cache
def get_keyed_locks() -> KeyedLocks:
    """One lock registry per process, shared by every request."""
    return KeyedLocks()


@lru_cache
def get_blob_store() -> BlobStore:
    return LocalFileStorage(upload_dir=get_settings().upload_dir)


@lru_cache
def get_vector_index() -> VectorIndex:
    """The configured vector backend (``pgvector`` or ``memory``)."""
    settings = get_settings()
    if settings.vector_backend == "memory":
        return InMemoryVectorIndex(
            dimensions=settings.embedding_dimensions,
            blob_store=get_blob_store(),
        )
    if settings.vector_backend == "pgvector":
        return PgVectorIndex(async_session_factory)
    raise ValueError(f"Unknown vector_backend: {settings.vector_backend!r}")


@lru_cache
def get_document_oracle() -> DocumentOracle:
    settings = get_settings()
    chat = OpenRouterClient(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        timeout_seconds=settings.oracle_timeout_seconds,
    )
    embeddings = OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        timeout_seconds=settings.oracle_timeout_seconds,
    )
    return OpenRouterDocumentOracle(
        chat,
        embeddings,
        summary_model=settings.summary_model,
        max_input_chars=settings.oracle_max_input_chars,
        retry_backoff_seconds=settings.oracle_retry_backoff_seconds,
    )


@lru_cache
def get_telegram_client() -> TelegramClient:
    settings = get_settings()
    return TelegramClient(
        bot_token=settings.telegram_bot_token,
        api_base=settings.telegram_api_base,
    )


# ── Request-scoped services ──────────────────────────────────────────


async def get_ingestion_service() -> AsyncGenerator[IngestionService, None]:
    """Provides an IngestionService wired to the configured stores and oracle."""
    settings = get_settings()
    yield IngestionService(
        link_repository=SQLAlchemyLinkRepository(async_session_factory),
        content_fetcher=HttpContentFetcher(
            timeout_seconds=settings.fetch_timeout_seconds,
            max_bytes=settings.max_fetch_bytes,
        ),
        text_extractor=MultiFormatTextExtractor(),
        oracle=get_document_oracle(),
        blob_store=get_blob_store(),
        vector_index=get_vector_index(),
        chunker=Chunker(
            max_chars=settings.chunk_max_chars,
            overlap=settings.chunk_overlap_chars,
        ),
        locks=get_keyed_locks(),
        summary_input_chars=settings.summary_input_chars,
    )


async def get_retrieval_service() -> AsyncGenerator[RetrievalService, None]:
    settings = get_settings()
    yield RetrievalService(
        link_repository=SQLAlchemyLinkRepository(async_session_factory),
        oracle=get_document_oracle(),
        vector_index=get_vector_index(),
        overfetch_factor=settings.search_overfetch_factor,
        min_score=settings.search_min_score or None,
    )


async def get_link_service() -> AsyncGenerator[LinkService, None]:
    yield LinkService(
        link_repository=SQLAlchemyLinkRepository(async_session_factory),
        vector_index=get_vector_index(),
        blob_store=get_blob_store(),
    )


async def get_message_service(
    ingestion: IngestionService = Depends(get_ingestion_service),
    retrieval: RetrievalService = Depends(get_retrieval_service),
    links: LinkService = Depends(get_link_service),
) -> AsyncGenerator[MessageService, None]:
    """Provides the chat front-end service, guarded by the caller allow-list."""
    yield MessageService(
        get_allow_list(),
        ingestion,
        retrieval,
        links,
        top_k=get_settings().search_default_top_k,
    )


# ── Caller authorization ─────────────────────────────────────────────


async def get_caller_id(
    x_caller_id: str | None = Header(default=None),
    allow_list: AllowList = Depends(get_allow_list),
) -> str:
    """Resolve and authorize the REST caller from the ``X-Caller-Id`` header."""
    if not x_caller_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Caller-Id header",
        )
    if not allow_list.allows(x_caller_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Caller '{x_caller_id}' is not authorized",
        )
    return x_caller_id
