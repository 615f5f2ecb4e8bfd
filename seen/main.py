"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seen.config import get_allow_list, get_settings
from seen.infrastructure.database.session import engine, init_schema
from seen.infrastructure.dependencies import get_vector_index
from seen.infrastructure.logging.log_config import setup_logging
from seen.infrastructure.vector.in_memory_vector_index import InMemoryVectorIndex
from seen.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists() -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database and issues
    ``CREATE DATABASE`` when the target is missing. SQLite URLs are skipped.
    """
    from urllib.parse import urlparse

    import asyncpg

    settings = get_settings()
    if not settings.database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        return

    url = settings.database_url.replace("postgresql+asyncpg://", "postgresql://", 1)
    db_name = urlparse(url).path.lstrip("/")
    if not db_name:
        return

    maintenance_url = url.rsplit("/", 1)[0] + "/postgres"
    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — prepare storage, restore the vector index, flush it on shutdown."""
    settings = get_settings()
    setup_logging()

    # 1. Relational store (plus link_vectors for the pgvector backend)
    await _ensure_database_exists()
    await init_schema(engine, with_vectors=settings.vector_backend == "pgvector")

    # 2. Blob store root
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    # 3. Restore the in-process index from its last snapshot
    vector_index = get_vector_index()
    if isinstance(vector_index, InMemoryVectorIndex):
        await vector_index.load()

    logger.info(
        "Seen ready (vector backend=%s, %d authorized callers)",
        settings.vector_backend,
        len(get_allow_list()),
    )

    yield

    # Shutdown
    if isinstance(vector_index, InMemoryVectorIndex):
        await vector_index.save()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seen.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
