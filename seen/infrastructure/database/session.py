"""SQLAlchemy async engine, session factory and schema bootstrap."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from seen.config import get_settings
from seen.infrastructure.database.base import Base

logger = logging.getLogger(__name__)


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to its async driver form."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def is_postgres(bind: AsyncEngine) -> bool:
    return bind.dialect.name == "postgresql"


settings = get_settings()

engine = create_async_engine(
    _get_async_url(settings.database_url),
    echo=(settings.app_env == "development" and settings.log_level_sql == "DEBUG"),
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_schema(bind: AsyncEngine, *, with_vectors: bool) -> None:
    """Create the ``links`` table and, for the pgvector backend, ``link_vectors``.

    The ``vector`` extension must exist before ``link_vectors`` can be created.
    """
    from seen.infrastructure.database.models import LinkModel, LinkVectorModel

    tables = [LinkModel.__table__]
    async with bind.begin() as conn:
        if with_vectors:
            if not is_postgres(bind):
                raise RuntimeError("The pgvector backend requires a PostgreSQL database_url")
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            tables.append(LinkVectorModel.__table__)
        await conn.run_sync(Base.metadata.create_all, tables=tables)
    logger.info("Schema ready: %s", ", ".join(t.name for t in tables))
