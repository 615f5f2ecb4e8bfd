"""VectorIndex implementation backed by PostgreSQL + pgvector."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seen.application.interfaces import VectorIndex
from seen.domain.entities import VectorMatch, VectorRecord
from seen.domain.exceptions import VectorIndexError
from seen.infrastructure.database.models import LinkVectorModel

logger = logging.getLogger(__name__)


class PgVectorIndex(VectorIndex):
    """Concrete vector index over the ``link_vectors`` table.

    Each call runs in its own session and commits on its own, so vector
    writes are durable before the link row that references them.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def upsert(self, records: list[VectorRecord]) -> None:
        if not records:
            return
        rows = [
            {
                "id": r.id,
                "link_id": r.link_id,
                "chunk_index": r.chunk_index,
                "excerpt": r.excerpt,
                "embedding": r.vector,
            }
            for r in records
        ]
        stmt = insert(LinkVectorModel).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[LinkVectorModel.id],
            set_={
                "link_id": stmt.excluded.link_id,
                "chunk_index": stmt.excluded.chunk_index,
                "excerpt": stmt.excluded.excerpt,
                "embedding": stmt.excluded.embedding,
            },
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Vector upsert failed: {exc}") from exc
        logger.info("Upserted %d vectors for link %s", len(records), records[0].link_id)

    async def query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        """Nearest chunks by cosine similarity (``1 - cosine distance``)."""
        if top_k <= 0:
            return []
        distance = LinkVectorModel.embedding.cosine_distance(vector).label("distance")
        stmt = (
            select(
                LinkVectorModel.id,
                LinkVectorModel.link_id,
                LinkVectorModel.chunk_index,
                LinkVectorModel.excerpt,
                distance,
            )
            .order_by(distance)
            .limit(top_k)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Vector query failed: {exc}") from exc

        return [
            VectorMatch(
                id=row.id,
                score=1.0 - float(row.distance),
                link_id=row.link_id,
                chunk_index=row.chunk_index,
                excerpt=row.excerpt,
            )
            for row in rows
        ]

    async def delete(self, ids: list[str]) -> int:
        if not ids:
            return 0
        return await self._delete_where(LinkVectorModel.id.in_(ids))

    async def delete_by_link(self, link_id: str) -> int:
        return await self._delete_where(LinkVectorModel.link_id == link_id)

    async def count_by_link(self, link_id: str) -> int:
        stmt = select(func.count()).select_from(LinkVectorModel).where(LinkVectorModel.link_id == link_id)
        try:
            async with self._session_factory() as session:
                return int((await session.execute(stmt)).scalar_one())
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Vector count failed: {exc}") from exc

    async def _delete_where(self, condition) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(delete(LinkVectorModel).where(condition))
                await session.commit()
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Vector delete failed: {exc}") from exc
        count = result.rowcount
        if count > 0:
            logger.info("Deleted %d vectors", count)
        return count
