"""Concrete Link repository backed by SQLAlchemy."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seen.application.interfaces import LinkRepository
from seen.domain.entities import Link
from seen.domain.exceptions import DuplicateLinkError, MetadataStoreError
from seen.infrastructure.database.models import LinkModel

logger = logging.getLogger(__name__)


class SQLAlchemyLinkRepository(LinkRepository):
    """Implements the LinkRepository port using SQLAlchemy async sessions.

    Every call opens its own short session, so no pooled connection is held
    while an ingestion waits on the network. ``create`` commits immediately:
    the committed row is what makes a link visible to retrieval.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def _to_entity(self, model: LinkModel) -> Link:
        """Map ORM model → domain entity."""
        return Link(
            id=model.id,
            url=model.url,
            bucket_path=model.bucket_path,
            content_type=model.content_type,
            size=model.size,
            title=model.title,
            summary=model.summary,
            chunk_count=model.chunk_count,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Link) -> LinkModel:
        """Map domain entity → ORM model (for creation)."""
        return LinkModel(
            id=entity.id,
            url=entity.url,
            created_at=entity.created_at,
            bucket_path=entity.bucket_path,
            content_type=entity.content_type,
            size=entity.size,
            title=entity.title,
            summary=entity.summary,
            chunk_count=entity.chunk_count,
        )

    async def get_by_id(self, link_id: str) -> Link | None:
        try:
            async with self._session_factory() as session:
                result = await session.get(LinkModel, link_id)
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Could not load link {link_id}: {exc}") from exc
        return self._to_entity(result) if result else None

    async def get_by_url(self, url: str) -> Link | None:
        stmt = (
            select(LinkModel)
            .where(LinkModel.url == url)
            .order_by(LinkModel.created_at, LinkModel.id)
            .limit(1)
        )
        models = await self._scalars(stmt)
        return self._to_entity(models[0]) if models else None

    async def get_many(self, link_ids: list[str]) -> dict[str, Link]:
        if not link_ids:
            return {}
        stmt = select(LinkModel).where(LinkModel.id.in_(link_ids))
        return {model.id: self._to_entity(model) for model in await self._scalars(stmt)}

    async def get_recent(self, limit: int = 10) -> list[Link]:
        return await self.get_all(skip=0, limit=limit)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Link]:
        stmt = (
            select(LinkModel)
            .order_by(LinkModel.created_at.desc(), LinkModel.id)
            .offset(skip)
            .limit(limit)
        )
        return [self._to_entity(model) for model in await self._scalars(stmt)]

    async def count(self) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count()).select_from(LinkModel))
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Could not count links: {exc}") from exc

    async def create(self, link: Link) -> Link:
        model = self._to_model(link)
        async with self._session_factory() as session:
            session.add(model)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.info("Link %s already committed by another request", link.id)
                raise DuplicateLinkError(link.id) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise MetadataStoreError(f"Could not commit link {link.id}: {exc}") from exc
            return self._to_entity(model)

    async def delete(self, link_id: str) -> bool:
        async with self._session_factory() as session:
            try:
                result = await session.execute(delete(LinkModel).where(LinkModel.id == link_id))
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise MetadataStoreError(f"Could not delete link {link_id}: {exc}") from exc
            return result.rowcount > 0

    async def _scalars(self, stmt) -> list[LinkModel]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Link query failed: {exc}") from exc
