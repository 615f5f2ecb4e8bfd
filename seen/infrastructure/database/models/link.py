"""SQLAlchemy ORM model for archived links."""

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from seen.infrastructure.database.base import Base


class LinkModel(Base):
    """ORM model — maps to the 'links' table.

    Column names and types are part of the persisted contract; ``created_at``
    is an ISO-8601 string, not a native timestamp.
    """

    __tablename__ = "links"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(Text, nullable=False)
    bucket_path: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_links_url", "url"),
        Index("idx_links_id", "id"),
    )

    def __repr__(self) -> str:
        return f"<LinkModel(id={self.id}, url='{self.url}')>"
