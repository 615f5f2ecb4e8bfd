"""SQLAlchemy ORM model for chunk embeddings stored with pgvector."""

from sqlalchemy import Column, Index, Integer, Text

from pgvector.sqlalchemy import Vector

from seen.infrastructure.database.base import Base

EMBEDDING_DIMENSIONS = 768


class LinkVectorModel(Base):
    """One embedded chunk of an archived link.

    Rows are keyed by ``<link_id>-<attempt>-<chunk_index>`` and are not tied to
    ``links`` by a foreign key: vectors are written before their link row.
    """

    __tablename__ = "link_vectors"

    id = Column(Text, primary_key=True)
    link_id = Column(Text, nullable=False, index=True)
    chunk_index = Column(Integer, nullable=False)
    excerpt = Column(Text, nullable=False, default="")
    embedding = Column(Vector(EMBEDDING_DIMENSIONS), nullable=False)  # HNSW max: 2000

    __table_args__ = (
        Index("idx_link_vectors_embedding_hnsw", embedding, postgresql_using="hnsw",
              postgresql_ops={"embedding": "vector_cosine_ops"}),
    )
