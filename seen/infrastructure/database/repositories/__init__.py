from .link_repository import SQLAlchemyLinkRepository
from .pgvector_index import PgVectorIndex

__all__ = ["SQLAlchemyLinkRepository", "PgVectorIndex"]
