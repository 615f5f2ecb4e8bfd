from .chunker import Chunker
from .ingestion_service import IngestionResult, IngestionService
from .retrieval_service import RetrievalService
from .link_service import LinkService
from .message_service import MessageService

__all__ = [
    "Chunker",
    "IngestionResult",
    "IngestionService",
    "RetrievalService",
    "LinkService",
    "MessageService",
]
