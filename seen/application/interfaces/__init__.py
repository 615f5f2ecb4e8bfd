from .content_fetcher import ContentFetcher
from .text_extractor import TextExtractor
from .embedding_provider import EmbeddingProvider
from .chat_provider import ChatProvider
from .document_oracle import DocumentOracle
from .blob_store import BlobStore
from .vector_index import VectorIndex
from .link_repository import LinkRepository

__all__ = [
    "ContentFetcher",
    "TextExtractor",
    "EmbeddingProvider",
    "ChatProvider",
    "DocumentOracle",
    "BlobStore",
    "VectorIndex",
    "LinkRepository",
]
