"""OpenRouter infrastructure package."""

from .openrouter_client import OpenRouterClient
from .openrouter_document_oracle import OpenRouterDocumentOracle
from .openrouter_embedding_provider import OpenRouterEmbeddingProvider

__all__ = ["OpenRouterClient", "OpenRouterDocumentOracle", "OpenRouterEmbeddingProvider"]
