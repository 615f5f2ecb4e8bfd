"""OpenRouter-based embedding provider — calls the /embeddings endpoint.

Uses the same httpx client pattern as OpenRouterClient.
Default model: google/gemini-embedding-001, truncated to 768 dimensions.
"""

import json
import logging
from typing import Any

import httpx

from seen.application.interfaces.embedding_provider import EmbeddingProvider
from seen.domain.exceptions import ChatProviderError

logger = logging.getLogger(__name__)


class OpenRouterEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via OpenRouter /embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Seen",
        model: str = "google/gemini-embedding-001",
        model_dimensions: int = 768,
        timeout_seconds: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._model = model
        self._dimensions = model_dimensions
        self._timeout = timeout_seconds
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return "openrouter"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a batch of texts, in input order.

        Raises:
            ChatProviderError: on a non-200 response or an unreadable body.
        """
        if not texts:
            return []

        url = f"{self._base_url}/embeddings"
        payload: dict[str, Any] = {
            "model": self._model,
            "input": texts,
            "dimensions": self._dimensions,
        }

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.post(url, headers=self._get_headers(), json=payload)

            if response.status_code != 200:
                error_text = response.text[:500]
                logger.error("Embedding API error %d: %s", response.status_code, error_text)
                raise ChatProviderError(
                    provider=self.provider_name,
                    status_code=response.status_code,
                    message=error_text,
                )

            try:
                data = response.json()
                embeddings_data = list(data.get("data") or [])
                # Sort by index to ensure correct ordering
                embeddings_data.sort(key=lambda x: x.get("index", 0))
                result = [item["embedding"] for item in embeddings_data]
            except (json.JSONDecodeError, AttributeError, KeyError, TypeError) as exc:
                raise ChatProviderError(
                    provider=self.provider_name,
                    status_code=200,
                    message=f"Unreadable embeddings response: {exc}",
                ) from exc

            logger.info(
                "Generated %d embeddings (model=%s, dims=%d)",
                len(result),
                self._model,
                len(result[0]) if result else 0,
            )
            return result

        finally:
            if should_close:
                await client.aclose()

    async def generate_query_embedding(self, query: str) -> list[float]:
        """Generate a single embedding for a search query."""
        results = await self.generate_embeddings([query])
        if not results:
            raise ChatProviderError(
                provider=self.provider_name,
                status_code=200,
                message="No embedding returned for query",
            )
        return results[0]
