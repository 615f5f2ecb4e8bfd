"""DocumentOracle backed by OpenRouter chat completions and embeddings.

Translates provider and transport failures into ``OracleError`` reasons and
retries a rate-limited call exactly once after a backoff.
"""

import asyncio
import json
import logging
import re
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from seen.application.interfaces import ChatProvider, DocumentOracle, EmbeddingProvider
from seen.domain.entities import ChatMessage, DocumentSummary
from seen.domain.exceptions import ChatProviderError, OracleError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUMMARY_SYSTEM_PROMPT = (
    "You summarise web pages and documents for a personal link archive. "
    "Reply with a single JSON object and nothing else, of the form "
    '{"title": "<short descriptive title>", "summary": "<two to four sentence summary>"}. '
    "Write the summary in the language of the document."
)


class OpenRouterDocumentOracle(DocumentOracle):
    """Infrastructure adapter combining a chat provider and an embedding provider."""

    def __init__(
        self,
        chat_provider: ChatProvider,
        embedding_provider: EmbeddingProvider,
        *,
        summary_model: str,
        max_input_chars: int = 32_000,
        retry_backoff_seconds: float = 2.0,
    ):
        self._chat = chat_provider
        self._embeddings = embedding_provider
        self._summary_model = summary_model
        self._max_input_chars = max_input_chars
        self._retry_backoff = retry_backoff_seconds

    @property
    def dimensions(self) -> int:
        return self._embeddings.dimensions

    async def summarize(self, text: str) -> DocumentSummary:
        self._check_size(len(text))
        messages = [
            ChatMessage(role="system", content=SUMMARY_SYSTEM_PROMPT),
            ChatMessage(role="user", content=text),
        ]
        result = await self._call(
            "summarize",
            lambda: self._chat.complete(
                messages,
                self._summary_model,
                temperature=0.0,
                response_format={"type": "json_object"},
            ),
        )
        return parse_summary(result.content)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        self._check_size(max(len(t) for t in texts))
        vectors = await self._call("embed", lambda: self._embeddings.generate_embeddings(texts))
        if len(vectors) != len(texts):
            raise OracleError(
                "malformed-response",
                f"Expected {len(texts)} embeddings, received {len(vectors)}",
            )
        for vector in vectors:
            self._check_dimensions(vector)
        return vectors

    async def embed_query(self, text: str) -> list[float]:
        self._check_size(len(text))
        vector = await self._call("embed_query", lambda: self._embeddings.generate_query_embedding(text))
        self._check_dimensions(vector)
        return vector

    # ── Helpers ──────────────────────────────────────────────────────

    async def _call(self, operation: str, request: Callable[[], Awaitable[T]]) -> T:
        """Run ``request``; retry once on rate limiting, map every failure to OracleError."""
        try:
            return await self._attempt(request)
        except OracleError as exc:
            if exc.reason != "rate-limited":
                raise
            logger.warning(
                "Oracle %s rate-limited; retrying once in %.1fs", operation, self._retry_backoff
            )
        await asyncio.sleep(self._retry_backoff)
        return await self._attempt(request)

    async def _attempt(self, request: Callable[[], Awaitable[T]]) -> T:
        try:
            return await request()
        except ChatProviderError as exc:
            raise _map_provider_error(exc) from exc
        except httpx.TimeoutException as exc:
            raise OracleError("timeout", "Oracle request timed out") from exc
        except httpx.HTTPError as exc:
            raise OracleError("unavailable", f"Oracle unreachable: {exc}") from exc

    def _check_size(self, length: int) -> None:
        if length > self._max_input_chars:
            raise OracleError(
                "input-too-large",
                f"Oracle input of {length} characters exceeds {self._max_input_chars}",
            )

    def _check_dimensions(self, vector: list[float]) -> None:
        if len(vector) != self.dimensions:
            raise OracleError(
                "malformed-response",
                f"Expected {self.dimensions}-dimensional vector, received {len(vector)}",
            )


def _map_provider_error(exc: ChatProviderError) -> OracleError:
    status = exc.status_code
    if status == 429:
        reason = "rate-limited"
    elif status in (402, 403):
        reason = "quota"
    elif status == 413:
        reason = "input-too-large"
    elif status in (408, 504):
        reason = "timeout"
    elif status == 200:
        # The call succeeded but the body was unusable
        reason = "malformed-response"
    else:
        reason = "unavailable"
    return OracleError(reason, exc.message, status_code=status)


def parse_summary(content: str) -> DocumentSummary:
    """Parse the model's ``{"title", "summary"}`` reply.

    Raises:
        OracleError: ``malformed-response`` if no usable JSON object is found.
    """
    try:
        data = json.loads(_extract_json(content))
    except json.JSONDecodeError as exc:
        raise OracleError("malformed-response", f"Summary is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise OracleError("malformed-response", "Summary JSON is not an object")

    title = str(data.get("title") or "").strip()
    summary = str(data.get("summary") or "").strip()
    if not title and not summary:
        raise OracleError("malformed-response", "Summary JSON has neither title nor summary")
    return DocumentSummary(title=title, summary=summary)


def _extract_json(text: str) -> str:
    """Extract JSON from plain text or fenced blocks."""
    content = text.strip()

    fence_match = re.search(r"```(?:json)?\s*(.*?)\s*```", content, flags=re.S | re.I)
    if fence_match:
        return fence_match.group(1).strip()

    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end != -1 and end > start:
        return content[start:end + 1]

    return content
