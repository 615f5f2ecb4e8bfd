"""HTTP content fetcher — single-page retrieval with bounded time and size.

Streams the body so an oversized response is rejected as soon as the limit
is crossed rather than after it has been fully buffered.
"""

import asyncio
import logging

import httpx

from seen.application.interfaces import ContentFetcher
from seen.domain.entities import FetchedContent
from seen.domain.exceptions import FetchError
from seen.domain.identifiers import normalize_url

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/130.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
_FALLBACK_CONTENT_TYPE = "application/octet-stream"


class HttpContentFetcher(ContentFetcher):
    """Infrastructure adapter — fetches URLs with httpx."""

    def __init__(
        self,
        timeout_seconds: float = 20.0,
        max_bytes: int = 20 * 1024 * 1024,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._timeout = timeout_seconds
        self._max_bytes = max_bytes
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)

    async def fetch(self, url: str) -> FetchedContent:
        """Fetch ``url``; ``timeout_seconds`` bounds the whole request, body included."""
        url = normalize_url(url)
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            async with asyncio.timeout(self._timeout):
                body, content_type, final_url = await self._download(client, url)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise FetchError("timeout", f"Timed out fetching {url} after {self._timeout}s") from exc
        except httpx.UnsupportedProtocol as exc:
            raise FetchError("unsupported-scheme", f"Unsupported URL scheme: {url}") from exc
        except httpx.HTTPError as exc:
            raise FetchError("network", f"Failed to fetch {url}: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if final_url != url:
            logger.debug("Fetched %s via redirect to %s", url, final_url)
        logger.info("Fetched %s (%s, %d bytes)", url, content_type, len(body))
        return FetchedContent(url=url, content=body, content_type=content_type)

    async def _download(self, client: httpx.AsyncClient, url: str) -> tuple[bytes, str, str]:
        async with client.stream("GET", url, headers=_DEFAULT_HEADERS, timeout=self._timeout) as response:
            if not 200 <= response.status_code < 300:
                raise FetchError(
                    "non-2xx",
                    f"Failed to fetch {url}: status {response.status_code}",
                    status_code=response.status_code,
                )

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self._max_bytes:
                raise FetchError(
                    "too-large",
                    f"{url} declares {declared} bytes (limit {self._max_bytes})",
                )

            body = bytearray()
            async for piece in response.aiter_bytes():
                body.extend(piece)
                if len(body) > self._max_bytes:
                    raise FetchError(
                        "too-large",
                        f"{url} exceeded the {self._max_bytes} byte limit",
                    )

            content_type = response.headers.get("Content-Type") or _FALLBACK_CONTENT_TYPE
            return bytes(body), content_type, str(response.url)
