"""Unit tests for the HttpContentFetcher."""

import asyncio

import httpx
import pytest

from seen.domain.exceptions import FetchError
from seen.infrastructure.fetch.http_content_fetcher import HttpContentFetcher


def _fetcher(handler, max_bytes: int = 1024) -> HttpContentFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpContentFetcher(timeout_seconds=5, max_bytes=max_bytes, http_client=client)


@pytest.mark.asyncio
async def test_fetch_returns_body_and_content_type():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=b"<html>hi</html>", headers={"Content-Type": "text/html; charset=utf-8"})

    fetched = await _fetcher(handler).fetch("HTTPS://Example.com/page#frag")

    assert requested == ["https://example.com/page"]
    assert fetched.url == "https://example.com/page"
    assert fetched.content == b"<html>hi</html>"
    assert fetched.mime_type == "text/html"


@pytest.mark.asyncio
async def test_non_2xx_status_is_reported():
    fetcher = _fetcher(lambda request: httpx.Response(404, content=b"nope"))

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://example.com/missing")

    assert exc_info.value.reason == "non-2xx"
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_declared_length_over_limit_is_rejected():
    fetcher = _fetcher(lambda request: httpx.Response(200, content=b"x" * 2048), max_bytes=1024)

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://example.com/big")

    assert exc_info.value.reason == "too-large"


@pytest.mark.asyncio
async def test_streamed_body_over_limit_is_rejected():
    async def body():
        for _ in range(4):
            yield b"y" * 400

    fetcher = _fetcher(lambda request: httpx.Response(200, content=body()), max_bytes=1024)

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://example.com/stream")

    assert exc_info.value.reason == "too-large"


@pytest.mark.asyncio
async def test_timeout_is_mapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError) as exc_info:
        await _fetcher(handler).fetch("https://example.com/slow")

    assert exc_info.value.reason == "timeout"


@pytest.mark.asyncio
async def test_slow_drip_body_hits_the_overall_deadline():
    async def drip():
        for _ in range(50):
            await asyncio.sleep(0.05)
            yield b"x"

    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=drip()))
    )
    fetcher = HttpContentFetcher(timeout_seconds=0.5, http_client=client)

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://example.com/drip")

    assert exc_info.value.reason == "timeout"


@pytest.mark.asyncio
async def test_connection_failure_is_a_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError) as exc_info:
        await _fetcher(handler).fetch("https://example.com/")

    assert exc_info.value.reason == "network"


@pytest.mark.asyncio
async def test_non_http_scheme_is_rejected_without_a_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    with pytest.raises(FetchError) as exc_info:
        await _fetcher(handler).fetch("file:///etc/passwd")

    assert exc_info.value.reason == "unsupported-scheme"
    assert calls == []


@pytest.mark.asyncio
async def test_missing_content_type_falls_back_to_octet_stream():
    fetcher = _fetcher(lambda request: httpx.Response(200, content=b"\x00\x01"))

    fetched = await fetcher.fetch("https://example.com/blob")

    assert fetched.content_type == "application/octet-stream"
