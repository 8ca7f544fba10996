"""Tests for the document fetcher."""

from __future__ import annotations

import httpx
import pytest

from app.config import DEFAULT_USER_AGENT
from app.services.fetcher import DocumentFetcher, FetchError


@pytest.mark.anyio("asyncio")
async def test_fetch_returns_markup_with_browser_identity() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="<html>ok</html>")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        fetcher = DocumentFetcher(http_client)
        markup = await fetcher.fetch("https://www.imdb.com/interest/all/")

    assert markup == "<html>ok</html>"
    assert requests[0].headers["User-Agent"] == DEFAULT_USER_AGENT


@pytest.mark.anyio("asyncio")
async def test_fetch_raises_on_error_status_without_retrying() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503, text="busy")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        fetcher = DocumentFetcher(http_client, user_agent="test-agent")
        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch("https://www.imdb.com/chart/top/")

    assert calls == 1
    assert excinfo.value.status_code == 503
    assert excinfo.value.url == "https://www.imdb.com/chart/top/"
    assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)
    assert "503" in str(excinfo.value)


@pytest.mark.anyio("asyncio")
async def test_fetch_wraps_transport_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        fetcher = DocumentFetcher(http_client)
        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch("https://www.imdb.com/interest/in0000001/")

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectTimeout)
