"""Tests for the cached scraping pipeline."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from app.config import Settings
from app.models import GenreDetail
from app.services.cache import TTLCache
from app.services.fetcher import DocumentFetcher, FetchError
from app.services.scraper import (
    CATEGORIES_CACHE_KEY,
    ScraperService,
    genre_cache_key,
    top_list_cache_key,
)

from html_fixtures import (
    chart,
    chart_item,
    genre_header,
    interest_card,
    page,
    poster_card,
    section,
)

GENRE_PAGE = page(
    section("Popular movies", poster_card("tt0000001", "one", title="One")),
    header=genre_header(title="Horror"),
)
INDEX_PAGE = page(section("Horror", interest_card("Slasher", "in0000113", "slasher")))
CHART_PAGE = chart(chart_item("tt0111161", "s", title="1. Shawshank"))


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def build_settings(**overrides: Any) -> Settings:
    base: dict[str, Any] = {"CACHE_SWEEP_INTERVAL": 0}
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def build_service(
    http_client: httpx.AsyncClient, *, clock: FakeClock | None = None
) -> ScraperService:
    cache = TTLCache(3_600, clock=clock or FakeClock())
    return ScraperService(build_settings(), DocumentFetcher(http_client), cache)


def routed_handler(requests: list[httpx.Request]):
    pages = {
        "/interest/all/": INDEX_PAGE,
        "/interest/in0000112/": GENRE_PAGE,
        "/chart/top/": CHART_PAGE,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = pages.get(request.url.path)
        if body is None:
            return httpx.Response(404, text="missing")
        return httpx.Response(200, text=body)

    return handler


@pytest.mark.anyio("asyncio")
async def test_genre_detail_is_fetched_once_then_served_from_cache() -> None:
    requests: list[httpx.Request] = []
    transport = httpx.MockTransport(routed_handler(requests))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client)
        first = await service.genre_detail("in0000112")
        second = await service.genre_detail("in0000112")

    assert isinstance(first, GenreDetail)
    assert first.genre_title == "Horror"
    assert second is first
    assert len(requests) == 1
    assert str(requests[0].url) == "https://www.imdb.com/interest/in0000112/"
    assert service.cache.get(genre_cache_key("in0000112")) is first


@pytest.mark.anyio("asyncio")
async def test_expired_entry_triggers_a_new_fetch() -> None:
    requests: list[httpx.Request] = []
    clock = FakeClock()
    transport = httpx.MockTransport(routed_handler(requests))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client, clock=clock)
        await service.list_categories()
        clock.now += 3_600
        listing = await service.list_categories()

    assert len(requests) == 2
    assert [item.id for item in listing["horror"]] == ["in0000113"]
    assert service.cache.get(CATEGORIES_CACHE_KEY) is listing


@pytest.mark.anyio("asyncio")
async def test_ranked_list_uses_caller_supplied_cache_key() -> None:
    requests: list[httpx.Request] = []
    transport = httpx.MockTransport(routed_handler(requests))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client)
        entries = await service.ranked_list(
            "https://www.imdb.com/chart/top/",
            cache_key=top_list_cache_key("top-rated-movies"),
        )

    assert [entry.rank for entry in entries] == [1]
    assert service.cache.get("top_top-rated-movies") == entries


@pytest.mark.anyio("asyncio")
async def test_concurrent_misses_share_one_fetch() -> None:
    requests: list[httpx.Request] = []
    release = asyncio.Event()
    inner = routed_handler(requests)

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return inner(request)

    transport = httpx.MockTransport(slow_handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client)
        first = asyncio.create_task(service.genre_detail("in0000112"))
        second = asyncio.create_task(service.genre_detail("in0000112"))
        await asyncio.sleep(0.01)
        release.set()
        results = await asyncio.gather(first, second)

    assert len(requests) == 1
    assert results[0] is results[1]
    assert service.cache.get(genre_cache_key("in0000112")) is results[0]


@pytest.mark.anyio("asyncio")
async def test_fetch_failure_propagates_and_is_not_cached() -> None:
    requests: list[httpx.Request] = []
    transport = httpx.MockTransport(routed_handler(requests))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client)
        for _ in range(2):
            with pytest.raises(FetchError):
                await service.genre_detail("in9999999")

    assert len(requests) == 2
    assert service.cache.get(genre_cache_key("in9999999")) is None


@pytest.mark.anyio("asyncio")
async def test_sweep_loop_starts_and_stops() -> None:
    transport = httpx.MockTransport(routed_handler([]))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = ScraperService(
            build_settings(CACHE_SWEEP_INTERVAL=60),
            DocumentFetcher(http_client),
            TTLCache(),
        )
        await service.start()
        assert service._sweep_task is not None
        await service.stop()
        assert service._sweep_task is None


@pytest.mark.anyio("asyncio")
async def test_ranked_list_requires_a_cache_key() -> None:
    """Charts are cached by their configured name, so the key is mandatory."""

    transport = httpx.MockTransport(routed_handler([]))
    async with httpx.AsyncClient(transport=transport) as http_client:
        service = build_service(http_client)
        with pytest.raises(TypeError):
            await service.ranked_list("https://www.imdb.com/chart/top/")  # type: ignore[call-arg]
    assert len(service.cache) == 0
