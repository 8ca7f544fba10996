"""Pipeline entry points combining the cache, fetcher and extractors."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Callable, TypeVar

from ..config import Settings
from ..models import CategoryListing, GenreDetail, RankedTitleRef
from .cache import SingleFlight, TTLCache
from .extractors import extract_categories, extract_genre_detail, extract_ranked_list
from .fetcher import DocumentFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

CATEGORIES_CACHE_KEY = "categories"


def genre_cache_key(genre_id: str) -> str:
    return f"genre_{genre_id}"


def top_list_cache_key(list_name: str) -> str:
    return f"top_{list_name}"


class ScraperService:
    """Serve scraped IMDb records, going upstream only on a cache miss.

    Concurrent misses for the same key share a single fetch. A failed fetch
    caches nothing and the :class:`~app.services.fetcher.FetchError`
    propagates to every waiting caller.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: DocumentFetcher,
        cache: TTLCache,
    ):
        self._settings = settings
        self._fetcher = fetcher
        self._cache = cache
        self._inflight = SingleFlight()
        self._sweep_interval = settings.cache_sweep_interval_seconds
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def start(self) -> None:
        """Launch the periodic cache sweep when an interval is configured."""

        if self._sweep_interval > 0 and self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Stop the background sweep loop."""

        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await self._sweep_task
        self._sweep_task = None

    async def list_categories(self) -> CategoryListing:
        """Return the allow-listed categories from the interest index page."""

        return await self._cached(
            CATEGORIES_CACHE_KEY,
            self._settings.interest_index_url,
            extract_categories,
        )

    async def genre_detail(
        self, genre_id: str, *, cache_key: str | None = None
    ) -> GenreDetail:
        """Return the detail record for an interest identifier."""

        return await self._cached(
            cache_key or genre_cache_key(genre_id),
            self._settings.genre_url(genre_id),
            extract_genre_detail,
        )

    async def ranked_list(
        self, list_url: str, *, cache_key: str
    ) -> tuple[RankedTitleRef, ...]:
        """Return the ranked entries of a chart page.

        ``cache_key`` comes from the caller, normally
        :func:`top_list_cache_key` applied to the chart's configured name.
        """

        return await self._cached(
            cache_key,
            list_url,
            extract_ranked_list,
        )

    async def _cached(self, key: str, url: str, extractor: Callable[[str], T]) -> T:
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached
        logger.debug("Cache miss for %s", key)
        return await self._inflight.run(key, lambda: self._load(key, url, extractor))

    async def _load(self, key: str, url: str, extractor: Callable[[str], T]) -> T:
        markup = await self._fetcher.fetch(url)
        record = extractor(markup)
        self._cache.set(key, record)
        return record

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                removed = self._cache.purge_expired()
            except Exception as exc:  # pragma: no cover - background safety net
                logger.exception("Cache sweep failed: %s", exc)
                continue
            if removed:
                logger.info("Cache sweep removed %s expired entries", removed)
