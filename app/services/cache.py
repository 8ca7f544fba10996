"""In-memory response cache and per-key fetch deduplication."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3_600


@dataclass(slots=True)
class CacheEntry:
    """A cached value and the clock reading after which it is stale."""

    key: str
    value: Any
    expires_at: float


class TTLCache:
    """Key/value store whose entries expire ``ttl`` seconds after writing.

    Expiry is checked on every read; :meth:`purge_expired` removes stale
    entries eagerly. All methods are synchronous, so they cannot interleave
    with other coroutines on the event loop.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        lifetime = self._default_ttl if ttl is None else ttl
        if lifetime <= 0:
            raise ValueError("ttl must be positive")
        self._entries[key] = CacheEntry(key, value, self._clock() + lifetime)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every stale entry and return how many were removed."""

        now = self._clock()
        stale = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


class SingleFlight:
    """Share one in-progress load between concurrent callers of the same key.

    The load runs in its own task, so a caller that is cancelled only stops
    waiting; the remaining callers still receive the result.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Await ``factory()`` once per key; later callers await the same result."""

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._finish(key, done))
        else:
            logger.debug("Joining in-flight load for %s", key)
        return await asyncio.shield(task)

    def _finish(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the outcome as retrieved so a failure nobody awaited anymore is
        # not reported as "exception was never retrieved".
        if not task.cancelled():
            task.exception()
