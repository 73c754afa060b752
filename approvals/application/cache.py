"""Process-wide cache of list and indicator reads."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from approvals.core.clock import Clock, SystemClock
from approvals.domain import DocumentKind

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


class QueryView(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    INDICATORS = "indicators"


class EntryStatus(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    LOADING = "loading"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class QueryKey:
    kind: DocumentKind
    view: QueryView
    identity: str | None = None
    date_range: tuple[date, date] | None = None


@dataclass(slots=True)
class QueryCacheEntry:
    key: QueryKey
    loader: Loader
    data: Any = None
    status: EntryStatus = EntryStatus.STALE
    error: Exception | None = None
    updated_at: datetime | None = None
    generation: int = 0
    inflight: asyncio.Task | None = field(default=None, repr=False)
    inflight_generation: int = -1


class QueryCache:
    """At most one entry per key; concurrent reads of a key share one load.

    Every :meth:`mark_stale` bumps the entry's generation. A load that was
    started under an older generation may still hand its result to its own
    awaiters, but it never flips the entry back to ``FRESH``.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[QueryKey, QueryCacheEntry] = {}

    def get(self, key: QueryKey) -> QueryCacheEntry | None:
        return self._entries.get(key)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def fetch(self, key: QueryKey, loader: Loader | None = None) -> Any:
        """Return cached data for ``key``, loading it when not fresh."""

        entry = self._entries.get(key)
        if entry is None:
            if loader is None:
                raise KeyError(key)
            entry = QueryCacheEntry(key=key, loader=loader)
            self._entries[key] = entry
        elif loader is not None:
            entry.loader = loader

        if entry.status is EntryStatus.FRESH:
            return entry.data
        return await self._join(entry)

    async def refetch(self, key: QueryKey) -> Any:
        """Load ``key`` again with its stored loader, joining a load already in flight."""

        entry = self._entries.get(key)
        if entry is None:
            raise KeyError(key)
        return await self._join(entry)

    def _join(self, entry: QueryCacheEntry) -> Awaitable[Any]:
        task = entry.inflight
        if task is None or entry.inflight_generation != entry.generation:
            task = asyncio.ensure_future(self._load(entry, entry.generation))
            entry.inflight = task
            entry.inflight_generation = entry.generation
        return asyncio.shield(task)

    async def _load(self, entry: QueryCacheEntry, generation: int) -> Any:
        if entry.generation == generation:
            entry.status = EntryStatus.LOADING
        try:
            data = await entry.loader()
        except Exception as exc:
            if entry.generation == generation:
                entry.status = EntryStatus.ERRORED
                entry.error = exc
            raise
        finally:
            if entry.inflight is asyncio.current_task():
                entry.inflight = None

        if entry.generation != generation:
            logger.debug("load of %s superseded by an invalidation", entry.key)
            if entry.data is None:
                entry.data = data
            return data

        entry.data = data
        entry.status = EntryStatus.FRESH
        entry.error = None
        entry.updated_at = self._clock.now()
        return data

    def mark_stale(self, keys: Iterable[QueryKey]) -> list[QueryKey]:
        marked: list[QueryKey] = []
        for key in keys:
            entry = self._entries.get(key)
            if entry is None:
                continue
            entry.generation += 1
            entry.status = EntryStatus.STALE
            marked.append(key)
        return marked

    def discard(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["EntryStatus", "Loader", "QueryCache", "QueryCacheEntry", "QueryKey", "QueryView"]
