"""Cache keys and loaders for the dashboard reads.

The approved tab and the approved-today indicator read through the same
key, so the counter can never disagree with the list behind it.
"""
from __future__ import annotations

from typing import Any

from approvals.core.clock import Clock, SystemClock, today_range
from approvals.domain import Document, DocumentKind, Identity, IndicatorSummary
from approvals.infrastructure import DocumentRepository

from .cache import Loader, QueryCache, QueryKey, QueryView
from .tabs import Tab


class DocumentQueries:
    def __init__(self, repository: DocumentRepository, cache: QueryCache, clock: Clock | None = None) -> None:
        self._repository = repository
        self._cache = cache
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # keys
    # ------------------------------------------------------------------
    @staticmethod
    def pending_key(kind: DocumentKind) -> QueryKey:
        return QueryKey(kind=kind, view=QueryView.PENDING)

    @staticmethod
    def indicators_key(kind: DocumentKind) -> QueryKey:
        return QueryKey(kind=kind, view=QueryView.INDICATORS)

    def approved_today_key(self, kind: DocumentKind, identity: Identity) -> QueryKey:
        return QueryKey(
            kind=kind,
            view=QueryView.APPROVED,
            identity=identity.query_username,
            date_range=today_range(self._clock),
        )

    def key_for_tab(self, kind: DocumentKind, tab: Tab, identity: Identity | None) -> QueryKey | None:
        if tab is Tab.PENDING:
            return self.pending_key(kind)
        if identity is None:
            return None
        return self.approved_today_key(kind, identity)

    # ------------------------------------------------------------------
    # loaders
    # ------------------------------------------------------------------
    def _approved_loader(self, key: QueryKey, identity: Identity) -> Loader:
        date_from, date_to = key.date_range  # type: ignore[misc]

        async def load() -> list[Document]:
            return await self._repository.list_approved(key.kind, identity, date_from, date_to)

        return load

    def _forget_earlier_days(self, current: QueryKey) -> None:
        first_day = current.date_range[0]  # type: ignore[index]
        for key in self._cache.keys():
            if key.view is QueryView.APPROVED and key.date_range is not None and key.date_range[1] < first_day:
                self._cache.discard(key)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    async def pending(self, kind: DocumentKind) -> list[Document]:
        return await self._cache.fetch(self.pending_key(kind), lambda: self._repository.list_pending(kind))

    async def approved_today(self, kind: DocumentKind, identity: Identity | None) -> list[Document]:
        if identity is None:
            return []
        key = self.approved_today_key(kind, identity)
        self._forget_earlier_days(key)
        return await self._cache.fetch(key, self._approved_loader(key, identity))

    async def indicator_summary(self, kind: DocumentKind) -> IndicatorSummary:
        return await self._cache.fetch(self.indicators_key(kind), lambda: self._repository.fetch_indicators(kind))

    async def read_tab(self, kind: DocumentKind, tab: Tab, identity: Identity | None) -> list[Any]:
        if tab is Tab.APPROVED:
            return await self.approved_today(kind, identity)
        return await self.pending(kind)
