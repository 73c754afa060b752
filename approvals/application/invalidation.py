"""Marks cached reads stale after an approve/unapprove settles."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable

from approvals.domain import ApprovalError, AuthError, DocumentKind

from .cache import QueryCache, QueryKey, QueryView

logger = logging.getLogger(__name__)

# An approval moves a document between the pending and approved lists and
# changes both counters, so every view of the mutated kind is affected.
AFFECTED_VIEWS: dict[DocumentKind, frozenset[QueryView]] = {
    DocumentKind.BUDGET: frozenset({QueryView.PENDING, QueryView.APPROVED, QueryView.INDICATORS}),
    DocumentKind.PURCHASE_ORDER: frozenset({QueryView.PENDING, QueryView.APPROVED, QueryView.INDICATORS}),
}


class InvalidationGraph:
    def __init__(
        self,
        cache: QueryCache,
        *,
        visible_keys: Callable[[], Iterable[QueryKey]] | None = None,
        on_auth_error: Callable[[], object] | None = None,
    ) -> None:
        self._cache = cache
        self._visible_keys = visible_keys or (lambda: ())
        self._on_auth_error = on_auth_error
        self._tasks: set[asyncio.Task] = set()

    def affected_keys(self, kind: DocumentKind) -> list[QueryKey]:
        views = AFFECTED_VIEWS[kind]
        return [key for key in self._cache.keys() if key.kind is kind and key.view in views]

    def on_mutation_settled(self, kind: DocumentKind) -> list[QueryKey]:
        """Mark every entry of ``kind`` stale and refetch the visible one.

        Marking happens without suspending, so no reader observes a partial
        invalidation. Other stale entries reload on their next read.
        """

        kind = DocumentKind(kind)
        stale = self._cache.mark_stale(self.affected_keys(kind))
        visible = {key for key in self._visible_keys() if key.kind is kind}
        for key in stale:
            if key in visible:
                self._schedule_refetch(key)
        logger.info("invalidated %d %s entries", len(stale), kind.value)
        return stale

    def _schedule_refetch(self, key: QueryKey) -> None:
        task = asyncio.ensure_future(self._refetch(key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refetch(self, key: QueryKey) -> None:
        if self._cache.get(key) is None:
            return
        try:
            await self._cache.refetch(key)
        except AuthError as exc:
            logger.warning("refetch of %s/%s rejected: %s", key.kind.value, key.view.value, exc)
            if self._on_auth_error is not None:
                self._on_auth_error()
        except ApprovalError as exc:
            # the entry itself is left ERRORED for the next reader
            logger.warning("refetch of %s/%s failed: %s", key.kind.value, key.view.value, exc)

    @property
    def pending_refetches(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled refetch has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))
