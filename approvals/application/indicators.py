"""Per-kind counters for the dashboard home page."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass

from approvals.domain import DocumentKind, Identity

from .queries import DocumentQueries


@dataclass(frozen=True, slots=True)
class Indicators:
    kind: DocumentKind
    pending_count: int
    approved_today_count: int
    backend_approved_count: int = 0

    @property
    def total_count(self) -> int:
        return self.pending_count + self.backend_approved_count

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "pending_count": self.pending_count,
            "approved_today_count": self.approved_today_count,
            "backend_approved_count": self.backend_approved_count,
            "total_count": self.total_count,
        }


class IndicatorAggregator:
    """Combines the backend pending count with the approved-today list.

    The approved-today figure is the length of the very list the approved
    tab shows; the backend's own approved aggregate is reported separately
    and never used for it.
    """

    def __init__(self, queries: DocumentQueries) -> None:
        self._queries = queries

    async def compute_indicators(self, kind: DocumentKind, identity: Identity | None) -> Indicators:
        kind = DocumentKind(kind)
        summary, approved = await asyncio.gather(
            self._queries.indicator_summary(kind),
            self._queries.approved_today(kind, identity),
        )
        return Indicators(
            kind=kind,
            pending_count=summary.pending_count,
            approved_today_count=len(approved),
            backend_approved_count=summary.approved_count,
        )
