"""Typed facade over the remote list/approve/unapprove operations."""
from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from approvals.domain import (
    ApprovalReceipt,
    Document,
    DocumentKey,
    DocumentKind,
    Identity,
    IndicatorSummary,
    UnapprovalReceipt,
)

from .adapters import DocumentAdapter, get_adapter
from .http import ApiTransport

logger = logging.getLogger(__name__)


class DocumentRepository(Protocol):
    """Contract consumed by the workflow services."""

    async def list_pending(self, kind: DocumentKind) -> list[Document]: ...

    async def list_approved(
        self,
        kind: DocumentKind,
        identity: Identity | None,
        date_from: date,
        date_to: date,
    ) -> list[Document]: ...

    async def fetch_indicators(self, kind: DocumentKind) -> IndicatorSummary: ...

    async def approve(self, kind: DocumentKind, key: DocumentKey) -> ApprovalReceipt: ...

    async def unapprove(self, kind: DocumentKind, key: DocumentKey) -> UnapprovalReceipt: ...


class HttpDocumentRepository:
    """Repository backed by the record-keeping HTTP API."""

    def __init__(self, transport: ApiTransport, *, page_size: int = 100) -> None:
        self._transport = transport
        self._page_size = page_size

    @staticmethod
    def _adapter(kind: DocumentKind) -> DocumentAdapter:
        return get_adapter(kind)

    async def list_pending(self, kind: DocumentKind) -> list[Document]:
        adapter = self._adapter(kind)
        rows = await self._transport.get(adapter.endpoints.pending, params=adapter.pending_params(self._page_size))
        return adapter.to_documents(rows)

    async def list_approved(
        self,
        kind: DocumentKind,
        identity: Identity | None,
        date_from: date,
        date_to: date,
    ) -> list[Document]:
        if identity is None or not identity.username:
            return []
        adapter = self._adapter(kind)
        params = adapter.approved_params(identity, date_from, date_to, self._page_size)
        rows = await self._transport.get(adapter.endpoints.approved, params=params)
        return adapter.to_documents(rows)

    async def fetch_indicators(self, kind: DocumentKind) -> IndicatorSummary:
        adapter = self._adapter(kind)
        body = await self._transport.get(adapter.endpoints.indicators)
        return adapter.parse_indicators(body)

    async def approve(self, kind: DocumentKind, key: DocumentKey) -> ApprovalReceipt:
        adapter = self._adapter(kind)
        body = await self._transport.post(adapter.endpoints.approve, adapter.key_payload(key))
        receipt = adapter.parse_approval(key, body)
        logger.info("approved %s %s", kind.value, key)
        return receipt

    async def unapprove(self, kind: DocumentKind, key: DocumentKey) -> UnapprovalReceipt:
        adapter = self._adapter(kind)
        body = await self._transport.post(adapter.endpoints.unapprove, adapter.key_payload(key))
        receipt = adapter.parse_unapproval(key, body)
        logger.info("unapproved %s %s", kind.value, key)
        return receipt


__all__ = ["DocumentRepository", "HttpDocumentRepository"]
