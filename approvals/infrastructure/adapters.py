"""Per-kind bindings between backend records and the generic workflow.

Each adapter supplies field extraction, the status vocabulary and the
endpoint paths for one :class:`DocumentKind`; the repository client and
the workflow services never touch kind-specific field names directly.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from approvals.core.schema import (
    BudgetApprovalResponse,
    BudgetIndicators,
    BudgetRecord,
    PurchaseOrderIndicators,
    PurchaseOrderRecord,
    StatusChangeResponse,
)
from approvals.domain import (
    ApprovalReceipt,
    ConflictError,
    Document,
    DocumentKey,
    DocumentKind,
    Identity,
    IndicatorSummary,
    TransportError,
    UnapprovalReceipt,
)


@dataclass(frozen=True, slots=True)
class Endpoints:
    pending: str
    approved: str
    indicators: str
    approve: str
    unapprove: str

    @classmethod
    def under(cls, prefix: str) -> "Endpoints":
        return cls(
            pending=f"/{prefix}/pendientes",
            approved=f"/{prefix}/aprobados",
            indicators=f"/{prefix}/indicadores",
            approve=f"/{prefix}/aprobar",
            unapprove=f"/{prefix}/desaprobar",
        )


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _parse_timestamp(day: str | None, time_of_day: str | None) -> datetime | None:
    if not day:
        return None
    text = day[:10]
    if time_of_day:
        text = f"{text}T{time_of_day.strip()}"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


class DocumentAdapter(ABC):
    """Common behaviour; subclasses fill in the kind-specific pieces."""

    kind: ClassVar[DocumentKind]
    endpoints: ClassVar[Endpoints]
    record_model: ClassVar[type[BaseModel]]
    number_field: ClassVar[str]
    statuses: ClassVar[dict[str, str]]
    default_status: ClassVar[str]

    def status_label(self, code: str | None) -> str:
        normalised = (code or "").strip().upper()
        return self.statuses.get(normalised, self.default_status)

    def to_document(self, raw: dict[str, Any]) -> Document:
        try:
            record = self.record_model.model_validate(raw)
        except ValidationError as exc:
            raise TransportError(f"malformed {self.kind.value} record: {exc.error_count()} errors") from exc
        status = (getattr(record, "status", None) or "").strip().upper()
        return Document(
            kind=self.kind,
            key=DocumentKey(record.location_code, record.document_number),
            status=status,
            status_label=self.status_label(status),
            approver_user=getattr(record, "approver_user", None) or None,
            approval_date=getattr(record, "approval_date", None) or None,
            payload=dict(raw),
        )

    def to_documents(self, rows: Any) -> list[Document]:
        if not isinstance(rows, list):
            raise TransportError(f"expected a list of {self.kind.value} records")
        return [self.to_document(row) for row in rows]

    def key_payload(self, key: DocumentKey) -> dict[str, int]:
        return {"Loc_cod": key.location_code, self.number_field: key.document_number}

    def pending_params(self, page_size: int) -> dict[str, Any] | None:
        return None

    def approved_params(self, identity: Identity, date_from: date, date_to: date, page_size: int) -> dict[str, Any]:
        return {"fecha_desde": date_from.isoformat(), "fecha_hasta": date_to.isoformat()}

    @abstractmethod
    def parse_indicators(self, body: Any) -> IndicatorSummary:
        ...

    @abstractmethod
    def parse_approval(self, key: DocumentKey, body: Any) -> ApprovalReceipt:
        ...

    def parse_unapproval(self, key: DocumentKey, body: Any) -> UnapprovalReceipt:
        try:
            response = StatusChangeResponse.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed unapproval response") from exc
        return UnapprovalReceipt(key=key, new_status=response.new_status or "", message=response.message)


class BudgetAdapter(DocumentAdapter):
    kind = DocumentKind.BUDGET
    endpoints = Endpoints.under("presupuestos")
    record_model = BudgetRecord
    number_field = "pre_nro"
    statuses = {"N": "NotCurrent", "P": "Lost", "G": "Won"}
    default_status = "Unassigned"

    def pending_params(self, page_size: int) -> dict[str, Any] | None:
        return {"skip": 0, "limit": page_size}

    def approved_params(self, identity: Identity, date_from: date, date_to: date, page_size: int) -> dict[str, Any]:
        return {
            "usuario": identity.query_username,
            "fecha_desde": date_from.isoformat(),
            "fecha_hasta": date_to.isoformat(),
            "skip": 0,
            "limit": page_size,
        }

    def parse_indicators(self, body: Any) -> IndicatorSummary:
        try:
            indicators = BudgetIndicators.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed budget indicators") from exc
        return IndicatorSummary(kind=self.kind, pending_count=indicators.pendientes, approved_count=indicators.aprobados)

    def parse_approval(self, key: DocumentKey, body: Any) -> ApprovalReceipt:
        try:
            response = BudgetApprovalResponse.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed budget approval response") from exc
        if not response.success:
            raise ConflictError(response.message or f"budget {key} could not be approved")
        return ApprovalReceipt(
            key=key,
            approver_user=response.approver_user,
            approval_date=_parse_date(response.approval_date),
            approval_timestamp=_parse_timestamp(response.approval_date, response.approval_time),
            message=response.message,
        )


class PurchaseOrderAdapter(DocumentAdapter):
    kind = DocumentKind.PURCHASE_ORDER
    endpoints = Endpoints.under("ordenes-compra")
    record_model = PurchaseOrderRecord
    number_field = "ocp_nro"
    statuses = {"I": "Pending", "T": "Received", "N": "Void"}
    default_status = "Other"

    def parse_indicators(self, body: Any) -> IndicatorSummary:
        try:
            indicators = PurchaseOrderIndicators.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed purchase-order indicators") from exc
        return IndicatorSummary(
            kind=self.kind,
            pending_count=indicators.pendientes_count,
            approved_count=indicators.aprobados_hoy_count,
        )

    def parse_approval(self, key: DocumentKey, body: Any) -> ApprovalReceipt:
        try:
            response = StatusChangeResponse.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed purchase-order approval response") from exc
        return ApprovalReceipt(key=key, new_status=response.new_status, message=response.message)


ADAPTERS: dict[DocumentKind, DocumentAdapter] = {
    DocumentKind.BUDGET: BudgetAdapter(),
    DocumentKind.PURCHASE_ORDER: PurchaseOrderAdapter(),
}


def get_adapter(kind: DocumentKind) -> DocumentAdapter:
    return ADAPTERS[DocumentKind(kind)]


__all__ = ["ADAPTERS", "BudgetAdapter", "DocumentAdapter", "Endpoints", "PurchaseOrderAdapter", "get_adapter"]
