"""Domain entities for budgets and purchase orders under review."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class DocumentKind(str, Enum):
    """Document families handled by the dashboard.

    Values double as the route segment of each family's page.
    """

    BUDGET = "presupuestos"
    PURCHASE_ORDER = "ordenes-compra"


class ApprovalProjection(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


@dataclass(frozen=True, slots=True)
class DocumentKey:
    """Composite identity of a document within its kind."""

    location_code: int
    document_number: int

    def __str__(self) -> str:
        return f"{self.location_code}-{self.document_number}"


@dataclass(frozen=True, slots=True)
class Identity:
    """The operator attached to the current session."""

    username: str
    display_name: str = ""

    @property
    def query_username(self) -> str:
        return self.username.lower()


@dataclass(slots=True)
class Document:
    """Snapshot of a backend record as seen by the client.

    ``payload`` keeps the raw backend fields for rendering; only the key,
    status code and approval fields are interpreted here.
    """

    kind: DocumentKind
    key: DocumentKey
    status: str = ""
    status_label: str = ""
    approver_user: str | None = None
    approval_date: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def projection(self) -> ApprovalProjection:
        if self.approver_user and self.approval_date:
            return ApprovalProjection.APPROVED
        return ApprovalProjection.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "location_code": self.key.location_code,
            "document_number": self.key.document_number,
            "status": self.status,
            "status_label": self.status_label,
            "approver_user": self.approver_user,
            "approval_date": self.approval_date,
            "projection": self.projection.value,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True, slots=True)
class ApprovalReceipt:
    key: DocumentKey
    approver_user: str | None = None
    approval_date: date | None = None
    approval_timestamp: datetime | None = None
    new_status: str | None = None
    message: str = ""


@dataclass(frozen=True, slots=True)
class UnapprovalReceipt:
    key: DocumentKey
    new_status: str = ""
    message: str = ""


@dataclass(frozen=True, slots=True)
class IndicatorSummary:
    """Backend-provided aggregate for one kind.

    ``approved_count`` is whatever the backend reports (all-time for
    budgets, today for purchase orders); the dashboard's approved-today
    counter never uses it.
    """

    kind: DocumentKind
    pending_count: int
    approved_count: int = 0
