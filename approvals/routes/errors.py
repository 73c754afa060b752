from __future__ import annotations

from fastapi import HTTPException

from approvals.domain import (
    ApprovalError,
    AuthError,
    CommandError,
    ConflictError,
    DocumentKind,
    TransportError,
)


def parse_kind(value: str) -> DocumentKind:
    try:
        return DocumentKind(value)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"unknown document kind: {value}") from exc


def http_error(exc: ApprovalError) -> HTTPException:
    """Translate a workflow error into the response the view layer expects."""

    if isinstance(exc, AuthError):
        return HTTPException(status_code=401, detail=str(exc) or "authentication required")
    if isinstance(exc, (ConflictError, CommandError)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, TransportError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
