from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from approvals.application import Tab, get_dashboard_service
from approvals.domain import ApprovalError

from .errors import http_error, parse_kind

router = APIRouter(tags=["documents"])


@router.get("/indicators")
async def get_overview() -> dict:
    service = get_dashboard_service()
    try:
        items = await service.overview()
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return {"items": [item.to_dict() for item in items]}


@router.get("/{kind}/documents")
async def list_documents(kind: str, tab: str | None = Query(default=None)) -> dict:
    """Render a document page; ``tab`` is the value found in the page URL."""
    document_kind = parse_kind(kind)
    service = get_dashboard_service()
    service.navigate(document_kind, tab)
    try:
        view = await service.list_documents(document_kind)
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return view.to_dict()


@router.post("/{kind}/tab")
async def select_tab(kind: str, payload: dict) -> dict:
    document_kind = parse_kind(kind)
    try:
        tab = Tab(str(payload.get("tab") or ""))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="tab must be pendientes or aprobados") from exc
    service = get_dashboard_service()
    query = service.select_tab(document_kind, tab)
    return {"tab": tab.value, "query": query}


@router.get("/{kind}/indicators")
async def get_indicators(kind: str) -> dict:
    document_kind = parse_kind(kind)
    service = get_dashboard_service()
    try:
        indicators = await service.indicators(document_kind)
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return indicators.to_dict()
