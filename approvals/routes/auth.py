from __future__ import annotations

from fastapi import APIRouter, HTTPException

from approvals.application import get_dashboard_service
from approvals.domain import ApprovalError

from .errors import http_error

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(payload: dict) -> dict:
    username = str(payload.get("username") or payload.get("usuario") or "").strip()
    password = str(payload.get("password") or "")
    if not username or not password:
        raise HTTPException(status_code=400, detail="username and password are required")
    service = get_dashboard_service()
    try:
        identity = await service.login(username, password)
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return {"username": identity.username, "display_name": identity.display_name}


@router.post("/logout")
async def logout() -> dict:
    get_dashboard_service().logout()
    return {"status": "logged_out"}


@router.get("/me")
async def me() -> dict:
    identity = get_dashboard_service().current_identity()
    if identity is None:
        raise HTTPException(status_code=401, detail="not authenticated")
    return {"username": identity.username, "display_name": identity.display_name}
