from __future__ import annotations

from fastapi import APIRouter, HTTPException

from approvals.application import get_dashboard_service
from approvals.domain import ApprovalError, CommandAction, CommandState, DocumentKey

from .errors import http_error, parse_kind

router = APIRouter(prefix="/command", tags=["command"])


def _idle() -> dict:
    return {"state": CommandState.IDLE.value}


@router.get("")
async def get_command() -> dict:
    command = get_dashboard_service().command
    return command.to_dict() if command else _idle()


@router.post("")
async def request_action(payload: dict) -> dict:
    kind = parse_kind(str(payload.get("kind") or ""))
    try:
        key = DocumentKey(int(payload["location_code"]), int(payload["document_number"]))
        action = CommandAction(str(payload.get("action") or CommandAction.APPROVE.value))
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="location_code, document_number and a valid action are required") from exc

    service = get_dashboard_service()
    try:
        command = service.request_action(kind, key, action)
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return command.to_dict()


@router.post("/confirm")
async def confirm() -> dict:
    service = get_dashboard_service()
    try:
        command = await service.confirm()
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return command.to_dict()


@router.post("/cancel")
async def cancel() -> dict:
    service = get_dashboard_service()
    try:
        service.cancel()
    except ApprovalError as exc:
        raise http_error(exc) from exc
    return _idle()
