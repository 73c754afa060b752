"""Wire models for the record-keeping backend.

Field names follow the backend's JSON; everything not declared here is
kept through ``extra="allow"`` so rendering code still sees it.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class LoginRequest(_WireModel):
    usuario: str
    password: str


class LoginResponse(_WireModel):
    access_token: str
    token_type: str = "bearer"
    usuario: str
    nombre: str = ""


class BudgetRecord(_WireModel):
    location_code: int = Field(alias="Loc_cod")
    document_number: int = Field(alias="pre_nro")
    status: str | None = Field(default=None, alias="pre_est")
    approver_user: str | None = Field(default=None, alias="pre_vbggUsu")
    approval_date: str | None = Field(default=None, alias="pre_vbggDt")


class PurchaseOrderRecord(_WireModel):
    location_code: int = Field(alias="Loc_cod")
    document_number: int = Field(alias="ocp_nro")
    status: str | None = Field(default=None, alias="ocp_est")
    approver_user: str | None = Field(default=None, alias="ocp_A1_Usu")
    approval_date: str | None = Field(default=None, alias="ocp_A1_Dt")
    approval_time: str | None = Field(default=None, alias="ocp_A1_Hr")


class BudgetIndicators(_WireModel):
    pendientes: int = 0
    aprobados: int = 0


class PurchaseOrderIndicators(_WireModel):
    pendientes_count: int = 0
    aprobados_hoy_count: int = 0


class BudgetApprovalResponse(_WireModel):
    success: bool = True
    message: str = ""
    location_code: int | None = Field(default=None, alias="Loc_cod")
    document_number: int | None = Field(default=None, alias="pre_nro")
    approver_user: str | None = Field(default=None, alias="pre_vbggUsu")
    approval_date: str | None = Field(default=None, alias="pre_vbggDt")
    approval_time: str | None = Field(default=None, alias="pre_vbggTime")


class StatusChangeResponse(_WireModel):
    """Response of the purchase-order endpoints and of budget unapproval."""

    message: str = ""
    new_status: str | None = None
    ocp_nro: int | None = None
    pre_nro: int | None = None
