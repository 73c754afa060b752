from __future__ import annotations

import asyncio
import json
import secrets
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from approvals.application import DashboardService
from approvals.core.clock import FixedClock
from approvals.core.settings import Settings
from approvals.domain import Identity

API_BASE = "http://backend.test"
NOW = datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc)


class FakeBackend:
    """In-memory stand-in for the record-keeping API, served via MockTransport."""

    def __init__(self, today: date = NOW.date()) -> None:
        self.today = today
        self.users = {"jsmith": ("secret", "John Smith"), "mlopez": ("secret", "Maria Lopez")}
        self.tokens: dict[str, str] = {}
        self.budgets: dict[tuple[int, int], dict] = {}
        self.orders: dict[tuple[int, int], dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_next: dict[str, int] = {}
        self.gate: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # fixtures
    # ------------------------------------------------------------------
    def add_budget(self, loc: int, number: int, **fields) -> dict:
        record = {
            "Loc_cod": loc,
            "pre_nro": number,
            "pre_est": "G",
            "pre_fec": "2026-10-01",
            "cliente_nombre": f"Cliente {number}",
            "Pre_Neto": 1500000,
            "pre_ref": "Obra",
            "pre_vbggUsu": None,
            "pre_vbggDt": None,
        }
        record.update(fields)
        self.budgets[(loc, number)] = record
        return record

    def add_order(self, loc: int, number: int, **fields) -> dict:
        record = {
            "Loc_cod": loc,
            "ocp_nro": number,
            "ocp_est": "I",
            "ocp_fec": "2026-10-02",
            "proveedor_nombre": f"Proveedor {number}",
            "monto_total": 250000,
            "ocp_A1_Usu": None,
            "ocp_A1_Dt": None,
            "ocp_A1_Hr": None,
        }
        record.update(fields)
        self.orders[(loc, number)] = record
        return record

    def issue_token(self, username: str) -> str:
        token = secrets.token_hex(8)
        self.tokens[token] = username
        return token

    def calls(self, path: str, method: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if request.url.path == path and (method is None or request.method == method)
        )

    # ------------------------------------------------------------------
    # request handling
    # ------------------------------------------------------------------
    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self.gate is not None and request.method == "POST" and path != "/auth/login":
            await self.gate.wait()

        forced = self.fail_next.pop(path, None)
        if forced is not None:
            return httpx.Response(forced, json={"detail": "forced failure"})

        if path == "/auth/login":
            return self._login(request)

        header = request.headers.get("Authorization", "")
        username = self.tokens.get(header.removeprefix("Bearer "))
        if username is None:
            return httpx.Response(401, json={"detail": "Token inválido o expirado"})

        prefix, _, action = path.strip("/").partition("/")
        if prefix == "presupuestos":
            return self._budgets(request, action, username)
        if prefix == "ordenes-compra":
            return self._orders(request, action, username)
        return httpx.Response(404, json={"detail": "not found"})

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content.decode("utf-8"))
        user = self.users.get(body.get("usuario"))
        if user is None or user[0] != body.get("password"):
            return httpx.Response(401, json={"detail": "Usuario o contraseña incorrectos"})
        token = self.issue_token(body["usuario"])
        return httpx.Response(
            200,
            json={"access_token": token, "token_type": "bearer", "usuario": body["usuario"], "nombre": user[1]},
        )

    @staticmethod
    def _key(request: httpx.Request, number_field: str) -> tuple[int, int]:
        body = json.loads(request.content.decode("utf-8"))
        return int(body["Loc_cod"]), int(body[number_field])

    @staticmethod
    def _in_range(value: str | None, params: httpx.QueryParams) -> bool:
        if not value:
            return False
        return params.get("fecha_desde", value) <= value[:10] <= params.get("fecha_hasta", value)

    def _budgets(self, request: httpx.Request, action: str, username: str) -> httpx.Response:
        records = self.budgets
        if action == "pendientes":
            return httpx.Response(200, json=[r for r in records.values() if not r["pre_vbggUsu"]])
        if action == "aprobados":
            params = request.url.params
            usuario = params.get("usuario")
            items = [
                r
                for r in records.values()
                if r["pre_vbggUsu"]
                and (usuario is None or r["pre_vbggUsu"].lower() == usuario)
                and self._in_range(r["pre_vbggDt"], params)
            ]
            return httpx.Response(200, json=items)
        if action == "indicadores":
            pending = sum(1 for r in records.values() if not r["pre_vbggUsu"])
            return httpx.Response(200, json={"pendientes": pending, "aprobados": len(records) - pending})

        key = self._key(request, "pre_nro")
        record = records.get(key)
        if record is None:
            return httpx.Response(404, json={"detail": "Presupuesto no encontrado"})
        if action == "aprobar":
            if record["pre_vbggUsu"]:
                return httpx.Response(409, json={"detail": "El presupuesto ya fue aprobado"})
            record["pre_vbggUsu"] = username
            record["pre_vbggDt"] = self.today.isoformat()
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Presupuesto aprobado",
                    "Loc_cod": key[0],
                    "pre_nro": key[1],
                    "pre_vbggUsu": username,
                    "pre_vbggDt": self.today.isoformat(),
                    "pre_vbggTime": "15:30:00",
                },
            )
        if action == "desaprobar":
            if not record["pre_vbggUsu"]:
                return httpx.Response(409, json={"detail": "El presupuesto no está aprobado"})
            record["pre_vbggUsu"] = None
            record["pre_vbggDt"] = None
            return httpx.Response(200, json={"message": "Presupuesto desaprobado", "pre_nro": key[1], "new_status": record["pre_est"]})
        return httpx.Response(404, json={"detail": "not found"})

    def _orders(self, request: httpx.Request, action: str, username: str) -> httpx.Response:
        records = self.orders
        if action == "pendientes":
            return httpx.Response(200, json=[r for r in records.values() if not r["ocp_A1_Usu"]])
        if action == "aprobados":
            params = request.url.params
            items = [
                r
                for r in records.values()
                if r["ocp_A1_Usu"] == username and self._in_range(r["ocp_A1_Dt"], params)
            ]
            return httpx.Response(200, json=items)
        if action == "indicadores":
            pending = sum(1 for r in records.values() if not r["ocp_A1_Usu"])
            today = sum(1 for r in records.values() if r["ocp_A1_Dt"] == self.today.isoformat())
            return httpx.Response(200, json={"pendientes_count": pending, "aprobados_hoy_count": today})

        key = self._key(request, "ocp_nro")
        record = records.get(key)
        if record is None:
            return httpx.Response(404, json={"detail": "Orden no encontrada"})
        if action == "aprobar":
            if record["ocp_A1_Usu"]:
                return httpx.Response(409, json={"detail": "La orden ya fue aprobada"})
            record["ocp_A1_Usu"] = username
            record["ocp_A1_Dt"] = self.today.isoformat()
            record["ocp_A1_Hr"] = "15:30:00"
            return httpx.Response(200, json={"message": "Orden aprobada", "ocp_nro": key[1], "new_status": "A"})
        if action == "desaprobar":
            if not record["ocp_A1_Usu"]:
                return httpx.Response(409, json={"detail": "La orden no está aprobada"})
            record["ocp_A1_Usu"] = None
            record["ocp_A1_Dt"] = None
            record["ocp_A1_Hr"] = None
            return httpx.Response(200, json={"message": "Orden desaprobada", "ocp_nro": key[1], "new_status": "I"})
        return httpx.Response(404, json={"detail": "not found"})


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def http_client(backend) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture()
def service(http_client, clock) -> DashboardService:
    return DashboardService.from_settings(Settings(api_base=API_BASE), http_client=http_client, clock=clock)


@pytest.fixture()
def identity() -> Identity:
    return Identity(username="jsmith", display_name="John Smith")


@pytest.fixture()
def logged_in(service, backend, identity) -> DashboardService:
    service.session.store(backend.issue_token(identity.username), identity)
    return service
