"""Async HTTP transport to the record-keeping backend."""
from __future__ import annotations

import logging
from typing import Any, Callable
from urllib.parse import urlparse

import httpx

from approvals.domain import AuthError, ConflictError, TransportError

logger = logging.getLogger(__name__)

CONFLICT_STATUSES = frozenset({400, 404, 409, 412, 422})
AUTH_STATUSES = frozenset({401, 403})


class ApiTransport:
    """Sends one request per call and maps failures onto the error taxonomy.

    There is no retry here: every call is attempted exactly once.
    """

    def __init__(
        self,
        api_base: str,
        *,
        token_provider: Callable[[], str | None],
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        self._api_base = api_base.rstrip("/")
        self._token_provider = token_provider
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._api_base}{path}"

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider()
        if not token:
            raise AuthError("no active session")
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message")
            if detail:
                return str(detail)
        return response.reason_phrase or str(response.status_code)

    def _raise_for_status(self, response: httpx.Response, *, mutation: bool) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = self._error_detail(response)
        if status in AUTH_STATUSES:
            raise AuthError(detail or "session rejected")
        if mutation and status in CONFLICT_STATUSES:
            raise ConflictError(detail)
        raise TransportError(f"{response.request.method} {response.request.url.path} failed with {status}: {detail}")

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        authenticated: bool = True,
        mutation: bool = False,
    ) -> Any:
        headers = self._auth_headers() if authenticated else {}
        url = self._url(path)
        try:
            response = await self._client.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        self._raise_for_status(response, mutation=mutation)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path} returned an undecodable body") from exc

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self._send("GET", path, params=params)

    async def post(self, path: str, payload: Any, *, authenticated: bool = True) -> Any:
        return await self._send("POST", path, json=payload, authenticated=authenticated, mutation=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["ApiTransport"]
