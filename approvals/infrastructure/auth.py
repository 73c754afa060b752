"""Login exchange against the backend."""
from __future__ import annotations

from pydantic import ValidationError

from approvals.core.schema import LoginRequest, LoginResponse
from approvals.domain import AuthError, ConflictError, Identity, TransportError

from .http import ApiTransport
from .session import SessionStore


class AuthClient:
    def __init__(self, transport: ApiTransport, session: SessionStore) -> None:
        self._transport = transport
        self._session = session

    async def login(self, username: str, password: str) -> Identity:
        payload = LoginRequest(usuario=username, password=password).model_dump()
        try:
            body = await self._transport.post("/auth/login", payload, authenticated=False)
        except ConflictError as exc:
            # the login endpoint answers 400/422 for bad input as well
            raise AuthError(str(exc) or "invalid credentials") from exc
        try:
            response = LoginResponse.model_validate(body)
        except ValidationError as exc:
            raise TransportError("malformed login response") from exc

        identity = Identity(username=response.usuario, display_name=response.nombre)
        self._session.store(response.access_token, identity)
        return identity

    def logout(self) -> None:
        self._session.clear()
