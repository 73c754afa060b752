"""Runtime configuration read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(slots=True)
class Settings:
    api_base: str = "http://localhost:8000"
    http_timeout: float = 30.0
    session_ttl_minutes: int = 30
    page_size: int = 100
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "Settings":
        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        return cls(
            api_base=(os.getenv("APPROVALS_API_BASE") or "http://localhost:8000").rstrip("/"),
            http_timeout=_float_env("APPROVALS_HTTP_TIMEOUT", 30.0),
            session_ttl_minutes=_int_env("APPROVALS_SESSION_TTL_MINUTES", 30),
            page_size=_int_env("APPROVALS_PAGE_SIZE", 100),
            log_level=(os.getenv("APPROVALS_LOG_LEVEL") or "INFO").upper(),
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        )
