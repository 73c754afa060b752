import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from approvals.core.settings import DEFAULT_CORS_ORIGINS, Settings


def test_defaults_when_environment_is_empty(monkeypatch):
    for name in (
        "APPROVALS_API_BASE",
        "APPROVALS_HTTP_TIMEOUT",
        "APPROVALS_SESSION_TTL_MINUTES",
        "APPROVALS_PAGE_SIZE",
        "APPROVALS_LOG_LEVEL",
        "API_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.api_base == "http://localhost:8000"
    assert settings.session_ttl_minutes == 30
    assert settings.page_size == 100
    assert settings.cors_origins == DEFAULT_CORS_ORIGINS


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("APPROVALS_API_BASE", "https://erp.example.com/api/")
    monkeypatch.setenv("APPROVALS_HTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("APPROVALS_PAGE_SIZE", "25")
    monkeypatch.setenv("APPROVALS_LOG_LEVEL", "debug")
    monkeypatch.setenv("API_CORS_ORIGINS", "https://a.example.com, https://b.example.com")

    settings = Settings.from_env()

    assert settings.api_base == "https://erp.example.com/api"
    assert settings.http_timeout == 5.5
    assert settings.page_size == 25
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_invalid_numbers_are_rejected(monkeypatch, value):
    monkeypatch.setenv("APPROVALS_SESSION_TTL_MINUTES", value)

    with pytest.raises(ValueError):
        Settings.from_env()
