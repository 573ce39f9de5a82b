"""Tests for settings and the error taxonomy."""

import pytest

from .errors import ErrorCode, RecordBusyError, StorageError
from .settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    settings = Settings(_env_file=None)
    assert settings.api_base_url.endswith("/api")
    assert settings.gemini_api_key is None
    assert settings.low_stock_threshold == 1


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test environment variables override defaults case-insensitively."""
    monkeypatch.setenv("API_BASE_URL", "http://shop.local/api")
    monkeypatch.setenv("low_stock_threshold", "3")
    settings = Settings(_env_file=None)
    assert settings.api_base_url == "http://shop.local/api"
    assert settings.low_stock_threshold == 3


def test_error_to_dict() -> None:
    error = StorageError(
        "Failed to create part", {"status": 500}, code=ErrorCode.STORAGE_WRITE_FAILED
    )
    assert error.to_dict() == {
        "code": "STORAGE_WRITE_FAILED",
        "message": "Failed to create part",
        "details": {"status": 500},
    }
    assert str(error) == "[STORAGE_WRITE_FAILED] Failed to create part"


def test_record_busy_error_names_record() -> None:
    error = RecordBusyError("r1")
    assert error.code is ErrorCode.RECORD_BUSY
    assert error.details == {"id": "r1"}
