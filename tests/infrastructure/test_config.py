"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from orderflow.config import get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("ORDERFLOW_DATA_DIR", "ORDERFLOW_DEFAULT_USER", "ORDERFLOW_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.log_level == "warning"
        assert settings.default_user == "system"
        assert settings.orders_file == Path("data") / "orders.json"

    @pytest.mark.parametrize("raw", ["INFO", " Info ", "info"])
    def test_log_level_is_case_insensitive(self, monkeypatch, raw):
        monkeypatch.setenv("ORDERFLOW_LOG_LEVEL", raw)
        assert get_settings().log_level == "info"

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("ORDERFLOW_LOG_LEVEL", "verbose")
        with pytest.raises(ValidationError, match="log_level"):
            get_settings()
