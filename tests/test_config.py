"""Tests for environment-driven settings."""

import pytest

from unit.config import get_settings, reset_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.strict_mode is False
        assert settings.default_version == "1.0.0"
        assert settings.emit_events is True

    def test_cached(self):
        assert get_settings() is get_settings()

    @pytest.mark.parametrize("raw,expected", [
        ("1", True),
        ("true", True),
        ("YES", True),
        (" on ", True),
        ("0", False),
        ("false", False),
        ("", False),
    ])
    def test_strict_mode_flag(self, monkeypatch, raw, expected):
        monkeypatch.setenv("UNIT_STRICT_MODE", raw)
        reset_settings()
        assert get_settings().strict_mode is expected

    def test_reset_picks_up_changes(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("UNIT_DEFAULT_VERSION", "2.0.0")
        assert get_settings().default_version == "1.0.0"

        reset_settings()
        assert get_settings() is not first
        assert get_settings().default_version == "2.0.0"
