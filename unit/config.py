"""
Unit Settings - Environment-driven defaults.
"""

import os
from functools import lru_cache


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Library settings."""

    def __init__(self):
        # Validators created without an explicit strict_mode use this
        self.strict_mode = _env_flag("UNIT_STRICT_MODE", False)
        self.default_version = os.environ.get("UNIT_DEFAULT_VERSION", "1.0.0")

        # Lifecycle events (learned / evolved / error)
        self.emit_events = _env_flag("UNIT_EMIT_EVENTS", True)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


def reset_settings():
    """Drop cached settings (for testing)."""
    get_settings.cache_clear()
