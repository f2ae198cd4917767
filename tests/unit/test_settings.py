from pathlib import Path

from panel_notation.core.config import get_settings, reset_settings
from panel_notation.core.services.runtime import get_dialect_cache, get_store, reset_runtime


def test_defaults():
    settings = get_settings()
    assert settings.DIALECT_DIR == "config/dialects"
    assert settings.DIALECT_CACHE_TTL_SECONDS == 300.0
    assert settings.NL_HEURISTICS_ENABLED is True


def test_environment_overrides(monkeypatch):
    assert get_settings().DIALECT_CACHE_TTL_SECONDS == 300.0
    monkeypatch.setenv("DIALECT_CACHE_TTL_SECONDS", "15")
    monkeypatch.setenv("NL_HEURISTICS_ENABLED", "false")
    # cached until reset
    assert get_settings().DIALECT_CACHE_TTL_SECONDS == 300.0
    reset_settings()
    settings = get_settings()
    assert settings.DIALECT_CACHE_TTL_SECONDS == 15.0
    assert settings.NL_HEURISTICS_ENABLED is False


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_runtime_follows_settings(dialect_dir, monkeypatch):
    monkeypatch.setenv("DIALECT_CACHE_TTL_SECONDS", "42")
    reset_settings()
    reset_runtime()
    assert get_store().config.dir_path == Path(dialect_dir)
    assert get_dialect_cache().stats()["ttl_seconds"] == 42.0
