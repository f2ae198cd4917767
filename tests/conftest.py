import os
from pathlib import Path

import pytest


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "DIALECT_DIR",
    "DIALECT_CACHE_TTL_SECONDS",
    "SHORTCODE_CACHE_TTL_SECONDS",
    "NL_HEURISTICS_ENABLED",
    "LOG_LEVEL",
    "LOG_JSON",
    "DEBUG",
]

EXAMPLE_DIALECT_DIR = Path(__file__).resolve().parents[1] / "config" / "dialects"


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def runtime_isolation():
    """Drop cached settings and the process-wide dialect/shortcode caches around each test."""
    from panel_notation.core.config import reset_settings
    from panel_notation.core.services.runtime import reset_runtime

    reset_settings()
    reset_runtime()
    try:
        yield
    finally:
        reset_settings()
        reset_runtime()


@pytest.fixture
def dialect_dir(tmp_path, monkeypatch):
    """Point the file-backed store at an empty temporary directory."""
    from panel_notation.core.config import reset_settings

    monkeypatch.setenv("DIALECT_DIR", str(tmp_path))
    reset_settings()
    return tmp_path


@pytest.fixture
def example_dialect_dir(monkeypatch):
    """Point the file-backed store at the shipped example organization configs."""
    from panel_notation.core.config import reset_settings

    monkeypatch.setenv("DIALECT_DIR", str(EXAMPLE_DIALECT_DIR))
    reset_settings()
    return EXAMPLE_DIALECT_DIR
