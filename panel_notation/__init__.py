"""Panel Notation: service notation normalization for panel machining."""

from __future__ import annotations

from importlib import import_module

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazily import subpackages so ``panel_notation.core`` works without explicit imports."""
    try:
        module = import_module(f"{__name__}.{name}")
    except ModuleNotFoundError as exc:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'") from exc
    globals()[name] = module
    return module
