"""Process-wide store and caches used by the HTTP layer and the CLI."""

from __future__ import annotations

from .cache import DialectCache
from .org_shortcodes import OrgShortcodeResolver
from .store import FileDialectStore, StoreConfig

_STORE: FileDialectStore | None = None
_DIALECT_CACHE: DialectCache | None = None
_SHORTCODE_RESOLVER: OrgShortcodeResolver | None = None


def get_store() -> FileDialectStore:
    global _STORE
    if _STORE is None:
        _STORE = FileDialectStore(StoreConfig.from_env())
    return _STORE


def get_dialect_cache() -> DialectCache:
    global _DIALECT_CACHE
    if _DIALECT_CACHE is None:
        store = get_store()
        _DIALECT_CACHE = DialectCache(store, ttl_seconds=store.config.dialect_ttl_seconds)
    return _DIALECT_CACHE


def get_shortcode_resolver() -> OrgShortcodeResolver:
    global _SHORTCODE_RESOLVER
    if _SHORTCODE_RESOLVER is None:
        store = get_store()
        _SHORTCODE_RESOLVER = OrgShortcodeResolver(store, ttl_seconds=store.config.shortcode_ttl_seconds)
    return _SHORTCODE_RESOLVER


def invalidate_organization(organization_id: str) -> None:
    """Drop every cached entry for an organization after its config changed."""
    get_dialect_cache().invalidate(organization_id)
    get_shortcode_resolver().invalidate(organization_id)


def reset_runtime() -> None:
    global _STORE, _DIALECT_CACHE, _SHORTCODE_RESOLVER
    _STORE = None
    _DIALECT_CACHE = None
    _SHORTCODE_RESOLVER = None


__all__ = [
    "get_dialect_cache",
    "get_shortcode_resolver",
    "get_store",
    "invalidate_organization",
    "reset_runtime",
]
