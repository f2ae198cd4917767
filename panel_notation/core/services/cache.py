"""Time-boxed caches for organization configuration.

The engine itself is stateless; these caches sit between the HTTP layer and
the configuration store. Entries are immutable ``(value, expires_at)`` tuples
swapped in under a lock, so readers see either a whole entry or none.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from panel_notation.utils.metrics import dialect_cache_requests_total

from .dialect import ServiceDialect, merge_with_default

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 300.0


class TTLCache(Generic[V]):
    """Thread-safe TTL map with per-key load de-duplication.

    Concurrent misses on the same key share one loader call: the first caller
    loads, the others block on its future and receive the same value (or the
    same exception). Loader failures are never cached.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        capacity: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self.capacity = max(1, int(capacity))
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Hashable, Tuple[V, float]]" = OrderedDict()
        self._inflight: Dict[Hashable, Future] = {}
        self._generations: Dict[Hashable, int] = {}
        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._evictions = 0

    def _fresh(self, key: Hashable, now: float) -> Optional[Tuple[V, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= now:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def _store(self, key: Hashable, value: V) -> None:
        self._entries[key] = (value, self._clock() + self.ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
            self._evictions += 1

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            entry = self._fresh(key, self._clock())
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry[0]

    def set(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._store(key, value)

    def get_or_load(self, key: Hashable, loader: Callable[[], V]) -> Tuple[V, bool]:
        """Return ``(value, hit)``; on a miss exactly one caller runs ``loader``."""
        with self._lock:
            entry = self._fresh(key, self._clock())
            if entry is not None:
                self._hits += 1
                return entry[0], True
            self._misses += 1
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
                generation = self._generations.get(key, 0)

        if not owner:
            return future.result(), False

        try:
            value = loader()
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
                self._generations.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._loads += 1
            self._inflight.pop(key, None)
            # An invalidate() during the load means the value may already be stale
            if self._generations.pop(key, 0) == generation:
                self._store(key, value)
        future.set_result(value)
        return value, False

    def invalidate(self, key: Hashable) -> bool:
        with self._lock:
            # generations only matter while a load is in flight
            if key in self._inflight:
                self._generations[key] = self._generations.get(key, 0) + 1
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            for key in self._inflight:
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self.capacity,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "loads": self._loads,
                "evictions": self._evictions,
                "inflight": len(self._inflight),
            }


class DialectCache:
    """Organization id -> merged :class:`ServiceDialect`.

    ``None`` (or an unknown organization) yields the global default. A store
    failure is logged and also yields the default, without caching it.
    """

    def __init__(
        self,
        store: Any,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        default: Optional[ServiceDialect] = None,
    ) -> None:
        if default is None:
            from .default_dialect import DEFAULT_DIALECT

            default = DEFAULT_DIALECT
        self.store = store
        self.default = default
        self._cache: TTLCache[ServiceDialect] = TTLCache(ttl_seconds)

    def _load(self, organization_id: str) -> ServiceDialect:
        partial = self.store.load_dialect(organization_id)
        if partial is None:
            return self.default
        merged = merge_with_default(partial, self.default)
        if merged.organization_id is None:
            merged = merged.model_copy(update={"organization_id": organization_id})
        return merged

    def get(self, organization_id: Optional[str]) -> ServiceDialect:
        if not organization_id:
            return self.default
        try:
            dialect, hit = self._cache.get_or_load(organization_id, lambda: self._load(organization_id))
        except Exception as exc:
            dialect_cache_requests_total.labels(result="error").inc()
            logger.warning(
                "dialect load failed, using default",
                extra={
                    "organization_id": organization_id,
                    "cache": "dialect",
                    "error_code": getattr(getattr(exc, "code", None), "value", type(exc).__name__),
                },
            )
            return self.default
        dialect_cache_requests_total.labels(result="hit" if hit else "miss").inc()
        return dialect

    def invalidate(self, organization_id: str) -> bool:
        removed = self._cache.invalidate(organization_id)
        logger.info("dialect cache invalidated", extra={"organization_id": organization_id, "cache": "dialect"})
        return removed

    def clear(self) -> None:
        self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        return self._cache.stats()


__all__ = ["DEFAULT_TTL_SECONDS", "DialectCache", "TTLCache"]
