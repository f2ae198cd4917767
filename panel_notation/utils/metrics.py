"""Prometheus metrics for notation normalization.

All metric objects are defined at import time and registered on the default
registry exposed by the ``/metrics`` mount.
"""

from __future__ import annotations

from prometheus_client import Counter

notation_normalize_total = Counter(
    "notation_normalize_total",
    "Service notations resolved, by family and winning strategy",
    ["family", "strategy"],
)
dialect_cache_requests_total = Counter(
    "dialect_cache_requests_total",
    "Organization dialect cache lookups",
    ["result"],  # hit|miss|error
)
shortcode_resolve_total = Counter(
    "shortcode_resolve_total",
    "Organization shortcode resolutions",
    ["source"],  # org|system|unknown
)


def record_strategy(family: str, strategy: str) -> None:
    notation_normalize_total.labels(family=family, strategy=strategy).inc()


__all__ = [
    "dialect_cache_requests_total",
    "notation_normalize_total",
    "record_strategy",
    "shortcode_resolve_total",
]
