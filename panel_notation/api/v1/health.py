"""Cache status endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from panel_notation.api.dependencies import get_api_key
from panel_notation.core.services.default_dialect import DEFAULT_DIALECT_VERSION
from panel_notation.core.services.runtime import get_dialect_cache, get_shortcode_resolver

router = APIRouter()


class CacheStats(BaseModel):
    size: int
    capacity: int
    ttl_seconds: float
    hits: int
    misses: int
    loads: int
    evictions: int
    inflight: int
    hit_ratio: float | None = None


class CacheStatsResponse(BaseModel):
    status: str
    default_dialect_version: str
    dialects: CacheStats
    shortcodes: CacheStats


def _stats(counters: Dict[str, Any]) -> CacheStats:
    total = counters["hits"] + counters["misses"]
    return CacheStats(**counters, hit_ratio=(counters["hits"] / total) if total else None)


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(api_key: str = Depends(get_api_key)):
    return CacheStatsResponse(
        status="ok",
        default_dialect_version=DEFAULT_DIALECT_VERSION,
        dialects=_stats(get_dialect_cache().stats()),
        shortcodes=_stats(get_shortcode_resolver().stats()),
    )


__all__ = ["router"]
