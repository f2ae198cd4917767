"""Shortcode lookup endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from panel_notation.api.dependencies import get_api_key, get_org_id
from panel_notation.core.errors import ErrorCode
from panel_notation.core.services.org_shortcodes import AvailableShortcode, ResolvedShortcode
from panel_notation.core.services.runtime import get_shortcode_resolver, invalidate_organization
from panel_notation.core.services.shortcodes import SHORTCODE_REFERENCE, ServiceType

logger = logging.getLogger(__name__)
router = APIRouter()


class AvailableShortcodesResponse(BaseModel):
    organization_id: Optional[str] = None
    total: int
    shortcodes: List[AvailableShortcode]


class InvalidateResponse(BaseModel):
    organization_id: str
    invalidated: bool = True


@router.get("/resolve", response_model=ResolvedShortcode)
async def resolve_shortcode(
    code: str = Query(..., min_length=1),
    api_key: str = Depends(get_api_key),
    org_id: Optional[str] = Depends(get_org_id),
):
    return get_shortcode_resolver().resolve(code, org_id)


@router.get("/available", response_model=AvailableShortcodesResponse)
async def available_shortcodes(
    service_type: Optional[ServiceType] = None,
    api_key: str = Depends(get_api_key),
    org_id: Optional[str] = Depends(get_org_id),
):
    items = get_shortcode_resolver().available_shortcodes(org_id, service_type)
    return AvailableShortcodesResponse(organization_id=org_id, total=len(items), shortcodes=items)


@router.get("/reference")
async def shortcode_reference(api_key: str = Depends(get_api_key)) -> Dict[str, Any]:
    return SHORTCODE_REFERENCE


@router.post("/cache/invalidate", response_model=InvalidateResponse)
async def invalidate_cache(
    api_key: str = Depends(get_api_key),
    org_id: Optional[str] = Depends(get_org_id),
):
    if not org_id:
        raise HTTPException(
            status_code=400,
            detail={"code": ErrorCode.INPUT_ERROR.value, "message": "X-Org-Id header required"},
        )
    invalidate_organization(org_id)
    logger.info("organization caches invalidated", extra={"organization_id": org_id})
    return InvalidateResponse(organization_id=org_id)


__all__ = ["router"]
