"""Service notation endpoints: normalize, format, validate and dialect merge."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from panel_notation.api.dependencies import get_api_key, get_org_id
from panel_notation.core.config import get_settings
from panel_notation.core.errors import ErrorCode
from panel_notation.core.services.dialect import ServiceDialect, merge_with_default
from panel_notation.core.services.formatters import (
    format_cnc_codes,
    format_edgeband_code,
    format_edges_visual,
    format_grooves_code,
    format_holes_code,
    format_services_detailed,
    format_services_summary,
)
from panel_notation.core.services.normalizers import (
    merge_part_services,
    normalize_from_columns,
    normalize_from_text,
)
from panel_notation.core.services.runtime import get_dialect_cache
from panel_notation.core.services.types import PartServices
from panel_notation.core.services.validation import ValidationReport, validate_services

logger = logging.getLogger(__name__)
router = APIRouter()


class NormalizeRequest(BaseModel):
    text: Optional[str] = Field(None, description="Free-text service notation, e.g. '2L2W G-ALL-4-10 H2-110'")
    columns: Optional[Dict[str, Any]] = Field(None, description="Header -> cell value map of one source row")
    column_headers: Optional[List[str]] = None
    only: Optional[List[str]] = Field(None, description="Restrict text normalization to these families")
    dialect: Optional[Dict[str, Any]] = Field(None, description="Inline partial dialect layered over the organization's")
    heuristics: bool = True


class ServiceCodes(BaseModel):
    edgeband: str
    grooves: str
    holes: str
    cnc: str


class NormalizeResponse(BaseModel):
    services: PartServices
    codes: ServiceCodes
    summary: str
    warnings: List[str] = Field(default_factory=list)
    organization_id: Optional[str] = None
    dialect_version: Optional[str] = None


class FormatRequest(BaseModel):
    services: PartServices


class FormatResponse(BaseModel):
    codes: ServiceCodes
    summary: str
    detailed: List[str]
    edges_visual: str


class ValidateRequest(BaseModel):
    services: PartServices


class DialectMergeRequest(BaseModel):
    dialect: Dict[str, Any] = Field(default_factory=dict)


def _codes(services: PartServices) -> ServiceCodes:
    return ServiceCodes(
        edgeband=format_edgeband_code(services.edgeband),
        grooves=format_grooves_code(services.grooves),
        holes=format_holes_code(services.holes),
        cnc=format_cnc_codes(services.cnc),
    )


def _dialect_for(org_id: Optional[str], inline: Optional[Dict[str, Any]]) -> ServiceDialect:
    dialect = get_dialect_cache().get(org_id)
    if inline:
        dialect = merge_with_default(inline, dialect)
    return dialect


@router.post("/normalize", response_model=NormalizeResponse)
async def normalize(
    payload: NormalizeRequest,
    api_key: str = Depends(get_api_key),
    org_id: Optional[str] = Depends(get_org_id),
):
    if not (payload.text and payload.text.strip()) and not payload.columns:
        raise HTTPException(
            status_code=400,
            detail={"code": ErrorCode.INPUT_ERROR.value, "message": "Provide text and/or columns"},
        )
    dialect = _dialect_for(org_id, payload.dialect)
    heuristics = payload.heuristics and get_settings().NL_HEURISTICS_ENABLED

    bundles: List[PartServices] = []
    if payload.text and payload.text.strip():
        try:
            bundles.append(
                normalize_from_text(
                    payload.text,
                    dialect,
                    column_headers=payload.column_headers,
                    only=payload.only,
                    heuristics=heuristics,
                )
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=400,
                detail={"code": ErrorCode.INPUT_ERROR.value, "message": str(exc)},
            ) from exc
    if payload.columns:
        bundles.append(normalize_from_columns(payload.columns, dialect, heuristics=heuristics))

    services = merge_part_services(*bundles)
    report = validate_services(services)
    logger.info(
        "services normalized",
        extra={"organization_id": org_id, "code": format_services_summary(services)},
    )
    return NormalizeResponse(
        services=services,
        codes=_codes(services),
        summary=format_services_summary(services),
        warnings=report.warnings,
        organization_id=org_id,
        dialect_version=dialect.version,
    )


@router.post("/format", response_model=FormatResponse)
async def format_services(payload: FormatRequest, api_key: str = Depends(get_api_key)):
    services = payload.services
    return FormatResponse(
        codes=_codes(services),
        summary=format_services_summary(services),
        detailed=format_services_detailed(services),
        edges_visual=format_edges_visual(services.edgeband),
    )


@router.post("/validate", response_model=ValidationReport)
async def validate(payload: ValidateRequest, api_key: str = Depends(get_api_key)):
    return validate_services(payload.services)


@router.post("/dialect/merge")
async def merge_dialect(
    payload: DialectMergeRequest,
    api_key: str = Depends(get_api_key),
    org_id: Optional[str] = Depends(get_org_id),
) -> Dict[str, Any]:
    """Layer a partial dialect over the default and return the full result."""
    merged = merge_with_default(payload.dialect)
    if org_id and merged.organization_id is None:
        merged = merged.model_copy(update={"organization_id": org_id})
    return merged.model_dump(mode="json")


__all__ = ["router"]
