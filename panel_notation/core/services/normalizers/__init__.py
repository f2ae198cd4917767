"""Bundle entry points over the four family normalizers."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from ..dialect import ServiceDialect
from ..raw_fields import RawServiceFields, extract_raw_fields_from_columns, extract_raw_fields_from_text
from ..types import EdgeBandSpec, PartServices, create_edge_band_spec
from .cnc import infer_cnc_type, normalize_cnc
from .drilling import normalize_holes
from .edgeband import normalize_edgeband, normalize_xx_notation
from .groove import normalize_grooves

FAMILIES = ("edgeband", "groove", "drilling", "cnc")


class NormalizationResult(BaseModel):
    services: PartServices = Field(default_factory=PartServices)
    warnings: List[str] = Field(default_factory=list)


def normalize_services(
    raw: Optional[RawServiceFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> PartServices:
    """Normalize every family present on ``raw``; absent families stay empty."""
    if raw is None:
        return PartServices()
    return PartServices(
        edgeband=normalize_edgeband(raw.edgeband, dialect, heuristics=heuristics),
        grooves=normalize_grooves(raw.groove, dialect, heuristics=heuristics) or [],
        holes=normalize_holes(raw.drilling, dialect, heuristics=heuristics) or [],
        cnc=normalize_cnc(raw.cnc, dialect, heuristics=heuristics) or [],
    )


def _restrict(raw: RawServiceFields, only: Optional[Iterable[str]]) -> RawServiceFields:
    if only is None:
        return raw
    keep = set(only)
    unknown = keep - set(FAMILIES)
    if unknown:
        raise ValueError(f"Unknown service families: {sorted(unknown)}")
    return raw.model_copy(update={family: None for family in FAMILIES if family not in keep})


def normalize_from_text(
    text: str,
    dialect: Optional[ServiceDialect] = None,
    column_headers: Optional[Sequence[str]] = None,
    only: Optional[Iterable[str]] = None,
    *,
    heuristics: bool = True,
) -> PartServices:
    raw = extract_raw_fields_from_text(text, column_headers)
    return normalize_services(_restrict(raw, only), dialect, heuristics=heuristics)


def normalize_from_columns(
    columns: Mapping[str, Any],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> PartServices:
    raw = extract_raw_fields_from_columns(columns, dialect)
    return normalize_services(raw, dialect, heuristics=heuristics)


def normalize_and_validate(
    raw: Optional[RawServiceFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> NormalizationResult:
    from ..validation import validate_services

    services = normalize_services(raw, dialect, heuristics=heuristics)
    report = validate_services(services)
    return NormalizationResult(services=services, warnings=report.warnings)


def _merge_edgeband(bands: Sequence[EdgeBandSpec]) -> Optional[EdgeBandSpec]:
    if not bands:
        return None
    edges = [edge for band in bands for edge in band.edges]
    tape_id = next((b.tape_id for b in bands if b.tape_id), None)
    thickness = next((b.thickness_mm for b in bands if b.thickness_mm is not None), None)
    note = next((b.note for b in bands if b.note), None)
    return create_edge_band_spec(edges, tape_id=tape_id, thickness_mm=thickness, note=note)


def merge_part_services(*bundles: Optional[PartServices]) -> PartServices:
    """Combine bundles: edge sets are united, every list is concatenated in order."""
    present = [b for b in bundles if b is not None]
    return PartServices(
        edgeband=_merge_edgeband([b.edgeband for b in present if b.edgeband is not None]),
        grooves=[g for b in present for g in b.grooves],
        holes=[h for b in present for h in b.holes],
        cnc=[c for b in present for c in b.cnc],
    )


__all__ = [
    "FAMILIES",
    "NormalizationResult",
    "infer_cnc_type",
    "merge_part_services",
    "normalize_and_validate",
    "normalize_cnc",
    "normalize_edgeband",
    "normalize_from_columns",
    "normalize_from_text",
    "normalize_grooves",
    "normalize_holes",
    "normalize_services",
    "normalize_xx_notation",
]
