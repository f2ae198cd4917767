"""Structural sanity checks on a canonical bundle.

Construction never range-checks numbers; this module reports what downstream
consumers (pricing, optimizer export, preview) could not make sense of.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .shortcodes import format_number
from .types import CncOperation, CncOpType, EdgeBandSpec, GrooveSpec, HolePatternKind, HolePatternSpec, PartServices


class ValidationReport(BaseModel):
    valid: bool = True
    warnings: List[str] = Field(default_factory=list)


def _num(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _edgeband_warnings(spec: EdgeBandSpec) -> List[str]:
    warnings: List[str] = []
    if not spec.edges:
        warnings.append("Edgeband spec has no edges")
    if len(set(spec.edges)) != len(spec.edges):
        warnings.append("Edgeband has duplicate edges")
    if spec.thickness_mm is not None and spec.thickness_mm <= 0:
        warnings.append(f"Edgeband thickness must be positive: {format_number(spec.thickness_mm)}")
    return warnings


def _groove_warnings(spec: GrooveSpec) -> List[str]:
    warnings: List[str] = []
    if spec.width_mm <= 0:
        warnings.append(f"Groove width must be positive: {format_number(spec.width_mm)}")
    if spec.depth_mm <= 0:
        warnings.append(f"Groove depth must be positive: {format_number(spec.depth_mm)}")
    if spec.distance_from_edge_mm < 0:
        warnings.append("Groove offset cannot be negative")
    stops = spec.stops
    if stops is not None:
        start, end = stops.start_offset_mm, stops.end_offset_mm
        if (start is not None and start < 0) or (end is not None and end < 0):
            warnings.append("Groove stop offsets cannot be negative")
        if start is not None and end is not None and start >= end:
            warnings.append("Groove stop range is empty")
    return warnings


def _hole_warnings(spec: HolePatternSpec) -> List[str]:
    warnings: List[str] = []
    if spec.count is not None and spec.count <= 0:
        warnings.append("Hole count must be positive")
    if spec.distance_from_edge_mm < 0:
        warnings.append("Hole distance from edge cannot be negative")
    if any(o < 0 for o in spec.offsets_mm):
        warnings.append("Hole offsets cannot be negative")
    if spec.diameter_mm is not None and spec.diameter_mm <= 0:
        warnings.append("Hole diameter must be positive")
    if spec.depth_mm is not None and spec.depth_mm <= 0:
        warnings.append("Hole depth must be positive")
    if spec.kind == HolePatternKind.handle and len(spec.offsets_mm) != 2:
        warnings.append("Handle pattern needs exactly two offsets")
    return warnings


def _cnc_warnings(op: CncOperation) -> List[str]:
    warnings: List[str] = []
    p = op.params
    if op.type == CncOpType.cutout:
        for key in ("width", "height"):
            value = _num(p.get(key))
            if value is None or value <= 0:
                warnings.append(f"Cutout {key} must be positive")
    elif op.type == CncOpType.pocket:
        for key in ("width", "height", "depth"):
            value = _num(p.get(key))
            if value is None or value <= 0:
                warnings.append(f"Pocket {key} must be positive")
    elif op.type == CncOpType.radius:
        value = _num(p.get("radius"))
        if value is None or value <= 0:
            warnings.append("Corner radius must be positive")
    elif op.type == CncOpType.rebate:
        for key in ("width", "depth"):
            value = _num(p.get(key))
            if value is None or value <= 0:
                warnings.append(f"Rebate {key} must be positive")
    elif op.type == CncOpType.chamfer:
        value = _num(p.get("size", 3))
        if value is None or value <= 0:
            warnings.append("Chamfer size must be positive")
    return warnings


def validate_services(services: Optional[PartServices]) -> ValidationReport:
    """Collect every structural warning; never raises and never mutates."""
    if services is None:
        return ValidationReport()
    warnings: List[str] = []
    if services.edgeband is not None:
        warnings.extend(_edgeband_warnings(services.edgeband))
    for groove in services.grooves:
        warnings.extend(_groove_warnings(groove))
    for hole in services.holes:
        warnings.extend(_hole_warnings(hole))
    for op in services.cnc:
        warnings.extend(_cnc_warnings(op))
    return ValidationReport(valid=not warnings, warnings=warnings)


__all__ = ["ValidationReport", "validate_services"]
