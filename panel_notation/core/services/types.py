"""Canonical service models for panel machining.

Every external notation (cut-list columns, free text, shortcodes) resolves into
these models. Downstream consumers (pricing, optimizer export, preview) only
ever see this representation.

Numeric fields are not range-checked at construction; structural sanity is
reported by :mod:`panel_notation.core.services.validation` as warnings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EdgeSide(str, Enum):
    L1 = "L1"
    L2 = "L2"
    W1 = "W1"
    W2 = "W2"


ALL_EDGE_SIDES: tuple[EdgeSide, ...] = (EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2)
LONG_EDGES: tuple[EdgeSide, ...] = (EdgeSide.L1, EdgeSide.L2)
WIDTH_EDGES: tuple[EdgeSide, ...] = (EdgeSide.W1, EdgeSide.W2)

_EDGE_ORDER = {edge: idx for idx, edge in enumerate(ALL_EDGE_SIDES)}


class PartFace(str, Enum):
    front = "front"
    back = "back"


class HoleFace(str, Enum):
    front = "front"
    back = "back"
    edge = "edge"


class HolePatternKind(str, Enum):
    hinge = "hinge"
    shelf_pins = "shelf_pins"
    handle = "handle"
    knob = "knob"
    drawer_slide = "drawer_slide"
    cam_lock = "cam_lock"
    dowel = "dowel"
    system32 = "system32"
    custom = "custom"


class CncOpType(str, Enum):
    pocket = "pocket"
    contour = "contour"
    drill_array = "drill_array"
    cutout = "cutout"
    text = "text"
    radius = "radius"
    chamfer = "chamfer"
    rebate = "rebate"
    custom = "custom"


ParamValue = Union[bool, int, float, str]
Number = Union[int, float]


def sort_edges(edges: Iterable[Union[EdgeSide, str]]) -> List[EdgeSide]:
    """Deduplicate and order edges as L1, L2, W1, W2."""
    unique = {EdgeSide(e) for e in edges}
    return sorted(unique, key=lambda e: _EDGE_ORDER[e])


# ---------------------------------------------------------------------------
# Edge banding
# ---------------------------------------------------------------------------


class EdgeBandSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    edges: List[EdgeSide] = Field(default_factory=list, description="Banded edges")
    tape_id: Optional[str] = Field(None, description="Edge tape / material reference")
    thickness_mm: Optional[float] = Field(None, description="Tape thickness")
    note: Optional[str] = None


# ---------------------------------------------------------------------------
# Grooves
# ---------------------------------------------------------------------------


class GrooveStops(BaseModel):
    """Stopped groove range measured along the groove from its start."""

    model_config = ConfigDict(frozen=True)

    start_offset_mm: Optional[float] = None
    end_offset_mm: Optional[float] = None


class GrooveSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    on_edge: EdgeSide
    distance_from_edge_mm: float = Field(..., description="Perpendicular offset from on_edge")
    width_mm: float
    depth_mm: float
    face: PartFace = PartFace.back
    stops: Optional[GrooveStops] = None
    profile_id: Optional[str] = None
    note: Optional[str] = None


# ---------------------------------------------------------------------------
# Holes
# ---------------------------------------------------------------------------


class HolePatternSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: HolePatternKind
    ref_edge: EdgeSide = EdgeSide.L1
    offsets_mm: List[float] = Field(default_factory=list, description="Offsets along ref_edge")
    distance_from_edge_mm: float = 22
    count: Optional[int] = None
    diameter_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    hardware_id: Optional[str] = None
    face: Optional[HoleFace] = None
    pattern_id: Optional[str] = None
    note: Optional[str] = None


# ---------------------------------------------------------------------------
# CNC
# ---------------------------------------------------------------------------


class _CncParams(BaseModel):
    model_config = ConfigDict(extra="allow")


class CutoutParams(_CncParams):
    width: Number
    height: Number


class PocketParams(_CncParams):
    width: Number
    height: Number
    depth: Number


class RadiusParams(_CncParams):
    radius: Number
    corners: str = "all"


class RebateParams(_CncParams):
    width: Number
    depth: Number


class ChamferParams(_CncParams):
    size: Number = 3


class ContourParams(_CncParams):
    angle: Optional[Number] = None
    radius: Optional[Number] = None


class TextParams(_CncParams):
    text: Optional[str] = None
    font_height: Optional[Number] = None


class DrillArrayParams(_CncParams):
    count: Optional[int] = None
    diameter: Optional[Number] = None
    spacing: Optional[Number] = None


CNC_PARAM_MODELS: Dict[CncOpType, Type[_CncParams]] = {
    CncOpType.cutout: CutoutParams,
    CncOpType.pocket: PocketParams,
    CncOpType.radius: RadiusParams,
    CncOpType.rebate: RebateParams,
    CncOpType.chamfer: ChamferParams,
    CncOpType.contour: ContourParams,
    CncOpType.text: TextParams,
    CncOpType.drill_array: DrillArrayParams,
}


class CncPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class CncDimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    depth: Optional[float] = None


class CncOperation(BaseModel):
    """A CNC operation.

    ``params`` stays a flat map on the wire. Known keys for every kind other
    than ``custom`` are validated (and coerced) by the matching entry of
    :data:`CNC_PARAM_MODELS`; ``typed_params()`` returns that model.
    """

    model_config = ConfigDict(frozen=True)

    type: CncOpType
    shape_id: str = "custom"
    params: Dict[str, ParamValue] = Field(default_factory=dict)
    face: Optional[PartFace] = None
    position: Optional[CncPosition] = None
    dimensions: Optional[CncDimensions] = None
    note: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _check_params(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        try:
            op_type = CncOpType(data.get("type"))
        except ValueError:
            return data  # field validation reports the bad type
        model = CNC_PARAM_MODELS.get(op_type)
        if model is None:
            return data
        typed = model.model_validate(dict(data.get("params") or {}))
        return {**data, "params": typed.model_dump(exclude_none=True)}

    def typed_params(self) -> Optional[_CncParams]:
        model = CNC_PARAM_MODELS.get(self.type)
        if model is None:
            return None
        return model.model_validate(self.params)


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


class PartServices(BaseModel):
    model_config = ConfigDict(frozen=True)

    edgeband: Optional[EdgeBandSpec] = None
    grooves: List[GrooveSpec] = Field(default_factory=list)
    holes: List[HolePatternSpec] = Field(default_factory=list)
    cnc: List[CncOperation] = Field(default_factory=list)


def has_any_services(services: Optional[PartServices]) -> bool:
    if services is None:
        return False
    return bool(
        (services.edgeband and services.edgeband.edges)
        or services.grooves
        or services.holes
        or services.cnc
    )


def count_services(services: Optional[PartServices]) -> Dict[str, int]:
    if services is None:
        return {"edgeband": 0, "grooves": 0, "holes": 0, "cnc": 0}
    return {
        "edgeband": len(services.edgeband.edges) if services.edgeband else 0,
        "grooves": len(services.grooves),
        "holes": len(services.holes),
        "cnc": len(services.cnc),
    }


def create_edge_band_spec(
    edges: Iterable[Union[EdgeSide, str]],
    tape_id: Optional[str] = None,
    thickness_mm: Optional[float] = None,
    note: Optional[str] = None,
) -> Optional[EdgeBandSpec]:
    """Build an edge-band spec; an empty edge set yields ``None``."""
    ordered = sort_edges(edges)
    if not ordered:
        return None
    return EdgeBandSpec(edges=ordered, tape_id=tape_id, thickness_mm=thickness_mm, note=note)


def create_back_panel_groove(
    width_mm: float = 4,
    depth_mm: float = 10,
    offset_mm: float = 10,
    on_edge: EdgeSide = EdgeSide.W2,
) -> GrooveSpec:
    return GrooveSpec(
        on_edge=on_edge,
        distance_from_edge_mm=offset_mm,
        width_mm=width_mm,
        depth_mm=depth_mm,
        face=PartFace.back,
        note="Back panel groove",
    )


def create_drawer_bottom_groove(
    width_mm: float = 4,
    depth_mm: float = 8,
    offset_mm: float = 12,
) -> GrooveSpec:
    return GrooveSpec(
        on_edge=EdgeSide.W1,
        distance_from_edge_mm=offset_mm,
        width_mm=width_mm,
        depth_mm=depth_mm,
        face=PartFace.back,
        note="Drawer bottom groove",
    )


def merge_services(base: Optional[PartServices], override: Optional[PartServices]) -> PartServices:
    """Layer ``override`` on ``base``: its edge-band wins, lists are concatenated."""
    base = base or PartServices()
    override = override or PartServices()
    return PartServices(
        edgeband=override.edgeband or base.edgeband,
        grooves=[*base.grooves, *override.grooves],
        holes=[*base.holes, *override.holes],
        cnc=[*base.cnc, *override.cnc],
    )


__all__ = [
    "ALL_EDGE_SIDES",
    "CNC_PARAM_MODELS",
    "ChamferParams",
    "CncDimensions",
    "CncOpType",
    "CncOperation",
    "CncPosition",
    "ContourParams",
    "CutoutParams",
    "DrillArrayParams",
    "EdgeBandSpec",
    "EdgeSide",
    "GrooveSpec",
    "GrooveStops",
    "HoleFace",
    "HolePatternKind",
    "HolePatternSpec",
    "LONG_EDGES",
    "ParamValue",
    "PartFace",
    "PartServices",
    "PocketParams",
    "RadiusParams",
    "RebateParams",
    "TextParams",
    "WIDTH_EDGES",
    "count_services",
    "create_back_panel_groove",
    "create_drawer_bottom_groove",
    "create_edge_band_spec",
    "has_any_services",
    "merge_services",
    "sort_edges",
]
