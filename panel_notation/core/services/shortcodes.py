"""Canonical shortcode codec.

Official short notations for the four service families plus the ``@`` override
grammar that can be appended to any of them::

    2L2W            all four edges banded
    GL-4-10         grooves on both long edges, 4mm wide, 10mm in
    H2-110          two hinges, 110mm from the ends
    CUTOUT-SINK-600x500
    GL-4-10@d6      same groove, 6mm deep

Every ``decode_*`` function is total: malformed input returns ``None``, never
raises. ``encode_*`` is the structural inverse and canonicalizes (a groove on
all four edges always encodes as ``G-ALL-...``).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .types import (
    ALL_EDGE_SIDES,
    LONG_EDGES,
    WIDTH_EDGES,
    CncOperation,
    CncOpType,
    EdgeSide,
    GrooveSpec,
    HolePatternKind,
    HolePatternSpec,
    PartFace,
    sort_edges,
)

Number = Union[int, float]

NUMBER_RE = r"\d+(?:\.\d+)?"

DEFAULT_GROOVE_DEPTH_MM = 10


def parse_number(text: str) -> Number:
    value = float(text)
    return int(value) if value.is_integer() else value


def format_number(value: Optional[Number]) -> str:
    """Render ``110.0`` as ``110`` and ``3.5`` as ``3.5``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(int(value))
    if float(value).is_integer():
        return str(int(value))
    return ("%f" % value).rstrip("0").rstrip(".")


# ============================================================================
# Override grammar
# ============================================================================

OVERRIDE_PREFIXES: Dict[str, str] = {
    "d": "depth",
    "depth": "depth",
    "t": "depth",
    "thk": "depth",
    "thickness": "depth",
    "w": "width",
    "width": "width",
    "o": "offset",
    "off": "offset",
    "offset": "offset",
    "dia": "diameter",
    "diameter": "diameter",
    "c": "count",
    "cnt": "count",
    "count": "count",
    "cc": "centers",
    "ctr": "centers",
    "centers": "centers",
    "r": "radius",
    "radius": "radius",
}

# Rendering order for shortcode_with_overrides
_OVERRIDE_RENDER: Tuple[Tuple[str, str], ...] = (
    ("depth", "d"),
    ("width", "w"),
    ("offset", "o"),
    ("diameter", "dia"),
    ("count", "c"),
    ("centers", "cc"),
    ("radius", "r"),
)

_BARE_NUMBER_RE = re.compile(rf"^{NUMBER_RE}$")
_OVERRIDE_TOKEN_RE = re.compile(rf"([a-z]+)({NUMBER_RE})")


class ParsedShortcode(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    base_code: str
    overrides: Dict[str, Number] = Field(default_factory=dict)
    has_overrides: bool = False


def parse_override_string(text: str) -> Dict[str, Number]:
    """Parse the part after ``@``: ``"10"``, ``"d10w4"``, ``"dia35"``, ``"cc128"``."""
    overrides: Dict[str, Number] = {}
    text = (text or "").strip().lower()
    if not text:
        return overrides
    if _BARE_NUMBER_RE.match(text):
        overrides["value"] = parse_number(text)
        return overrides
    for prefix, num in _OVERRIDE_TOKEN_RE.findall(text):
        key = OVERRIDE_PREFIXES.get(prefix, prefix)
        value = parse_number(num)
        if key == "count":
            value = int(round(value))
        overrides[key] = value
    return overrides


def parse_shortcode(text: str) -> ParsedShortcode:
    raw = (text or "").strip()
    base, sep, suffix = raw.partition("@")
    if not sep:
        return ParsedShortcode(raw=raw, base_code=raw.upper())
    overrides = parse_override_string(suffix)
    return ParsedShortcode(
        raw=raw,
        base_code=base.strip().upper(),
        overrides=overrides,
        has_overrides=bool(overrides),
    )


def shortcode_with_overrides(base_code: str, overrides: Mapping[str, Number]) -> str:
    if not overrides:
        return base_code
    if set(overrides) == {"value"}:
        return f"{base_code}@{format_number(overrides['value'])}"
    parts: List[str] = []
    for key, prefix in _OVERRIDE_RENDER:
        if overrides.get(key) is not None:
            parts.append(f"{prefix}{format_number(overrides[key])}")
    known = {key for key, _ in _OVERRIDE_RENDER} | {"value"}
    for key, val in overrides.items():
        if key not in known and val is not None:
            parts.append(f"{key}{format_number(val)}")
    return f"{base_code}@{''.join(parts)}" if parts else base_code


# ============================================================================
# Edge banding
# ============================================================================

_ALL = ALL_EDGE_SIDES
L1, L2, W1, W2 = EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2

EDGE_CODES: Dict[str, Tuple[EdgeSide, ...]] = {
    "0": (),
    "-": (),
    "NONE": (),
    "L": (L1,),
    "L1": (L1,),
    "L2": (L2,),
    "W": (W1,),
    "W1": (W1,),
    "W2": (W2,),
    "2L": (L1, L2),
    "2W": (W1, W2),
    "L2W": (L1, W1, W2),
    "L2W1": (L1, W1, W2),
    "2L1W": (L1, L2, W1),
    "2LW": (L1, L2, W1),
    "2L2W": _ALL,
    "ALL": _ALL,
    "4": _ALL,
    "4S": _ALL,
}

# Preferred code per edge set
_EDGE_SET_CODES: Dict[Tuple[EdgeSide, ...], str] = {
    (): "0",
    (L1,): "L1",
    (L2,): "L2",
    (W1,): "W1",
    (W2,): "W2",
    (L1, L2): "2L",
    (W1, W2): "2W",
    (L1, W1, W2): "L2W",
    (L1, L2, W1): "2L1W",
    _ALL: "2L2W",
}

_EDGE_LIST_RE = re.compile(r"^(?:L1|L2|W1|W2)(?:\s*[+,]\s*(?:L1|L2|W1|W2))*$")


def decode_edges(code: Optional[str]) -> Optional[List[EdgeSide]]:
    """Decode an edge-band code; ``[]`` means explicitly none, ``None`` unknown."""
    if code is None:
        return None
    normalized = str(code).strip().upper()
    if normalized in EDGE_CODES:
        return list(EDGE_CODES[normalized])
    if _EDGE_LIST_RE.match(normalized):
        return sort_edges(re.findall(r"[LW][12]", normalized))
    return None


def encode_edges(edges: Iterable[Union[EdgeSide, str]]) -> str:
    ordered = tuple(sort_edges(edges))
    code = _EDGE_SET_CODES.get(ordered)
    if code is not None:
        return code
    return "+".join(e.value for e in ordered)


# ============================================================================
# Grooves
# ============================================================================


class GrooveCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    edges: List[EdgeSide]
    width_mm: float
    offset_mm: float


def _groove(edges: Sequence[EdgeSide], width: Number, offset: Number) -> GrooveCode:
    return GrooveCode(edges=list(edges), width_mm=width, offset_mm=offset)


GROOVE_PRESETS: Dict[str, GrooveCode] = {
    "G-ALL-4-12": _groove(_ALL, 4, 12),
    "G-ALL-4-10": _groove(_ALL, 4, 10),
    "G-ALL-3-10": _groove(_ALL, 3, 10),
    "GL-4-12": _groove(LONG_EDGES, 4, 12),
    "GL-4-10": _groove(LONG_EDGES, 4, 10),
    "GW-4-12": _groove(WIDTH_EDGES, 4, 12),
    "GW-4-10": _groove(WIDTH_EDGES, 4, 10),
    "GL1-4-10": _groove((L1,), 4, 10),
    "GL2-4-10": _groove((L2,), 4, 10),
    "GW1-4-10": _groove((W1,), 4, 10),
    "GW2-4-10": _groove((W2,), 4, 10),
}

_GROOVE_EDGE_PARTS: Dict[str, Tuple[EdgeSide, ...]] = {
    "": _ALL,
    "-ALL": _ALL,
    "ALL": _ALL,
    "L": LONG_EDGES,
    "W": WIDTH_EDGES,
    "L1": (L1,),
    "L2": (L2,),
    "W1": (W1,),
    "W2": (W2,),
}

GROOVE_CODE_RE = re.compile(rf"^G(-ALL|ALL|L1|L2|W1|W2|L|W)?-({NUMBER_RE})-({NUMBER_RE})$")


def decode_groove(code: Optional[str]) -> Optional[GrooveCode]:
    if not code:
        return None
    normalized = str(code).strip().upper()
    preset = GROOVE_PRESETS.get(normalized)
    if preset is not None:
        return preset.model_copy(deep=True)
    match = GROOVE_CODE_RE.match(normalized)
    if not match:
        return None
    edge_part, width, offset = match.groups()
    edges = _GROOVE_EDGE_PARTS[edge_part or ""]
    return _groove(edges, parse_number(width), parse_number(offset))


def groove_edge_part(edges: Iterable[EdgeSide]) -> Optional[str]:
    """Edge token for a groove code, or ``None`` when no single token covers the set."""
    ordered = tuple(sort_edges(edges))
    if ordered == _ALL:
        return "-ALL"
    if ordered == LONG_EDGES:
        return "L"
    if ordered == WIDTH_EDGES:
        return "W"
    if len(ordered) == 1:
        return ordered[0].value
    return None


def encode_groove(code: GrooveCode) -> str:
    """Encode a groove code; edge sets without a single token yield one code per edge."""
    suffix = f"-{format_number(code.width_mm)}-{format_number(code.offset_mm)}"
    part = groove_edge_part(code.edges)
    if part is not None:
        return f"G{part}{suffix}"
    return ", ".join(f"G{edge.value}{suffix}" for edge in sort_edges(code.edges))


def groove_specs_from_code(
    code: GrooveCode,
    depth_mm: float = DEFAULT_GROOVE_DEPTH_MM,
    face: PartFace = PartFace.back,
    note: Optional[str] = None,
) -> List[GrooveSpec]:
    """Expand a groove code into one spec per edge."""
    return [
        GrooveSpec(
            on_edge=edge,
            distance_from_edge_mm=code.offset_mm,
            width_mm=code.width_mm,
            depth_mm=depth_mm,
            face=face,
            note=note,
        )
        for edge in sort_edges(code.edges)
    ]


def encode_grooves(
    specs: Sequence[GrooveSpec], default_depth_mm: float = DEFAULT_GROOVE_DEPTH_MM
) -> List[str]:
    """Group grooves sharing width/offset/depth into as few codes as possible.

    A depth other than ``default_depth_mm`` is carried as a ``@d`` override.
    """
    groups: Dict[Tuple[float, float, float], List[EdgeSide]] = {}
    for spec in specs:
        key = (spec.width_mm, spec.distance_from_edge_mm, spec.depth_mm)
        groups.setdefault(key, []).append(spec.on_edge)
    codes: List[str] = []
    for (width, offset, depth), edges in groups.items():
        base = encode_groove(_groove(sort_edges(edges), width, offset))
        if depth != default_depth_mm:
            base = ", ".join(
                shortcode_with_overrides(part, {"depth": depth}) for part in base.split(", ")
            )
        codes.append(base)
    return codes


# ============================================================================
# Holes
# ============================================================================


class HoleCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: HolePatternKind
    count: Optional[int] = None
    offset_mm: Optional[float] = None
    centers_mm: Optional[float] = None
    position: Optional[str] = None
    pattern: Optional[str] = None


_K = HolePatternKind

HOLE_PRESETS: Dict[str, HoleCode] = {
    "H2-110": HoleCode(kind=_K.hinge, count=2, offset_mm=110),
    "H2-100": HoleCode(kind=_K.hinge, count=2, offset_mm=100),
    "H3-90": HoleCode(kind=_K.hinge, count=3, offset_mm=90),
    "H3-100": HoleCode(kind=_K.hinge, count=3, offset_mm=100),
    "H4-80": HoleCode(kind=_K.hinge, count=4, offset_mm=80),
    "SP-ALL": HoleCode(kind=_K.shelf_pins, pattern="full_column"),
    "SP-32": HoleCode(kind=_K.system32, pattern="32mm_system"),
    "SP-HALF": HoleCode(kind=_K.shelf_pins, pattern="half_column"),
    "HD-CC96": HoleCode(kind=_K.handle, centers_mm=96),
    "HD-CC128": HoleCode(kind=_K.handle, centers_mm=128),
    "HD-CC160": HoleCode(kind=_K.handle, centers_mm=160),
    "HD-CC192": HoleCode(kind=_K.handle, centers_mm=192),
    "HD-CC256": HoleCode(kind=_K.handle, centers_mm=256),
    "KN-CTR": HoleCode(kind=_K.knob, position="center"),
    "KN-CENTRE": HoleCode(kind=_K.knob, position="center"),
    "KN-37": HoleCode(kind=_K.knob, offset_mm=37),
    "DS-STD": HoleCode(kind=_K.drawer_slide, pattern="standard"),
    "DS-UNDER": HoleCode(kind=_K.drawer_slide, pattern="undermount"),
    "CAM-STD": HoleCode(kind=_K.cam_lock, pattern="standard"),
    "CAM-MINI": HoleCode(kind=_K.cam_lock, pattern="minifix"),
    "DWL-2": HoleCode(kind=_K.dowel, count=2),
    "DWL-3": HoleCode(kind=_K.dowel, count=3),
}

HINGE_CODE_RE = re.compile(rf"^H(\d+)-({NUMBER_RE})$")
HANDLE_CODE_RE = re.compile(rf"^HD-CC({NUMBER_RE})$")
KNOB_CODE_RE = re.compile(rf"^KN-({NUMBER_RE})$")
DOWEL_CODE_RE = re.compile(r"^DWL-(\d+)$")
CUSTOM_HOLE_RE = re.compile(r"^HOLE-([A-Z0-9_]+)$")
_PATTERN_ID_STRIP_RE = re.compile(r"[^A-Z0-9_]+")


def decode_hole(code: Optional[str]) -> Optional[HoleCode]:
    if not code:
        return None
    normalized = str(code).strip().upper()
    preset = HOLE_PRESETS.get(normalized)
    if preset is not None:
        return preset
    match = HINGE_CODE_RE.match(normalized)
    if match:
        return HoleCode(kind=_K.hinge, count=int(match.group(1)), offset_mm=parse_number(match.group(2)))
    match = HANDLE_CODE_RE.match(normalized)
    if match:
        return HoleCode(kind=_K.handle, centers_mm=parse_number(match.group(1)))
    match = KNOB_CODE_RE.match(normalized)
    if match:
        return HoleCode(kind=_K.knob, offset_mm=parse_number(match.group(1)))
    match = DOWEL_CODE_RE.match(normalized)
    if match:
        return HoleCode(kind=_K.dowel, count=int(match.group(1)))
    match = CUSTOM_HOLE_RE.match(normalized)
    if match:
        return HoleCode(kind=_K.custom, pattern=match.group(1))
    return None


def encode_hole(code: HoleCode) -> str:
    kind = code.kind
    if kind == _K.hinge:
        return f"H{code.count or 2}-{format_number(code.offset_mm or 100)}"
    if kind == _K.handle:
        return f"HD-CC{format_number(code.centers_mm or 96)}"
    if kind == _K.knob:
        if code.position == "center":
            return "KN-CTR"
        return f"KN-{format_number(code.offset_mm or 37)}"
    if kind == _K.shelf_pins:
        return "SP-HALF" if code.pattern == "half_column" else "SP-ALL"
    if kind == _K.system32:
        return "SP-32"
    if kind == _K.drawer_slide:
        return "DS-UNDER" if code.pattern == "undermount" else "DS-STD"
    if kind == _K.cam_lock:
        return "CAM-MINI" if code.pattern == "minifix" else "CAM-STD"
    if kind == _K.dowel:
        return f"DWL-{code.count or 2}"
    return f"HOLE-{custom_pattern_id(code.pattern)}"


def custom_pattern_id(pattern: Optional[str]) -> str:
    """Pattern id as it appears in a ``HOLE-<ID>`` code."""
    cleaned = _PATTERN_ID_STRIP_RE.sub("_", (pattern or "").strip().upper()).strip("_")
    return cleaned or "CUSTOM"


SYSTEM32_OFFSETS: Tuple[float, ...] = (37, 69, 101)


def hole_spec_from_code(code: HoleCode) -> HolePatternSpec:
    """Default geometry for a decoded hole code."""
    kind = code.kind
    if kind == _K.hinge:
        return HolePatternSpec(
            kind=kind,
            offsets_mm=[code.offset_mm or 100],
            distance_from_edge_mm=22,
            count=code.count or 2,
        )
    if kind == _K.handle:
        return HolePatternSpec(
            kind=kind, offsets_mm=[0, code.centers_mm or 96], distance_from_edge_mm=30
        )
    if kind == _K.knob:
        if code.position == "center":
            return HolePatternSpec(kind=kind, offsets_mm=[], distance_from_edge_mm=0, note="Centered")
        return HolePatternSpec(kind=kind, offsets_mm=[code.offset_mm or 37], distance_from_edge_mm=37)
    if kind in (_K.shelf_pins, _K.system32):
        return HolePatternSpec(
            kind=kind,
            offsets_mm=list(SYSTEM32_OFFSETS),
            distance_from_edge_mm=37,
            pattern_id=code.pattern,
        )
    if kind == _K.drawer_slide:
        undermount = code.pattern == "undermount"
        return HolePatternSpec(
            kind=kind,
            ref_edge=EdgeSide.W1,
            offsets_mm=[37, 261] if undermount else [37, 100],
            distance_from_edge_mm=37,
            pattern_id=code.pattern or "standard",
            note="Undermount slide" if undermount else "Drawer slide mounting",
        )
    if kind == _K.cam_lock:
        minifix = code.pattern == "minifix"
        return HolePatternSpec(
            kind=kind,
            ref_edge=EdgeSide.W1,
            offsets_mm=[37],
            distance_from_edge_mm=24 if minifix else 34,
            diameter_mm=15,
            pattern_id=code.pattern or "standard",
        )
    if kind == _K.dowel:
        count = code.count or 2
        return HolePatternSpec(
            kind=kind,
            ref_edge=EdgeSide.W1,
            offsets_mm=[37 + 32 * i for i in range(count)],
            distance_from_edge_mm=9,
            count=count,
            diameter_mm=8,
        )
    return HolePatternSpec(kind=kind, pattern_id=custom_pattern_id(code.pattern))


def hole_code_from_spec(spec: HolePatternSpec) -> HoleCode:
    kind = spec.kind
    if kind == _K.hinge:
        offset = spec.offsets_mm[0] if spec.offsets_mm else 100
        return HoleCode(kind=kind, count=spec.count or 2, offset_mm=offset)
    if kind == _K.handle:
        if len(spec.offsets_mm) >= 2:
            centers = spec.offsets_mm[1] - spec.offsets_mm[0]
        else:
            centers = 96
        return HoleCode(kind=kind, centers_mm=centers)
    if kind == _K.knob:
        if spec.distance_from_edge_mm == 0:
            return HoleCode(kind=kind, position="center")
        offset = spec.offsets_mm[0] if spec.offsets_mm else spec.distance_from_edge_mm
        return HoleCode(kind=kind, offset_mm=offset)
    if kind == _K.shelf_pins:
        pattern = spec.pattern_id if spec.pattern_id == "half_column" else "full_column"
        return HoleCode(kind=kind, pattern=pattern)
    if kind == _K.system32:
        return HoleCode(kind=kind, pattern="32mm_system")
    if kind == _K.drawer_slide:
        pattern = spec.pattern_id if spec.pattern_id == "undermount" else "standard"
        return HoleCode(kind=kind, pattern=pattern)
    if kind == _K.cam_lock:
        pattern = spec.pattern_id if spec.pattern_id == "minifix" else "standard"
        return HoleCode(kind=kind, pattern=pattern)
    if kind == _K.dowel:
        return HoleCode(kind=kind, count=spec.count or 2)
    return HoleCode(kind=kind, pattern=custom_pattern_id(spec.pattern_id))


def encode_hole_spec(spec: HolePatternSpec) -> str:
    """Encode a hole spec, carrying diameter/depth as overrides when set."""
    code = hole_code_from_spec(spec)
    base = encode_hole(code)
    defaults = hole_spec_from_code(code)
    overrides: Dict[str, Number] = {}
    if spec.depth_mm is not None and spec.depth_mm != defaults.depth_mm:
        overrides["depth"] = spec.depth_mm
    if spec.diameter_mm is not None and spec.diameter_mm != defaults.diameter_mm:
        overrides["diameter"] = spec.diameter_mm
    return shortcode_with_overrides(base, overrides)


# ============================================================================
# CNC
# ============================================================================

CUTOUT_SHAPES: Dict[str, str] = {"SINK": "sink_rect", "HOB": "hob_rect", "VENT": "vent_rect"}
PROFILE_SHAPES: Dict[str, str] = {
    "OGEE": "ogee_profile",
    "BEVEL": "bevel_profile",
    "ROUND": "round_profile",
}

_T = CncOpType


def _cnc(op_type: CncOpType, shape_id: str, **params) -> CncOperation:
    return CncOperation(type=op_type, shape_id=shape_id, params=params)


CNC_PRESETS: Dict[str, CncOperation] = {
    "CUTOUT-SINK-600x500": _cnc(_T.cutout, "sink_rect", width=600, height=500),
    "CUTOUT-SINK-800x500": _cnc(_T.cutout, "sink_rect", width=800, height=500),
    "CUTOUT-HOB-580x510": _cnc(_T.cutout, "hob_rect", width=580, height=510),
    "CUTOUT-VENT-200x100": _cnc(_T.cutout, "vent_rect", width=200, height=100),
    "RADIUS-3-ALL": _cnc(_T.radius, "corner_radius", radius=3, corners="all"),
    "RADIUS-6-ALL": _cnc(_T.radius, "corner_radius", radius=6, corners="all"),
    "RADIUS-25-FRONT": _cnc(_T.radius, "corner_radius", radius=25, corners="front"),
    "PROFILE-OGEE": _cnc(_T.contour, "ogee_profile"),
    "PROFILE-BEVEL": _cnc(_T.contour, "bevel_profile", angle=45),
    "PROFILE-ROUND": _cnc(_T.contour, "round_profile"),
    "REBATE-10x10": _cnc(_T.rebate, "rebate", width=10, depth=10),
    "REBATE-18x10": _cnc(_T.rebate, "rebate", width=18, depth=10),
}

# Lookups run on upper-cased input
_CNC_PRESETS_UPPER: Dict[str, CncOperation] = {k.upper(): v for k, v in CNC_PRESETS.items()}

_DIM = rf"({NUMBER_RE})"
CUTOUT_CODE_RE = re.compile(rf"^CUTOUT-([A-Z][A-Z0-9_]*)-{_DIM}X{_DIM}$")
RADIUS_CODE_RE = re.compile(rf"^RADIUS-{_DIM}-([A-Z]+)$")
POCKET_CODE_RE = re.compile(rf"^POCKET-{_DIM}X{_DIM}X{_DIM}$")
REBATE_CODE_RE = re.compile(rf"^REBATE-{_DIM}X{_DIM}$")
CHAMFER_CODE_RE = re.compile(rf"^CHAMFER-{_DIM}$")
PROFILE_CODE_RE = re.compile(r"^PROFILE-([A-Z][A-Z0-9_]*)$")
DRILL_CODE_RE = re.compile(rf"^DRILL-(\d+)X{_DIM}$")
CUSTOM_CODE_RE = re.compile(r"^CNC-([A-Z0-9_]+)$")


def decode_cnc(code: Optional[str]) -> Optional[CncOperation]:
    if not code:
        return None
    normalized = str(code).strip().upper()
    preset = _CNC_PRESETS_UPPER.get(normalized)
    if preset is not None:
        return preset.model_copy(deep=True)
    match = CUTOUT_CODE_RE.match(normalized)
    if match:
        shape, w, h = match.groups()
        return _cnc(
            _T.cutout,
            CUTOUT_SHAPES.get(shape, shape.lower()),
            width=parse_number(w),
            height=parse_number(h),
        )
    match = RADIUS_CODE_RE.match(normalized)
    if match:
        return _cnc(
            _T.radius,
            "corner_radius",
            radius=parse_number(match.group(1)),
            corners=match.group(2).lower(),
        )
    match = POCKET_CODE_RE.match(normalized)
    if match:
        w, h, d = (parse_number(g) for g in match.groups())
        return _cnc(_T.pocket, "rect_pocket", width=w, height=h, depth=d)
    match = REBATE_CODE_RE.match(normalized)
    if match:
        w, d = (parse_number(g) for g in match.groups())
        return _cnc(_T.rebate, "rebate", width=w, depth=d)
    match = CHAMFER_CODE_RE.match(normalized)
    if match:
        return _cnc(_T.chamfer, "chamfer", size=parse_number(match.group(1)))
    match = PROFILE_CODE_RE.match(normalized)
    if match:
        shape = match.group(1)
        return _cnc(_T.contour, PROFILE_SHAPES.get(shape, shape.lower()))
    match = DRILL_CODE_RE.match(normalized)
    if match:
        return _cnc(
            _T.drill_array,
            "drill_array",
            count=int(match.group(1)),
            diameter=parse_number(match.group(2)),
        )
    if normalized == "DRILL-ARRAY":
        return _cnc(_T.drill_array, "drill_array")
    if normalized == "TEXT":
        return _cnc(_T.text, "text_engrave")
    match = CUSTOM_CODE_RE.match(normalized)
    if match:
        return _cnc(_T.custom, match.group(1).lower())
    return None


def _shape_token(shape_id: str, table: Mapping[str, str]) -> str:
    for token, shape in table.items():
        if shape == shape_id:
            return token
    return shape_id.upper()


def encode_cnc(op: CncOperation) -> str:
    p = op.params
    n = format_number
    if op.type == _T.cutout:
        return f"CUTOUT-{_shape_token(op.shape_id, CUTOUT_SHAPES)}-{n(p.get('width'))}x{n(p.get('height'))}"
    if op.type == _T.radius:
        return f"RADIUS-{n(p.get('radius'))}-{str(p.get('corners', 'all')).upper()}"
    if op.type == _T.pocket:
        return f"POCKET-{n(p.get('width'))}x{n(p.get('height'))}x{n(p.get('depth'))}"
    if op.type == _T.contour:
        return f"PROFILE-{_shape_token(op.shape_id, PROFILE_SHAPES)}"
    if op.type == _T.rebate:
        return f"REBATE-{n(p.get('width'))}x{n(p.get('depth'))}"
    if op.type == _T.chamfer:
        return f"CHAMFER-{n(p.get('size', 3))}"
    if op.type == _T.text:
        return "TEXT"
    if op.type == _T.drill_array:
        if p.get("count") is not None and p.get("diameter") is not None:
            return f"DRILL-{n(p['count'])}x{n(p['diameter'])}"
        return "DRILL-ARRAY"
    return f"CNC-{op.shape_id.upper()}"


# ============================================================================
# Service type detection and reference
# ============================================================================


class ServiceType(str, Enum):
    edgeband = "edgeband"
    groove = "groove"
    hole = "hole"
    cnc = "cnc"
    custom = "custom"


_HOLE_PREFIX_RE = re.compile(r"^(?:H\d|SP-|HD-|KN-|DS-|CAM-|DWL-|HOLE-)")
_CNC_PREFIX_RE = re.compile(r"^(?:CUTOUT-|RADIUS-|POCKET-|PROFILE-|REBATE-|CHAMFER-|DRILL-|CNC-|TEXT$)")


def detect_service_type(code: str) -> ServiceType:
    """Classify a base code by its shape; codes nobody recognizes are ``custom``."""
    upper = parse_shortcode(code).base_code
    if decode_edges(upper) is not None:
        return ServiceType.edgeband
    if decode_groove(upper) is not None or re.match(r"^G(?:-|L|W|ALL)", upper):
        return ServiceType.groove
    if decode_hole(upper) is not None or _HOLE_PREFIX_RE.match(upper):
        return ServiceType.hole
    if decode_cnc(upper) is not None or _CNC_PREFIX_RE.match(upper):
        return ServiceType.cnc
    return ServiceType.custom


SHORTCODE_REFERENCE: Dict[str, Dict[str, object]] = {
    "edgeband": {
        "title": "Edgebanding Codes",
        "description": "Specify which edges to band",
        "examples": [
            {"code": "2L2W", "description": "All four edges"},
            {"code": "2L", "description": "Both long edges"},
            {"code": "2W", "description": "Both width edges"},
            {"code": "L2W", "description": "One long + both width edges"},
            {"code": "L1", "description": "First long edge only"},
            {"code": "L2+W1", "description": "Explicit edge list"},
            {"code": "0", "description": "No edgebanding"},
        ],
    },
    "groove": {
        "title": "Groove Codes",
        "description": "Specify groove operations (G[edge]-[width]-[offset])",
        "examples": [
            {"code": "G-ALL-4-12", "description": "All edges, 4mm wide, 12mm from edge"},
            {"code": "GL-4-10", "description": "Long edges, 4mm wide, 10mm from edge"},
            {"code": "GW-4-12", "description": "Width edges, 4mm wide, 12mm from edge"},
            {"code": "GW2-4-10", "description": "W2 edge only (back panel)"},
        ],
    },
    "holes": {
        "title": "Hole Pattern Codes",
        "description": "Specify drilling patterns",
        "examples": [
            {"code": "H2-110", "description": "2 hinges, 110mm from corners"},
            {"code": "H3-90", "description": "3 hinges, 90mm from corners"},
            {"code": "SP-32", "description": "System 32 shelf pins"},
            {"code": "HD-CC96", "description": "Handle, 96mm centers"},
            {"code": "KN-CTR", "description": "Knob, centered"},
            {"code": "DS-STD", "description": "Drawer slide, standard"},
            {"code": "CAM-MINI", "description": "Cam lock, minifix"},
            {"code": "DWL-3", "description": "3 dowels"},
            {"code": "HOLE-LOGO_MOUNT", "description": "Custom pattern by id"},
        ],
    },
    "cnc": {
        "title": "CNC Operation Codes",
        "description": "Specify CNC machining operations",
        "examples": [
            {"code": "CUTOUT-SINK-600x500", "description": "Sink cutout 600x500mm"},
            {"code": "RADIUS-25-FRONT", "description": "25mm radius, front corners"},
            {"code": "POCKET-100x50x10", "description": "Pocket 100x50mm, 10mm deep"},
            {"code": "REBATE-10x10", "description": "10mm x 10mm edge rebate"},
            {"code": "CHAMFER-3", "description": "3mm chamfer"},
            {"code": "PROFILE-OGEE", "description": "Ogee edge profile"},
        ],
    },
    "overrides": {
        "title": "Override Syntax",
        "description": "Add @[overrides] to any code to customize parameters",
        "examples": [
            {"code": "2L2W@10", "description": "All edges with 10mm thickness"},
            {"code": "GL-4-10@d6", "description": "Groove with 6mm depth override"},
            {"code": "GL-4-10@d6w5", "description": "Groove with 6mm depth, 5mm width"},
            {"code": "H2-100@dia35", "description": "2 hinges with 35mm diameter"},
            {"code": "SP-32@c4", "description": "Shelf pins with 4 count"},
            {"code": "HD-CC96@cc128", "description": "Handle with 128mm centers"},
        ],
    },
}
