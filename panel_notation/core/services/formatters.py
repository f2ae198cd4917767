"""Canonical services -> shortcodes, descriptions and display summaries.

Formatters never raise; a missing or empty spec renders as :data:`NONE_MARKER`
(or a fixed "No ..." sentence for descriptions).
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .shortcodes import encode_cnc, encode_edges, encode_grooves, encode_hole_spec, format_number
from .types import CncOperation, CncOpType, EdgeBandSpec, EdgeSide, GrooveSpec, HolePatternKind, HolePatternSpec, PartServices

NONE_MARKER = "-"

EDGE_NAMES = {
    EdgeSide.L1: "front edge",
    EdgeSide.L2: "back edge",
    EdgeSide.W1: "left edge",
    EdgeSide.W2: "right edge",
}

EDGEBAND_DESCRIPTIONS = {
    "0": "No edgebanding",
    "L1": "Front edge only",
    "L2": "Back edge only",
    "W1": "Left edge only",
    "W2": "Right edge only",
    "2L": "Both long edges",
    "2W": "Both width edges",
    "L2W": "Front + both width edges",
    "2L1W": "Both long + left edge",
    "2L2W": "All four edges",
}

HOLE_KIND_NAMES = {
    HolePatternKind.hinge: "Hinge holes",
    HolePatternKind.shelf_pins: "Shelf pin holes",
    HolePatternKind.system32: "System 32 holes",
    HolePatternKind.handle: "Handle holes",
    HolePatternKind.knob: "Knob hole",
    HolePatternKind.drawer_slide: "Drawer slide holes",
    HolePatternKind.cam_lock: "Cam lock holes",
    HolePatternKind.dowel: "Dowel holes",
    HolePatternKind.custom: "Custom holes",
}

_n = format_number


# ---------------------------------------------------------------------------
# Edge banding
# ---------------------------------------------------------------------------


def format_edgeband_code(spec: Optional[EdgeBandSpec]) -> str:
    if spec is None or not spec.edges:
        return NONE_MARKER
    code = encode_edges(spec.edges)
    if spec.thickness_mm is not None:
        code = f"{code}@{_n(spec.thickness_mm)}"
    return code


def format_edgeband_description(spec: Optional[EdgeBandSpec]) -> str:
    if spec is None or not spec.edges:
        return "No edgebanding"
    code = encode_edges(spec.edges)
    desc = EDGEBAND_DESCRIPTIONS.get(code) or f"Edges: {', '.join(e.value for e in spec.edges)}"
    extras = [x for x in (spec.tape_id, f"{_n(spec.thickness_mm)}mm" if spec.thickness_mm else None) if x]
    if extras:
        desc += f" ({', '.join(extras)})"
    return desc


def format_edges_visual(spec: Optional[EdgeBandSpec]) -> str:
    """Three-line box diagram: W1 on top, W2 at the bottom, L1 left, L2 right."""
    edges = set(spec.edges) if spec is not None else set()
    top = "●═══●" if EdgeSide.W1 in edges else "○───○"
    bottom = "●═══●" if EdgeSide.W2 in edges else "○───○"
    left = "║" if EdgeSide.L1 in edges else "│"
    right = "║" if EdgeSide.L2 in edges else "│"
    return f"{top}\n{left}   {right}\n{bottom}"


# ---------------------------------------------------------------------------
# Grooves
# ---------------------------------------------------------------------------


def format_groove_code(spec: GrooveSpec) -> str:
    return encode_grooves([spec])[0]


def format_grooves_code(specs: Optional[Sequence[GrooveSpec]]) -> str:
    if not specs:
        return NONE_MARKER
    return ", ".join(encode_grooves(specs))


def format_groove_description(spec: GrooveSpec) -> str:
    desc = (
        f"{_n(spec.width_mm)}mm groove on {EDGE_NAMES[spec.on_edge]}, "
        f"{_n(spec.distance_from_edge_mm)}mm from edge, {_n(spec.depth_mm)}mm deep"
    )
    if spec.note:
        desc += f" ({spec.note})"
    return desc


# ---------------------------------------------------------------------------
# Holes
# ---------------------------------------------------------------------------


def format_hole_code(spec: HolePatternSpec) -> str:
    return encode_hole_spec(spec)


def format_holes_code(specs: Optional[Sequence[HolePatternSpec]]) -> str:
    if not specs:
        return NONE_MARKER
    return ", ".join(format_hole_code(s) for s in specs)


def format_hole_description(spec: HolePatternSpec) -> str:
    desc = HOLE_KIND_NAMES.get(spec.kind, spec.kind.value)
    offsets = spec.offsets_mm
    if spec.kind == HolePatternKind.hinge:
        desc += f" ({spec.count or 2}x, {_n(offsets[0] if offsets else 100)}mm from edge)"
    elif spec.kind == HolePatternKind.handle and len(offsets) >= 2:
        desc += f" ({_n(offsets[1] - offsets[0])}mm centers)"
    elif spec.kind == HolePatternKind.knob:
        if spec.distance_from_edge_mm == 0:
            desc += " (centered)"
        else:
            desc += f" ({_n(offsets[0] if offsets else spec.distance_from_edge_mm)}mm from edge)"
    elif spec.kind == HolePatternKind.dowel and spec.count:
        desc += f" ({spec.count}x)"
    elif spec.kind == HolePatternKind.custom and spec.pattern_id:
        desc += f" ({spec.pattern_id})"
    if spec.diameter_mm:
        desc += f", Ø{_n(spec.diameter_mm)}mm"
    if spec.hardware_id:
        desc += f" - {spec.hardware_id}"
    return desc


# ---------------------------------------------------------------------------
# CNC
# ---------------------------------------------------------------------------


def format_cnc_code(op: CncOperation) -> str:
    return encode_cnc(op)


def format_cnc_codes(ops: Optional[Sequence[CncOperation]]) -> str:
    if not ops:
        return NONE_MARKER
    return ", ".join(format_cnc_code(op) for op in ops)


def format_cnc_description(op: CncOperation) -> str:
    p = op.params
    if op.type == CncOpType.cutout:
        return f"{op.shape_id} cutout ({_n(p.get('width'))}x{_n(p.get('height'))}mm)"
    if op.type == CncOpType.radius:
        return f"{_n(p.get('radius'))}mm corner radius ({p.get('corners', 'all')} corners)"
    if op.type == CncOpType.pocket:
        return f"Pocket {_n(p.get('width'))}x{_n(p.get('height'))}mm, {_n(p.get('depth'))}mm deep"
    if op.type == CncOpType.contour:
        return f"Edge profile: {op.shape_id.replace('_', ' ')}"
    if op.type == CncOpType.rebate:
        return f"Rebate {_n(p.get('width'))}x{_n(p.get('depth'))}mm"
    if op.type == CncOpType.chamfer:
        return f"{_n(p.get('size', 3))}mm chamfer"
    if op.type == CncOpType.text:
        return "Text engraving"
    if op.type == CncOpType.drill_array:
        if p.get("count") is not None and p.get("diameter") is not None:
            return f"Drill array ({p['count']}x Ø{_n(p['diameter'])}mm)"
        return "Drill array"
    return op.note or f"CNC: {op.shape_id}"


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


def format_services_summary(services: Optional[PartServices]) -> str:
    """Compact one-liner such as ``EB:2L2W | GRV:4 | HOLE:1``."""
    if services is None:
        return NONE_MARKER
    parts: List[str] = []
    if services.edgeband is not None and services.edgeband.edges:
        parts.append(f"EB:{encode_edges(services.edgeband.edges)}")
    if services.grooves:
        parts.append(f"GRV:{len(services.grooves)}")
    if services.holes:
        parts.append(f"HOLE:{len(services.holes)}")
    if services.cnc:
        parts.append(f"CNC:{len(services.cnc)}")
    return " | ".join(parts) if parts else NONE_MARKER


def format_services_detailed(services: Optional[PartServices]) -> List[str]:
    if services is None:
        return ["No services"]
    lines: List[str] = []
    if services.edgeband is not None and services.edgeband.edges:
        lines.append(f"Edgeband: {format_edgeband_description(services.edgeband)}")
    lines.extend(f"Groove: {format_groove_description(g)}" for g in services.grooves)
    lines.extend(f"Holes: {format_hole_description(h)}" for h in services.holes)
    lines.extend(f"CNC: {format_cnc_description(op)}" for op in services.cnc)
    return lines or ["No services"]


def format_services_tooltip(services: Optional[PartServices]) -> str:
    return "\n".join(format_services_detailed(services))


__all__ = [
    "NONE_MARKER",
    "format_cnc_code",
    "format_cnc_codes",
    "format_cnc_description",
    "format_edgeband_code",
    "format_edgeband_description",
    "format_edges_visual",
    "format_groove_code",
    "format_groove_description",
    "format_grooves_code",
    "format_hole_code",
    "format_hole_description",
    "format_holes_code",
    "format_services_detailed",
    "format_services_summary",
    "format_services_tooltip",
]
