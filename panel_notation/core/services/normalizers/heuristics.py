"""Natural-language recognizers.

Last-resort readings of free text such as ``"band all edges"``, ``"back panel
groove"`` or ``"2 hinges at 110mm"``. They run after every exact strategy and
can be switched off per call or via ``NL_HEURISTICS_ENABLED``. Each recognizer
returns an empty result when nothing matches.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..dialect import GrooveDialect
from ..types import (
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

L1, L2, W1, W2 = EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2


# ---------------------------------------------------------------------------
# Edge banding
# ---------------------------------------------------------------------------

_ALL_EDGES_RE = re.compile(r"\b(?:all|4|four)\s*(?:edges?|sides?)\b")
_EDGE_PHRASES = (
    (re.compile(r"\b(?:long|length)\s*(?:edges?|sides?)\b"), LONG_EDGES),
    (re.compile(r"\b(?:short|width)\s*(?:edges?|sides?)\b"), WIDTH_EDGES),
    (re.compile(r"\b(?:front|visible)\s*(?:edge)?\b"), (L1,)),
    (re.compile(r"\bback\s*(?:edge)?\b"), (L2,)),
    (re.compile(r"\bleft\s*(?:edge)?\b"), (W1,)),
    (re.compile(r"\bright\s*(?:edge)?\b"), (W2,)),
    (re.compile(r"\bone\s*(?:long|l)\b"), (L1,)),
    (re.compile(r"\b(?:both|two|2)\s*(?:long|l)\b"), LONG_EDGES),
    (re.compile(r"\bone\s*(?:short|width|w)\b"), (W1,)),
    (re.compile(r"\b(?:both|two|2)\s*(?:short|width|w)\b"), WIDTH_EDGES),
)


def parse_edges_text(text: str) -> List[EdgeSide]:
    lower = text.lower()
    if _ALL_EDGES_RE.search(lower):
        return list(ALL_EDGE_SIDES)
    edges: List[EdgeSide] = []
    for pattern, sides in _EDGE_PHRASES:
        if pattern.search(lower):
            edges.extend(sides)
    return sort_edges(edges)


# ---------------------------------------------------------------------------
# Grooves
# ---------------------------------------------------------------------------

_WIDTH_GROOVE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*mm\s*groove|groove\s*(\d+(?:\.\d+)?)\s*mm")


def _grooves(
    edges, dialect: GrooveDialect, width: Optional[float] = None, note: Optional[str] = None
) -> List[GrooveSpec]:
    return [
        GrooveSpec(
            on_edge=edge,
            distance_from_edge_mm=dialect.default_offset_mm,
            width_mm=width if width is not None else dialect.default_width_mm,
            depth_mm=dialect.default_depth_mm,
            face=PartFace.back,
            note=note,
        )
        for edge in edges
    ]


def parse_grooves_text(text: str, dialect: GrooveDialect) -> List[GrooveSpec]:
    lower = text.lower()
    grooves: List[GrooveSpec] = []
    if re.search(r"\bback\s*(?:panel)?\s*groove\b", lower) or re.search(
        r"\bgroove\s*(?:for\s*)?back\s*panel\b", lower
    ):
        grooves.extend(_grooves((W2,), dialect, note="Back panel groove"))
    if re.search(r"\bdrawer\s*(?:bottom)?\s*groove\b", lower) or re.search(
        r"\bgroove\s*(?:for\s*)?drawer\b", lower
    ):
        grooves.append(
            GrooveSpec(
                on_edge=W1,
                distance_from_edge_mm=dialect.drawer_bottom_offset_mm,
                width_mm=dialect.default_width_mm,
                depth_mm=dialect.drawer_bottom_depth_mm,
                face=PartFace.back,
                note="Drawer bottom groove",
            )
        )
    if re.search(r"\bgroove\s*(?:on\s*)?all\s*(?:edges?|sides?)\b", lower):
        grooves.extend(_grooves(ALL_EDGE_SIDES, dialect))
    if re.search(r"\bgroove\s*(?:on\s*)?long\s*(?:edges?|sides?)\b", lower):
        grooves.extend(_grooves(LONG_EDGES, dialect))
    if re.search(r"\bgroove\s*(?:on\s*)?(?:width|short)\s*(?:edges?|sides?)\b", lower):
        grooves.extend(_grooves(WIDTH_EDGES, dialect))
    if not grooves:
        match = _WIDTH_GROOVE_RE.search(lower)
        if match:
            width = float(match.group(1) or match.group(2))
            grooves.extend(_grooves((W2,), dialect, width=width))
    return grooves


# ---------------------------------------------------------------------------
# Holes
# ---------------------------------------------------------------------------


def _hinge_holes(lower: str) -> Optional[HolePatternSpec]:
    if not re.search(r"\bhinges?\b", lower):
        return None
    count = re.search(r"(\d+)\s*hinges?", lower)
    offset = re.search(r"(\d+(?:\.\d+)?)\s*mm", lower)
    return HolePatternSpec(
        kind=HolePatternKind.hinge,
        offsets_mm=[float(offset.group(1))] if offset else [100],
        distance_from_edge_mm=22,
        count=int(count.group(1)) if count else 2,
    )


def parse_holes_text(text: str) -> List[HolePatternSpec]:
    lower = text.lower()
    holes: List[HolePatternSpec] = []
    hinge = _hinge_holes(lower)
    if hinge is not None:
        holes.append(hinge)
    if re.search(r"\bshelf\s*(?:pins?|holes?|pegs?)?\b", lower) or re.search(r"\b32\s*mm\s*system\b", lower):
        holes.append(
            HolePatternSpec(kind=HolePatternKind.system32, offsets_mm=[37, 69, 101], distance_from_edge_mm=37)
        )
    if re.search(r"\b(?:handle|pull)s?\b", lower):
        cc = re.search(r"(\d+(?:\.\d+)?)\s*(?:mm\s*)?(?:cc|centers?|centres?)", lower)
        holes.append(
            HolePatternSpec(
                kind=HolePatternKind.handle,
                offsets_mm=[0, float(cc.group(1)) if cc else 96],
                distance_from_edge_mm=30,
            )
        )
    if re.search(r"\bknobs?\b", lower):
        centered = re.search(r"\bcent(?:er|re)d?\b", lower) is not None
        holes.append(
            HolePatternSpec(
                kind=HolePatternKind.knob,
                offsets_mm=[] if centered else [37],
                distance_from_edge_mm=0 if centered else 37,
                note="Centered" if centered else None,
            )
        )
    if re.search(r"\bdrawer\s*slides?\b", lower):
        holes.append(
            HolePatternSpec(
                kind=HolePatternKind.drawer_slide,
                ref_edge=W1,
                offsets_mm=[37, 100],
                distance_from_edge_mm=37,
                note="Drawer slide mounting",
            )
        )
    if re.search(r"\bcam\s*(?:locks?|fittings?)\b|\bminifix\b", lower):
        holes.append(
            HolePatternSpec(
                kind=HolePatternKind.cam_lock,
                ref_edge=W1,
                offsets_mm=[37],
                distance_from_edge_mm=34,
                diameter_mm=15,
            )
        )
    if re.search(r"\bdowels?\b", lower):
        count = re.search(r"(\d+)\s*dowels?", lower)
        n = int(count.group(1)) if count else 2
        holes.append(
            HolePatternSpec(
                kind=HolePatternKind.dowel,
                ref_edge=W1,
                offsets_mm=[37 + 32 * i for i in range(n)],
                distance_from_edge_mm=9,
                count=n,
                diameter_mm=8,
            )
        )
    return holes


# ---------------------------------------------------------------------------
# CNC
# ---------------------------------------------------------------------------

_SIZE2_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:x|by)\s*(\d+(?:\.\d+)?)")
_SIZE3_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:x|by)\s*(\d+(?:\.\d+)?)(?:\s*(?:x|by)\s*(\d+(?:\.\d+)?))?")


def _num(text: str) -> float:
    value = float(text)
    return int(value) if value.is_integer() else value


def _cutout(lower: str, shape_id: str, width: int, height: int, note: str) -> CncOperation:
    size = _SIZE2_RE.search(lower)
    return CncOperation(
        type=CncOpType.cutout,
        shape_id=shape_id,
        params={
            "width": _num(size.group(1)) if size else width,
            "height": _num(size.group(2)) if size else height,
        },
        note=note,
    )


def parse_cnc_text(text: str) -> List[CncOperation]:
    lower = text.lower()
    ops: List[CncOperation] = []
    if re.search(r"\bsink\s*(?:cut(?:out)?|hole)?\b", lower):
        ops.append(_cutout(lower, "sink_rect", 600, 500, "Sink cutout"))
    if re.search(r"\b(?:hob|cooktop|stove)\s*(?:cut(?:out)?|hole)?\b", lower):
        ops.append(_cutout(lower, "hob_rect", 580, 510, "Hob cutout"))
    if re.search(r"\b(?:corner\s*)?radius\b", lower) or re.search(r"\brounded\s*corners?\b", lower):
        radius = re.search(r"(\d+(?:\.\d+)?)\s*(?:mm)?\s*radius", lower)
        corners = "all"
        for side in ("front", "back", "left", "right"):
            if re.search(rf"\b{side}\b", lower):
                corners = side
                break
        ops.append(
            CncOperation(
                type=CncOpType.radius,
                shape_id="corner_radius",
                params={"radius": _num(radius.group(1)) if radius else 3, "corners": corners},
            )
        )
    if re.search(r"\bedge\s*profile\b", lower) or re.search(r"\b(?:ogee|bevel|round(?:over)?)\b", lower):
        shape_id = "round_profile"
        if re.search(r"\bogee\b", lower):
            shape_id = "ogee_profile"
        elif re.search(r"\bbevel\b", lower):
            shape_id = "bevel_profile"
        ops.append(CncOperation(type=CncOpType.contour, shape_id=shape_id))
    if re.search(r"\bpocket\b", lower):
        size = _SIZE3_RE.search(lower)
        ops.append(
            CncOperation(
                type=CncOpType.pocket,
                shape_id="rect_pocket",
                params={
                    "width": _num(size.group(1)) if size else 100,
                    "height": _num(size.group(2)) if size else 50,
                    "depth": _num(size.group(3)) if size and size.group(3) else 10,
                },
            )
        )
    if re.search(r"\b(?:rebate|rabbet)\b", lower):
        size = _SIZE2_RE.search(lower)
        ops.append(
            CncOperation(
                type=CncOpType.rebate,
                shape_id="rebate",
                params={
                    "width": _num(size.group(1)) if size else 10,
                    "depth": _num(size.group(2)) if size else 10,
                },
            )
        )
    if re.search(r"\bchamfer\b", lower):
        size = re.search(r"(\d+(?:\.\d+)?)\s*(?:mm)?\s*chamfer|chamfer\s*(\d+(?:\.\d+)?)", lower)
        value = (size.group(1) or size.group(2)) if size else None
        ops.append(
            CncOperation(
                type=CncOpType.chamfer,
                shape_id="chamfer",
                params={"size": _num(value) if value else 3},
            )
        )
    if re.search(r"\b(?:text|engrav\w*|label)\b", lower):
        ops.append(CncOperation(type=CncOpType.text, shape_id="text_engrave", note="Text engraving"))
    return ops


__all__ = ["parse_cnc_text", "parse_edges_text", "parse_grooves_text", "parse_holes_text"]
