"""Groove normalizer: raw groove fields -> list of :class:`GrooveSpec`.

One groove code can expand to several specs, one per grooved edge.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from ..dialect import GrooveDialect, ServiceDialect, is_yes_value
from ..patterns import Payload, TransformKind
from ..raw_fields import RawGrooveColumns, RawGrooveFields
from ..shortcodes import Number, decode_groove, groove_specs_from_code, parse_number, parse_shortcode
from ..types import ALL_EDGE_SIDES, LONG_EDGES, WIDTH_EDGES, EdgeSide, GrooveSpec, PartFace, sort_edges
from .common import TextResolver, concat, heuristics_enabled, is_code_cell, note_strategy
from .heuristics import parse_grooves_text

FAMILY = "groove"

_BARE_WIDTH_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*MM$")


def _specs(
    edges: Iterable[EdgeSide],
    width_mm: float,
    depth_mm: float,
    offset_mm: float,
    note: Optional[str] = None,
) -> List[GrooveSpec]:
    return [
        GrooveSpec(
            on_edge=edge,
            distance_from_edge_mm=offset_mm,
            width_mm=width_mm,
            depth_mm=depth_mm,
            face=PartFace.back,
            note=note,
        )
        for edge in sort_edges(edges)
    ]


def groove_specs_for_code(code: Optional[str], dialect: GrooveDialect) -> Optional[List[GrooveSpec]]:
    """Decode a groove code (or the bare ``{n}mm`` width form) with dialect defaults."""
    if not code:
        return None
    parsed = parse_shortcode(code)
    decoded = decode_groove(parsed.base_code)
    specs: Optional[List[GrooveSpec]] = None
    if decoded is not None:
        specs = groove_specs_from_code(decoded, depth_mm=dialect.default_depth_mm)
    else:
        bare = _BARE_WIDTH_RE.match(parsed.base_code)
        if bare:
            specs = _specs(
                (EdgeSide.W2,), parse_number(bare.group(1)), dialect.default_depth_mm, dialect.default_offset_mm
            )
    if specs and parsed.overrides:
        specs = apply_groove_overrides(specs, parsed.overrides)
    return specs


def apply_groove_overrides(specs: List[GrooveSpec], overrides: Dict[str, Number]) -> List[GrooveSpec]:
    update: Dict[str, Any] = {}
    width = overrides.get("width", overrides.get("value"))
    if width is not None:
        update["width_mm"] = width
    if overrides.get("offset") is not None:
        update["distance_from_edge_mm"] = overrides["offset"]
    if overrides.get("depth") is not None:
        update["depth_mm"] = overrides["depth"]
    if not update:
        return specs
    return [spec.model_copy(update=update) for spec in specs]


def _rule_grooves(kind: TransformKind, payload: Payload, dialect: GrooveDialect) -> Optional[List[GrooveSpec]]:
    if kind == TransformKind.code:
        return groove_specs_for_code(str(payload), dialect)
    if not isinstance(payload, dict):
        return None
    edges: Any = payload.get("edges", payload.get("on_edge"))
    if edges is None:
        return None
    if isinstance(edges, str):
        edges = [e for e in re.split(r"[\s,+]+", edges.strip().upper()) if e]
    return _specs(
        edges,
        payload.get("width_mm", dialect.default_width_mm),
        payload.get("depth_mm", dialect.default_depth_mm),
        payload.get("offset_mm", payload.get("distance_from_edge_mm", dialect.default_offset_mm)),
        note=payload.get("note"),
    )


def groove_resolver(dialect: GrooveDialect) -> TextResolver[List[GrooveSpec]]:
    def by_alias(text: str) -> Optional[List[GrooveSpec]]:
        return groove_specs_for_code(dialect.resolve_alias(text), dialect)

    def by_codec(text: str) -> Optional[List[GrooveSpec]]:
        return groove_specs_for_code(text, dialect)

    def by_flag(text: str) -> Optional[List[GrooveSpec]]:
        if not is_yes_value(text, dialect.yes_values):
            return None
        return _specs(
            (EdgeSide.W2,),
            dialect.default_width_mm,
            dialect.default_depth_mm,
            dialect.default_offset_mm,
            note="Back panel groove",
        )

    return TextResolver(
        FAMILY,
        steps=[("alias", by_alias), ("codec", by_codec), ("flag", by_flag)],
        patterns=dialect.patterns,
        convert_rule=lambda kind, payload: _rule_grooves(kind, payload, dialect),
        heuristic=lambda text: parse_grooves_text(text, dialect),
        apply_overrides=apply_groove_overrides,
        combine=concat,
    )


def grooves_from_columns(
    columns: RawGrooveColumns, dialect: GrooveDialect, heuristics: bool = True
) -> List[GrooveSpec]:
    """Flag columns add their preset grooves; a cell holding notation is resolved like text."""
    yes, no = dialect.yes_values, dialect.no_values
    width = columns.width_mm if columns.width_mm is not None else dialect.default_width_mm
    depth = columns.depth_mm if columns.depth_mm is not None else dialect.default_depth_mm
    offset = columns.offset_mm if columns.offset_mm is not None else dialect.default_offset_mm
    grooves: List[GrooveSpec] = []
    if is_yes_value(columns.back, yes):
        grooves.extend(_specs((EdgeSide.W2,), width, depth, offset, note="Back panel groove"))
    if is_yes_value(columns.bottom, yes):
        grooves.extend(
            _specs(
                (EdgeSide.W1,),
                width,
                dialect.drawer_bottom_depth_mm,
                dialect.drawer_bottom_offset_mm,
                note="Drawer bottom groove",
            )
        )
    if is_yes_value(columns.all, yes):
        grooves.extend(_specs(ALL_EDGE_SIDES, width, depth, offset))
    else:
        if is_yes_value(columns.long, yes):
            grooves.extend(_specs(LONG_EDGES, width, depth, offset))
        if is_yes_value(columns.width, yes):
            grooves.extend(_specs(WIDTH_EDGES, width, depth, offset))
    resolver = groove_resolver(dialect)
    for value in (columns.all, columns.long, columns.width, columns.back, columns.bottom):
        if is_code_cell(value, yes, no):
            hit = resolver.resolve(value, heuristics)
            if hit is not None:
                grooves.extend(hit[0])
    return grooves


def normalize_grooves(
    raw: Optional[RawGrooveFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> Optional[List[GrooveSpec]]:
    if raw is None:
        return None
    if dialect is None:
        from ..default_dialect import DEFAULT_DIALECT

        dialect = DEFAULT_DIALECT
    family = dialect.groove
    grooves: List[GrooveSpec] = []
    strategy = None

    if raw.text:
        hit = groove_resolver(family).resolve(raw.text, heuristics_enabled(heuristics))
        if hit is not None:
            grooves, strategy = hit
    if not grooves and raw.columns is not None:
        grooves = grooves_from_columns(raw.columns, family, heuristics_enabled(heuristics))
        strategy = "columns"
    if not grooves and family.default_if_blank:
        grooves = groove_specs_for_code(family.resolve_alias(family.default_if_blank) or family.default_if_blank, family) or []
        strategy = "default"

    if not grooves:
        return None
    note_strategy(FAMILY, strategy or "unknown", code=raw.text)
    return grooves


__all__ = [
    "apply_groove_overrides",
    "groove_resolver",
    "groove_specs_for_code",
    "grooves_from_columns",
    "normalize_grooves",
]
