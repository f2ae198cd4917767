"""Edge-band normalizer: raw edge-band fields -> :class:`EdgeBandSpec`."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Set

from ..dialect import EdgebandDialect, ServiceDialect, is_blank, is_no_value, is_yes_value
from ..patterns import Payload, TransformKind
from ..raw_fields import RawEdgebandColumns, RawEdgebandFields
from ..shortcodes import Number, decode_edges, parse_shortcode
from ..types import ALL_EDGE_SIDES, LONG_EDGES, WIDTH_EDGES, EdgeBandSpec, EdgeSide, create_edge_band_spec, sort_edges
from .common import TextResolver, heuristics_enabled, is_code_cell, note_strategy
from .heuristics import parse_edges_text

FAMILY = "edgeband"


def _decode(code: Optional[str]) -> Optional[List[EdgeSide]]:
    if not code:
        return None
    return decode_edges(parse_shortcode(code).base_code)


def _rule_edges(kind: TransformKind, payload: Payload) -> Optional[List[EdgeSide]]:
    if kind == TransformKind.code:
        return _decode(str(payload))
    edges: Any = payload.get("edges") if isinstance(payload, dict) else None
    if isinstance(edges, str):
        return _decode(edges)
    if isinstance(edges, list):
        return sort_edges(str(e).strip().upper() for e in edges)
    return None


class _EdgeResult:
    """Edges plus the thickness an override suffix may carry."""

    def __init__(self, edges: List[EdgeSide], thickness_mm: Optional[float] = None):
        self.edges = edges
        self.thickness_mm = thickness_mm

    def __bool__(self) -> bool:
        return bool(self.edges)


def _wrap(step):
    def run(text: str) -> Optional[_EdgeResult]:
        edges = step(text)
        return _EdgeResult(list(edges)) if edges else None

    return run


def _apply_overrides(result: _EdgeResult, overrides: Dict[str, Number]) -> _EdgeResult:
    thickness = overrides.get("value", overrides.get("depth"))
    if thickness is None:
        return result
    return _EdgeResult(result.edges, float(thickness))


def _combine(parts: List[_EdgeResult]) -> _EdgeResult:
    edges: List[EdgeSide] = []
    thickness: Optional[float] = None
    for part in parts:
        edges.extend(part.edges)
        thickness = part.thickness_mm if part.thickness_mm is not None else thickness
    return _EdgeResult(sort_edges(edges), thickness)


def edgeband_resolver(dialect: EdgebandDialect) -> TextResolver[_EdgeResult]:
    def by_alias(text: str) -> Optional[List[EdgeSide]]:
        return _decode(dialect.resolve_alias(text))

    def by_rule(kind: TransformKind, payload: Payload) -> Optional[_EdgeResult]:
        edges = _rule_edges(kind, payload)
        return _EdgeResult(edges) if edges else None

    return TextResolver(
        FAMILY,
        steps=[("alias", _wrap(by_alias)), ("codec", _wrap(decode_edges))],
        patterns=dialect.patterns,
        convert_rule=by_rule,
        heuristic=_wrap(parse_edges_text),
        apply_overrides=_apply_overrides,
        combine=_combine,
    )


def edges_from_columns(
    columns: RawEdgebandColumns, dialect: EdgebandDialect, heuristics: bool = True
) -> List[EdgeSide]:
    """Read per-edge and grouped flag columns.

    ``all``/``L``/``W`` add their edge groups on a yes value; a grouped cell
    holding notation (``2L2W``, ``L2+W1``) is resolved like text. An
    individual ``L1``..``W2`` column adds its edge on a yes value and removes
    it on an explicit no value. A blank individual column expresses no opinion.
    """
    yes, no = dialect.yes_values, dialect.no_values
    edges: Set[EdgeSide] = set()
    for value, group in ((columns.all, ALL_EDGE_SIDES), (columns.L, LONG_EDGES), (columns.W, WIDTH_EDGES)):
        if is_yes_value(value, yes):
            edges.update(group)
        elif is_code_cell(value, yes, no):
            hit = edgeband_resolver(dialect).resolve(value, heuristics)
            if hit is not None:
                edges.update(hit[0].edges)
    for edge in ALL_EDGE_SIDES:
        value = getattr(columns, edge.value)
        if is_blank(value):
            continue
        if is_yes_value(value, yes):
            edges.add(edge)
        elif is_no_value(value, no):
            edges.discard(edge)
    return sort_edges(edges)


def normalize_xx_notation(l_column: Optional[str], w_column: Optional[str]) -> List[EdgeSide]:
    """Legacy spreadsheet marks: ``X`` bands one edge, ``XX`` both, per dimension."""
    edges: List[EdgeSide] = []
    marks = ((l_column, LONG_EDGES), (w_column, WIDTH_EDGES))
    for value, pair in marks:
        mark = (value or "").strip().upper()
        if mark == "XX":
            edges.extend(pair)
        elif mark == "X":
            edges.append(pair[0])
    return sort_edges(edges)


def normalize_edgeband(
    raw: Optional[RawEdgebandFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> Optional[EdgeBandSpec]:
    if raw is None:
        return None
    if dialect is None:
        from ..default_dialect import DEFAULT_DIALECT

        dialect = DEFAULT_DIALECT
    family = dialect.edgeband
    edges: Sequence[EdgeSide] = []
    thickness = raw.thickness_mm
    strategy = None

    if raw.text:
        hit = edgeband_resolver(family).resolve(raw.text, heuristics_enabled(heuristics))
        if hit is not None:
            result, strategy = hit
            edges = result.edges
            if result.thickness_mm is not None:
                thickness = result.thickness_mm
    if not edges and raw.columns is not None:
        edges = edges_from_columns(raw.columns, family, heuristics_enabled(heuristics))
        strategy = "columns" if edges else None
    if not edges and family.default_if_blank:
        edges = _decode(family.resolve_alias(family.default_if_blank) or family.default_if_blank) or []
        strategy = "default" if edges else None

    spec = create_edge_band_spec(edges, tape_id=raw.tape_id, thickness_mm=thickness)
    if spec is not None and strategy:
        note_strategy(FAMILY, strategy, code=raw.text)
    return spec


__all__ = ["edgeband_resolver", "edges_from_columns", "normalize_edgeband", "normalize_xx_notation"]
