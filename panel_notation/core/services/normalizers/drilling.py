"""Drilling normalizer: raw drilling fields -> list of :class:`HolePatternSpec`.

Text, structured hints and flag columns are independent sources on a cut-list
row; the patterns each of them yields are concatenated.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from ..dialect import DrillingDialect, HolePreset, ServiceDialect, is_yes_value, normalize_key
from ..patterns import Payload, TransformKind
from ..raw_fields import HandleHint, HingeHint, KnobHint, RawDrillingColumns, RawDrillingFields, ShelfHint
from ..shortcodes import (
    SYSTEM32_OFFSETS,
    HoleCode,
    Number,
    decode_hole,
    format_number,
    hole_spec_from_code,
    parse_shortcode,
)
from ..types import EdgeSide, HolePatternKind, HolePatternSpec
from .common import TextResolver, concat, heuristics_enabled, is_absent, note_strategy
from .heuristics import parse_holes_text

FAMILY = "drilling"

_K = HolePatternKind

# Short forms found on older cut lists
COMPAT_HOLE_CODES: Dict[str, HoleCode] = {
    "H2": HoleCode(kind=_K.hinge, count=2),
    "H3": HoleCode(kind=_K.hinge, count=3),
    "SP": HoleCode(kind=_K.shelf_pins),
    "S32": HoleCode(kind=_K.system32, pattern="32mm_system"),
    "HD-96": HoleCode(kind=_K.handle, centers_mm=96),
    "HD-128": HoleCode(kind=_K.handle, centers_mm=128),
    "KB": HoleCode(kind=_K.knob, position="center"),
}

_COMPAT_HINGE_RE = re.compile(r"^H(\d+)(?:_(\d+(?:\.\d+)?))?$")
_COMPAT_HANDLE_RE = re.compile(r"^HD[-_]?(\d+(?:\.\d+)?)$")
_SYSTEM_MM_RE = re.compile(r"^(\d+)\s*MM$")


def _system32(note: Optional[str] = None) -> HolePatternSpec:
    return HolePatternSpec(
        kind=_K.system32, offsets_mm=list(SYSTEM32_OFFSETS), distance_from_edge_mm=37, note=note
    )


def find_preset(key: str, dialect: DrillingDialect) -> Optional[HolePatternSpec]:
    """Look ``key`` up in the named preset tables, hinge table first."""
    wanted = normalize_key(key)
    for kind, table in dialect.preset_tables():
        preset: Optional[HolePreset] = table.get(wanted)
        if preset is not None:
            return preset.to_spec(kind)
    return None


def _compat(code: str) -> Optional[HolePatternSpec]:
    upper = code.strip().upper()
    known = COMPAT_HOLE_CODES.get(upper)
    if known is not None:
        return hole_spec_from_code(known)
    match = _COMPAT_HINGE_RE.match(upper)
    if match:
        offset = float(match.group(2)) if match.group(2) else None
        return hole_spec_from_code(HoleCode(kind=_K.hinge, count=int(match.group(1)), offset_mm=offset))
    match = _COMPAT_HANDLE_RE.match(upper)
    if match:
        return hole_spec_from_code(HoleCode(kind=_K.handle, centers_mm=float(match.group(1))))
    match = _SYSTEM_MM_RE.match(upper)
    if match and int(match.group(1)) == 32:
        return HolePatternSpec(kind=_K.system32, offsets_mm=[37], distance_from_edge_mm=37, note="System 32")
    return None


def hole_specs_for_code(code: Optional[str], dialect: DrillingDialect) -> Optional[List[HolePatternSpec]]:
    """Resolve an alias target: named preset, codec grammar or short form."""
    if not code:
        return None
    parsed = parse_shortcode(code)
    spec = find_preset(parsed.base_code, dialect)
    if spec is None:
        decoded = decode_hole(parsed.base_code)
        spec = hole_spec_from_code(decoded) if decoded is not None else _compat(parsed.base_code)
    if spec is None:
        return None
    specs = [spec]
    if parsed.overrides:
        specs = apply_hole_overrides(specs, parsed.overrides)
    return specs


def _override_one(spec: HolePatternSpec, overrides: Dict[str, Number]) -> HolePatternSpec:
    update: Dict[str, Any] = {}
    offsets = list(spec.offsets_mm)
    offset = overrides.get("offset", overrides.get("value"))
    if offset is not None:
        if spec.kind == _K.handle and len(offsets) >= 2:
            offsets = [offset, offset + (offsets[1] - offsets[0])]
        elif offsets:
            offsets[0] = offset
        else:
            offsets = [offset]
    centers = overrides.get("centers")
    if centers is not None and spec.kind == _K.handle:
        start = offsets[0] if offsets else 0
        offsets = [start, start + centers]
    if offsets != list(spec.offsets_mm):
        update["offsets_mm"] = offsets
    if overrides.get("count") is not None:
        update["count"] = int(overrides["count"])
    if overrides.get("diameter") is not None:
        update["diameter_mm"] = overrides["diameter"]
    if overrides.get("depth") is not None:
        update["depth_mm"] = overrides["depth"]
    return spec.model_copy(update=update) if update else spec


def apply_hole_overrides(specs: List[HolePatternSpec], overrides: Dict[str, Number]) -> List[HolePatternSpec]:
    return [_override_one(spec, overrides) for spec in specs]


def _rule_holes(kind: TransformKind, payload: Payload, dialect: DrillingDialect) -> Optional[List[HolePatternSpec]]:
    if kind == TransformKind.code:
        return hole_specs_for_code(str(payload), dialect)
    if not isinstance(payload, dict) or not payload.get("kind"):
        return None
    return [
        HolePatternSpec(
            kind=payload["kind"],
            ref_edge=payload.get("ref_edge", EdgeSide.L1),
            offsets_mm=payload.get("offsets_mm", []),
            distance_from_edge_mm=payload.get("distance_from_edge_mm", 22),
            count=payload.get("count"),
            diameter_mm=payload.get("diameter_mm"),
            depth_mm=payload.get("depth_mm"),
            hardware_id=payload.get("hardware_id"),
            note=payload.get("note"),
        )
    ]


def drilling_resolver(dialect: DrillingDialect) -> TextResolver[List[HolePatternSpec]]:
    def one(spec: Optional[HolePatternSpec]) -> Optional[List[HolePatternSpec]]:
        return [spec] if spec is not None else None

    def by_codec(text: str) -> Optional[List[HolePatternSpec]]:
        decoded = decode_hole(text)
        return one(hole_spec_from_code(decoded) if decoded is not None else None)

    return TextResolver(
        FAMILY,
        steps=[
            ("alias", lambda text: hole_specs_for_code(dialect.resolve_alias(text), dialect)),
            ("preset", lambda text: one(find_preset(text, dialect))),
            ("codec", by_codec),
            ("builtin", lambda text: one(_compat(text))),
        ],
        patterns=dialect.patterns,
        convert_rule=lambda kind, payload: _rule_holes(kind, payload, dialect),
        heuristic=parse_holes_text,
        apply_overrides=apply_hole_overrides,
        combine=concat,
    )


# ---------------------------------------------------------------------------
# Structured hints
# ---------------------------------------------------------------------------


def hinge_from_hint(hint: HingeHint, dialect: DrillingDialect) -> HolePatternSpec:
    if hint.hardware_id:
        named = dialect.hinge_patterns.get(normalize_key(hint.hardware_id))
        if named is not None:
            return named.to_spec(_K.hinge)
    return HolePatternSpec(
        kind=_K.hinge,
        offsets_mm=[hint.offset_mm] if hint.offset_mm else [100],
        distance_from_edge_mm=22,
        count=hint.count or 2,
        hardware_id=hint.hardware_id,
    )


def shelf_from_hint(hint: ShelfHint, dialect: DrillingDialect) -> HolePatternSpec:
    if hint.pattern:
        named = dialect.shelf_patterns.get(normalize_key(hint.pattern))
        if named is not None:
            return named.to_spec(_K.shelf_pins)
    if hint.system_mm == 32:
        return _system32()
    return HolePatternSpec(kind=_K.shelf_pins, offsets_mm=[50, 100, 150], distance_from_edge_mm=35)


def handle_from_hint(hint: HandleHint, dialect: DrillingDialect) -> HolePatternSpec:
    if hint.centers_mm:
        centers = format_number(hint.centers_mm)
        named = dialect.handle_patterns.get(f"CC{centers}") or dialect.handle_patterns.get(centers)
        if named is not None:
            return named.to_spec(_K.handle)
    return HolePatternSpec(
        kind=_K.handle,
        offsets_mm=[0, hint.centers_mm or 96],
        distance_from_edge_mm=30,
        note=f"Position: {hint.position}" if hint.position else None,
    )


def knob_from_hint(hint: KnobHint, dialect: DrillingDialect) -> HolePatternSpec:
    if hint.position:
        named = dialect.knob_patterns.get(normalize_key(hint.position))
        if named is not None:
            return named.to_spec(_K.knob)
    centered = hint.position == "center"
    return HolePatternSpec(
        kind=_K.knob,
        offsets_mm=[hint.offset_mm] if hint.offset_mm and not centered else [],
        distance_from_edge_mm=0 if centered else (hint.offset_mm or 37),
        note="Centered" if centered else None,
    )


def holes_from_hints(raw: RawDrillingFields, dialect: DrillingDialect) -> List[HolePatternSpec]:
    holes: List[HolePatternSpec] = []
    if raw.hinge is not None and raw.hinge.apply:
        holes.append(hinge_from_hint(raw.hinge, dialect))
    if raw.shelf is not None and raw.shelf.apply:
        holes.append(shelf_from_hint(raw.shelf, dialect))
    if raw.handle is not None and raw.handle.apply:
        holes.append(handle_from_hint(raw.handle, dialect))
    if raw.knob is not None and raw.knob.apply:
        holes.append(knob_from_hint(raw.knob, dialect))
    return holes


# ---------------------------------------------------------------------------
# Flag columns
# ---------------------------------------------------------------------------

# Preferred preset per kind column, first key found wins
_COLUMN_DEFAULTS = {
    "hinge": (_K.hinge, ("STD", "110")),
    "shelf": (_K.shelf_pins, ("32MM", "STD")),
    "handle": (_K.handle, ("96", "CC96")),
    "knob": (_K.knob, ("CTR", "CENTER")),
}

_FALLBACK_COLUMN_SPECS = {
    "hinge": HoleCode(kind=_K.hinge, count=2, offset_mm=100),
    "shelf": HoleCode(kind=_K.system32, pattern="32mm_system"),
    "handle": HoleCode(kind=_K.handle, centers_mm=96),
    "knob": HoleCode(kind=_K.knob, position="center"),
}


def _table(dialect: DrillingDialect, kind: HolePatternKind) -> Dict[str, HolePreset]:
    return dict(dialect.preset_tables())[kind]


def holes_from_columns(
    columns: RawDrillingColumns, dialect: DrillingDialect, heuristics: bool = True
) -> List[HolePatternSpec]:
    yes = dialect.yes_values
    holes: List[HolePatternSpec] = []
    for column, (kind, keys) in _COLUMN_DEFAULTS.items():
        value = getattr(columns, column)
        if value is None:
            continue
        table = _table(dialect, kind)
        if is_yes_value(value, yes):
            preset = next((table[k] for k in keys if k in table), None)
            if preset is not None:
                holes.append(preset.to_spec(kind))
            else:
                holes.append(hole_spec_from_code(_FALLBACK_COLUMN_SPECS[column]))
        elif isinstance(value, str) and not is_absent(value):
            named = table.get(normalize_key(value))
            if named is not None:
                holes.append(named.to_spec(kind))

    value = columns.holes if columns.holes is not None else columns.drilling
    if value is not None:
        if is_yes_value(value, yes):
            holes.append(_system32(note="Default drilling"))
        elif isinstance(value, str) and len(value.strip()) > 1:
            hit = drilling_resolver(dialect).resolve(value, heuristics)
            if hit is not None:
                holes.extend(hit[0])
    return holes


def normalize_holes(
    raw: Optional[RawDrillingFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> Optional[List[HolePatternSpec]]:
    if raw is None:
        return None
    if dialect is None:
        from ..default_dialect import DEFAULT_DIALECT

        dialect = DEFAULT_DIALECT
    family = dialect.drilling
    use_heuristics = heuristics_enabled(heuristics)
    holes: List[HolePatternSpec] = []

    if raw.text:
        hit = drilling_resolver(family).resolve(raw.text, use_heuristics)
        if hit is not None:
            holes.extend(hit[0])
            note_strategy(FAMILY, hit[1], code=raw.text)
    hinted = holes_from_hints(raw, family)
    if hinted:
        holes.extend(hinted)
        note_strategy(FAMILY, "hints")
    if raw.columns is not None:
        from_columns = holes_from_columns(raw.columns, family, use_heuristics)
        if from_columns:
            holes.extend(from_columns)
            note_strategy(FAMILY, "columns")
    if not holes and family.default_if_blank:
        holes = hole_specs_for_code(family.resolve_alias(family.default_if_blank) or family.default_if_blank, family) or []
        if holes:
            note_strategy(FAMILY, "default")
    return holes or None


__all__ = [
    "COMPAT_HOLE_CODES",
    "apply_hole_overrides",
    "drilling_resolver",
    "find_preset",
    "hole_specs_for_code",
    "holes_from_columns",
    "holes_from_hints",
    "normalize_holes",
]
