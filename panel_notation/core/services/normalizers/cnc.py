"""CNC normalizer: raw CNC fields -> list of :class:`CncOperation`."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..dialect import CncDialect, ServiceDialect, is_yes_value, normalize_key
from ..patterns import Payload, TransformKind
from ..raw_fields import RawCncColumns, RawCncFields
from ..shortcodes import Number, decode_cnc, parse_shortcode
from ..types import CncOperation, CncOpType
from .common import TextResolver, concat, heuristics_enabled, is_absent, note_strategy
from .heuristics import parse_cnc_text

logger = logging.getLogger(__name__)

FAMILY = "cnc"

_T = CncOpType

# Flag-only texts that still ask for machining
_CUSTOM_FLAGS = {"CUSTOM", "CNC", "YES"}

# Override keys mapped onto parameter names
_PARAM_OVERRIDES = {"depth": "depth", "width": "width", "radius": "radius", "diameter": "diameter", "count": "count"}


def infer_cnc_type(shape_type: str) -> CncOpType:
    """Guess the operation kind from a free-form shape name."""
    lower = shape_type.lower()
    if any(word in lower for word in ("cutout", "sink", "hob")):
        return _T.cutout
    if "pocket" in lower:
        return _T.pocket
    if "radius" in lower or "corner" in lower:
        return _T.radius
    if any(word in lower for word in ("profile", "contour", "route")):
        return _T.contour
    if "drill" in lower or "hole" in lower:
        return _T.drill_array
    if "text" in lower or "engrav" in lower:
        return _T.text
    if "chamfer" in lower or "bevel" in lower:
        return _T.chamfer
    if "rebate" in lower or "rabbet" in lower:
        return _T.rebate
    return _T.custom


def _macro(key: Optional[str], dialect: CncDialect) -> Optional[CncOperation]:
    if not key:
        return None
    macro = dialect.macros.get(normalize_key(key))
    if macro is None:
        return None
    try:
        return macro.to_operation()
    except ValidationError as exc:
        # model_construct()ed dialects skip the macro check
        logger.warning(
            "cnc macro rejected",
            extra={"family": FAMILY, "code": normalize_key(key), "error_code": str(exc.error_count())},
        )
        return None


def cnc_ops_for_code(code: Optional[str], dialect: CncDialect) -> Optional[List[CncOperation]]:
    """Resolve an alias target: dialect macro first, then the codec."""
    if not code:
        return None
    parsed = parse_shortcode(code)
    op = _macro(parsed.base_code, dialect) or decode_cnc(parsed.base_code)
    if op is None:
        return None
    ops = [op]
    if parsed.overrides:
        ops = apply_cnc_overrides(ops, parsed.overrides)
    return ops


def _override_one(op: CncOperation, overrides: Dict[str, Number]) -> CncOperation:
    params: Dict[str, Any] = dict(op.params)
    changed = False
    for key, param in _PARAM_OVERRIDES.items():
        if overrides.get(key) is not None and (param in params or op.type == _T.custom):
            params[param] = overrides[key]
            changed = True
    if overrides.get("value") is not None:
        # A bare number sizes the single dimension the kind has
        for param in ("radius", "size"):
            if param in params:
                params[param] = overrides["value"]
                changed = True
                break
    if not changed:
        return op
    return CncOperation.model_validate({**op.model_dump(), "params": params})


def apply_cnc_overrides(ops: List[CncOperation], overrides: Dict[str, Number]) -> List[CncOperation]:
    return [_override_one(op, overrides) for op in ops]


def _rule_ops(kind: TransformKind, payload: Payload, dialect: CncDialect) -> Optional[List[CncOperation]]:
    if kind == TransformKind.code:
        return cnc_ops_for_code(str(payload), dialect)
    if not isinstance(payload, dict) or not payload.get("type"):
        return None
    return [
        CncOperation(
            type=payload["type"],
            shape_id=payload.get("shape_id", "custom"),
            params=payload.get("params", {}),
            face=payload.get("face"),
            note=payload.get("note"),
        )
    ]


def cnc_resolver(dialect: CncDialect) -> TextResolver[List[CncOperation]]:
    def one(op: Optional[CncOperation]) -> Optional[List[CncOperation]]:
        return [op] if op is not None else None

    return TextResolver(
        FAMILY,
        steps=[
            ("alias", lambda text: cnc_ops_for_code(dialect.resolve_alias(text), dialect)),
            ("macro", lambda text: one(_macro(text, dialect))),
            ("codec", lambda text: one(decode_cnc(text))),
        ],
        patterns=dialect.patterns,
        convert_rule=lambda kind, payload: _rule_ops(kind, payload, dialect),
        heuristic=parse_cnc_text,
        apply_overrides=apply_cnc_overrides,
        combine=concat,
    )


def _custom(note: str, shape_id: str = "custom") -> CncOperation:
    return CncOperation(type=_T.custom, shape_id=shape_id, note=note)


def cnc_ops_from_text(text: str, dialect: CncDialect, heuristics: bool = True) -> Optional[List[CncOperation]]:
    hit = cnc_resolver(dialect).resolve(text, heuristics)
    if hit is not None:
        note_strategy(FAMILY, hit[1], code=text)
        return hit[0]
    if text.strip().upper() in _CUSTOM_FLAGS:
        note_strategy(FAMILY, "flag", code=text)
        return [_custom("Custom CNC operation")]
    return None


def cnc_op_for_program(program_id: str, dialect: CncDialect) -> CncOperation:
    """A program reference: a macro, an alias of one, or an opaque custom program."""
    op = _macro(program_id, dialect) or _macro(dialect.resolve_alias(program_id), dialect)
    if op is not None:
        return op
    return CncOperation(
        type=_T.custom,
        shape_id=program_id,
        params={"program_id": program_id},
        note=f"CNC Program: {program_id}",
    )


_COLUMN_FLAGS = (
    ("cnc", lambda: _custom("CNC operation required")),
    ("routing", lambda: CncOperation(type=_T.contour, shape_id="edge_profile", note="Edge routing required")),
    ("machining", lambda: _custom("Machining required", shape_id="machining")),
)


def cnc_ops_from_columns(columns: RawCncColumns, dialect: CncDialect, heuristics: bool = True) -> List[CncOperation]:
    ops: List[CncOperation] = []
    for column, flagged in _COLUMN_FLAGS:
        value = getattr(columns, column)
        if value is None:
            continue
        if isinstance(value, str) and len(value.strip()) > 1 and not is_yes_value(value, dialect.yes_values):
            ops.extend(cnc_ops_from_text(value, dialect, heuristics) or [])
        elif is_yes_value(value, dialect.yes_values):
            ops.append(flagged())
    return ops


def normalize_cnc(
    raw: Optional[RawCncFields],
    dialect: Optional[ServiceDialect] = None,
    *,
    heuristics: bool = True,
) -> Optional[List[CncOperation]]:
    if raw is None:
        return None
    if dialect is None:
        from ..default_dialect import DEFAULT_DIALECT

        dialect = DEFAULT_DIALECT
    family = dialect.cnc
    use_heuristics = heuristics_enabled(heuristics)
    ops: List[CncOperation] = []

    if raw.text and not is_absent(raw.text):
        ops.extend(cnc_ops_from_text(raw.text, family, use_heuristics) or [])
    if raw.program_id and raw.program_id.strip():
        ops.append(cnc_op_for_program(raw.program_id.strip(), family))
        note_strategy(FAMILY, "program")
    if raw.shape_type and raw.params:
        try:
            ops.append(
                CncOperation(
                    type=infer_cnc_type(raw.shape_type),
                    shape_id=raw.shape_type.lower(),
                    params=dict(raw.params),
                )
            )
            note_strategy(FAMILY, "structured")
        except ValidationError as exc:
            logger.warning(
                "structured cnc params rejected",
                extra={"family": FAMILY, "code": raw.shape_type, "error_code": str(exc.error_count())},
            )
    if raw.columns is not None:
        from_columns = cnc_ops_from_columns(raw.columns, family, use_heuristics)
        if from_columns:
            ops.extend(from_columns)
            note_strategy(FAMILY, "columns")
    if not ops and family.default_if_blank:
        ops = cnc_ops_for_code(family.resolve_alias(family.default_if_blank) or family.default_if_blank, family) or []
        if ops:
            note_strategy(FAMILY, "default")
    return ops or None


__all__ = [
    "apply_cnc_overrides",
    "cnc_op_for_program",
    "cnc_ops_for_code",
    "cnc_ops_from_columns",
    "cnc_ops_from_text",
    "cnc_resolver",
    "infer_cnc_type",
    "normalize_cnc",
]
