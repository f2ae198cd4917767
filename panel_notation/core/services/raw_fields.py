"""Raw service fields: the input boundary of the normalizers.

Source rows arrive either as a free-text line (OCR output, a notes column) or as
a header -> value map. The helpers here only route fragments to the right
family; interpreting them is the normalizers' job.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from .dialect import ServiceDialect, normalize_key
from .shortcodes import decode_cnc, decode_edges, decode_groove, decode_hole, parse_shortcode

FlagValue = Union[bool, int, float, str]


# ============================================================================
# Models
# ============================================================================


class RawEdgebandColumns(BaseModel):
    L: Optional[FlagValue] = None
    W: Optional[FlagValue] = None
    L1: Optional[FlagValue] = None
    L2: Optional[FlagValue] = None
    W1: Optional[FlagValue] = None
    W2: Optional[FlagValue] = None
    all: Optional[FlagValue] = None


class RawEdgebandFields(BaseModel):
    text: Optional[str] = None
    columns: Optional[RawEdgebandColumns] = None
    tape_id: Optional[str] = None
    thickness_mm: Optional[float] = None


class RawGrooveColumns(BaseModel):
    long: Optional[FlagValue] = None
    width: Optional[FlagValue] = None
    all: Optional[FlagValue] = None
    back: Optional[FlagValue] = None
    bottom: Optional[FlagValue] = None
    width_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    offset_mm: Optional[float] = None


class RawGrooveFields(BaseModel):
    text: Optional[str] = None
    columns: Optional[RawGrooveColumns] = None


class HingeHint(BaseModel):
    apply: bool = False
    count: Optional[int] = None
    offset_mm: Optional[float] = None
    hardware_id: Optional[str] = None


class ShelfHint(BaseModel):
    apply: bool = False
    pattern: Optional[str] = None
    system_mm: Optional[float] = None


class HandleHint(BaseModel):
    apply: bool = False
    centers_mm: Optional[float] = None
    position: Optional[str] = None


class KnobHint(BaseModel):
    apply: bool = False
    position: Optional[str] = None
    offset_mm: Optional[float] = None


class RawDrillingColumns(BaseModel):
    holes: Optional[FlagValue] = None
    drilling: Optional[FlagValue] = None
    hinge: Optional[FlagValue] = None
    shelf: Optional[FlagValue] = None
    handle: Optional[FlagValue] = None
    knob: Optional[FlagValue] = None


class RawDrillingFields(BaseModel):
    text: Optional[str] = None
    hinge: Optional[HingeHint] = None
    shelf: Optional[ShelfHint] = None
    handle: Optional[HandleHint] = None
    knob: Optional[KnobHint] = None
    columns: Optional[RawDrillingColumns] = None


class RawCncColumns(BaseModel):
    cnc: Optional[FlagValue] = None
    routing: Optional[FlagValue] = None
    machining: Optional[FlagValue] = None


class RawCncFields(BaseModel):
    text: Optional[str] = None
    program_id: Optional[str] = None
    shape_type: Optional[str] = None
    params: Optional[Dict[str, Union[bool, int, float, str]]] = None
    columns: Optional[RawCncColumns] = None


class RawServiceFields(BaseModel):
    edgeband: Optional[RawEdgebandFields] = None
    groove: Optional[RawGrooveFields] = None
    drilling: Optional[RawDrillingFields] = None
    cnc: Optional[RawCncFields] = None
    source_text: Optional[str] = None
    detected_columns: List[str] = Field(default_factory=list)


def _columns_set(columns: Optional[BaseModel]) -> bool:
    return columns is not None and any(v is not None for v in columns.model_dump().values())


def has_raw_data(raw: Optional[RawServiceFields]) -> bool:
    if raw is None:
        return False
    eb, grv, drl, cnc = raw.edgeband, raw.groove, raw.drilling, raw.cnc
    return bool(
        (eb and (eb.text or _columns_set(eb.columns)))
        or (grv and (grv.text or _columns_set(grv.columns)))
        or (
            drl
            and (
                drl.text
                or _columns_set(drl.columns)
                or any(h is not None and h.apply for h in (drl.hinge, drl.shelf, drl.handle, drl.knob))
            )
        )
        or (cnc and (cnc.text or cnc.program_id or cnc.shape_type or _columns_set(cnc.columns)))
    )


# ============================================================================
# Text extraction
# ============================================================================

# Bare tokens too ambiguous to claim from free text
AMBIGUOUS_TOKENS = {"0", "4", "L", "W", "-", "NONE"}

_TOKEN_STRIP = ",;()[]"

_KEYWORD_PATTERNS: Dict[str, Sequence[re.Pattern]] = {
    "edgeband": (
        re.compile(r"\b(?:EB|EDGE\s*BAND(?:ING)?|EDGEBAND(?:ING)?|EDG(?:E|ING))\s*[:=]\s*([A-Z0-9+,@.]+)", re.I),
    ),
    "groove": (re.compile(r"\b(?:GROOVES?|GRV)\s*[:=]\s*([A-Z0-9@.\-]+)", re.I),),
    "drilling": (
        re.compile(r"\b(?:HINGES?|HOLES?|DRILL(?:ING)?)\s*[:=]\s*([A-Z0-9@.\-]+)", re.I),
    ),
    "cnc": (re.compile(r"\b(?:CNC|ROUTING)\s*[:=]\s*([A-Z0-9@.\-]+)", re.I),),
}

_PHRASE_PATTERNS: Dict[str, Sequence[re.Pattern]] = {
    "groove": (
        re.compile(r"\bback\s*(?:panel)?\s*groove\b", re.I),
        re.compile(r"\bgroove\s*(?:for\s*)?back\s*panel\b", re.I),
        re.compile(r"\bdrawer\s*(?:bottom)?\s*groove\b", re.I),
        re.compile(r"\bgroove\s*(?:for\s*)?drawer(?:\s*bottom)?\b", re.I),
        re.compile(r"\bgroove\s*(?:on\s*)?(?:all|long|width|short)\s*(?:edges?|sides?)\b", re.I),
        re.compile(r"\b\d+(?:\.\d+)?\s*mm\s*groove\b|\bgroove\s*\d+(?:\.\d+)?\s*mm\b", re.I),
    ),
    "edgeband": (
        re.compile(
            r"\b(?:(?:all|four|4|both|two|2|one)\s+)?(?:long|short|width|front|back|left|right|visible|all|4)"
            r"\s*(?:edges?|sides?)\b",
            re.I,
        ),
    ),
    "drilling": (
        re.compile(r"\b(?:\d+\s*)?hinges?\b(?:\s*(?:at|@)?\s*\d+\s*mm)?", re.I),
        re.compile(r"\bshelf\s*(?:pins?|holes?|pegs?)\b|\b32\s*mm\s*system\b", re.I),
        re.compile(r"\b(?:handle|pull)s?\b(?:\s*\d+\s*(?:mm\s*)?(?:cc|centers?|centres?))?", re.I),
        re.compile(r"\bknobs?\b(?:\s*cent(?:er|re)d?)?", re.I),
        re.compile(r"\bdrawer\s*slides?\b|\bcam\s*locks?\b|\bdowels?\b", re.I),
    ),
    "cnc": (
        re.compile(r"\bsink\s*(?:cut(?:out)?|hole)?(?:\s*\d+\s*(?:x|by)\s*\d+)?", re.I),
        re.compile(r"\b(?:hob|cooktop|stove)\s*(?:cut(?:out)?|hole)?(?:\s*\d+\s*(?:x|by)\s*\d+)?", re.I),
        re.compile(r"\b(?:\d+\s*(?:mm)?\s*)?(?:corner\s*)?radius\b(?:\s*(?:front|back|left|right))?", re.I),
        re.compile(r"\brounded\s*corners?\b|\bedge\s*profile\b|\b(?:ogee|bevel|roundover)\b", re.I),
        re.compile(r"\bpocket\b(?:\s*\d+\s*(?:x|by)\s*\d+(?:\s*(?:x|by)\s*\d+)?)?", re.I),
        re.compile(r"\b(?:rebate|rabbet)\b(?:\s*\d+\s*(?:x|by)\s*\d+)?|\bchamfer\b|\bengrav\w*\b", re.I),
    ),
}

# Groove phrases are claimed before edge phrases ("groove on all edges")
_PHRASE_ORDER = ("groove", "edgeband", "drilling", "cnc")


def classify_token(token: str) -> Optional[str]:
    """Family whose codec decodes ``token`` (override suffix allowed), if any."""
    base = parse_shortcode(token).base_code
    if not base or base in AMBIGUOUS_TOKENS:
        return None
    if decode_groove(base) is not None:
        return "groove"
    if decode_hole(base) is not None:
        return "drilling"
    if decode_cnc(base) is not None:
        return "cnc"
    edges = decode_edges(base)
    if edges:
        return "edgeband"
    return None


def _claim_tokens(text: str) -> Tuple[Dict[str, List[str]], str]:
    found: Dict[str, List[str]] = {}
    remaining: List[str] = []
    for raw_token in text.split():
        token = raw_token.strip(_TOKEN_STRIP)
        family = classify_token(token) if token else None
        if family is None:
            remaining.append(raw_token)
        else:
            found.setdefault(family, []).append(token)
    return found, " ".join(remaining)


def _claim_phrases(text: str, found: Dict[str, List[str]]) -> None:
    for family, patterns in _KEYWORD_PATTERNS.items():
        if family in found:
            continue
        for pattern in patterns:
            hits = [m.group(1) for m in pattern.finditer(text)]
            if hits:
                found[family] = hits
                text = pattern.sub(" ", text)
                break
    for family in _PHRASE_ORDER:
        hits: List[str] = []
        for pattern in _PHRASE_PATTERNS[family]:
            for match in pattern.finditer(text):
                hits.append(match.group(0).strip())
            text = pattern.sub(" ", text)
        if hits and family not in found:
            found[family] = hits


def extract_raw_fields_from_text(text: str, column_headers: Optional[Sequence[str]] = None) -> RawServiceFields:
    """Route the fragments of a free-text line to their service families.

    Shortcode tokens are claimed first; keyword (``EB: 2L``) and natural
    language phrases (``back panel groove``) only fill families still empty.
    """
    raw = RawServiceFields(source_text=text, detected_columns=list(column_headers or []))
    if not text or not text.strip():
        return raw
    found, remaining = _claim_tokens(text)
    _claim_phrases(remaining, found)

    def joined(family: str) -> Optional[str]:
        parts = found.get(family)
        return ", ".join(parts) if parts else None

    if joined("edgeband"):
        raw.edgeband = RawEdgebandFields(text=joined("edgeband"))
    if joined("groove"):
        raw.groove = RawGrooveFields(text=joined("groove"))
    if joined("drilling"):
        raw.drilling = RawDrillingFields(text=joined("drilling"))
    if joined("cnc"):
        raw.cnc = RawCncFields(text=joined("cnc"))
    return raw


# ============================================================================
# Column extraction
# ============================================================================


# Dialect mapping keys for the grouped edge columns
_EDGE_GROUP_FIELDS = {"long": "L", "width": "W"}


def _find_column(columns: Mapping[str, Any], names: Sequence[str]) -> Tuple[bool, Any]:
    wanted = {normalize_key(n) for n in names}
    for header, value in columns.items():
        if normalize_key(header) in wanted:
            return True, value
    return False, None


def _mapped(columns: Mapping[str, Any], mappings: Mapping[str, Sequence[str]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, names in mappings.items():
        hit, value = _find_column(columns, names)
        if hit:
            out[field] = value
    return out


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _flag(value: Any) -> Optional[FlagValue]:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def extract_raw_fields_from_columns(
    columns: Mapping[str, Any], dialect: Optional[ServiceDialect] = None
) -> RawServiceFields:
    """Map header -> value pairs onto per-family column records.

    Headers match the dialect's column mappings exactly, ignoring case and
    surrounding whitespace.
    """
    if dialect is None:
        from .default_dialect import DEFAULT_DIALECT

        dialect = DEFAULT_DIALECT
    raw = RawServiceFields(detected_columns=[str(k) for k in columns.keys()])

    eb = {_EDGE_GROUP_FIELDS.get(k, k): v for k, v in _mapped(columns, dialect.edgeband.column_mappings).items()}
    if eb:
        raw.edgeband = RawEdgebandFields(
            columns=RawEdgebandColumns(**{k: _flag(v) for k, v in eb.items() if k in RawEdgebandColumns.model_fields})
        )

    grv = _mapped(columns, dialect.groove.column_mappings)
    if grv:
        record: Dict[str, Any] = {}
        for key, value in grv.items():
            if key in ("width_mm", "depth_mm", "offset_mm"):
                record[key] = _to_float(value)
            elif key in RawGrooveColumns.model_fields:
                record[key] = _flag(value)
        raw.groove = RawGrooveFields(columns=RawGrooveColumns(**record))

    drl = _mapped(columns, dialect.drilling.column_mappings)
    if drl:
        raw.drilling = RawDrillingFields(
            columns=RawDrillingColumns(**{k: _flag(v) for k, v in drl.items() if k in RawDrillingColumns.model_fields})
        )

    cnc = _mapped(columns, dialect.cnc.column_mappings)
    if cnc:
        raw.cnc = RawCncFields(
            columns=RawCncColumns(**{k: _flag(v) for k, v in cnc.items() if k in RawCncColumns.model_fields})
        )
    return raw


__all__ = [
    "HandleHint",
    "HingeHint",
    "KnobHint",
    "RawCncColumns",
    "RawCncFields",
    "RawDrillingColumns",
    "RawDrillingFields",
    "RawEdgebandColumns",
    "RawEdgebandFields",
    "RawGrooveColumns",
    "RawGrooveFields",
    "RawServiceFields",
    "ShelfHint",
    "classify_token",
    "extract_raw_fields_from_text",
    "extract_raw_fields_from_columns",
    "has_raw_data",
]
