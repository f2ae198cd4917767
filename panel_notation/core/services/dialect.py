"""Service dialect models, yes/no helpers and the default merge.

A dialect maps one organization's notation conventions onto canonical form.
The same models describe a complete dialect and an organization's partial
override: fields the organization did not supply are simply absent from
``model_fields_set`` and are inherited during :func:`merge_with_default`.

Stored configuration may spell keys either in snake_case or camelCase.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from panel_notation.core.errors import DialectError, ErrorCode

from .patterns import DialectPattern, sort_patterns
from .shortcodes import format_number
from .types import CNC_PARAM_MODELS, CncOperation, CncOpType, EdgeSide, HolePatternKind, HolePatternSpec, ParamValue, PartFace

logger = logging.getLogger(__name__)

FlagValue = Union[bool, int, float, str]

_WS_RE = re.compile(r"\s+")


def normalize_key(key: Any) -> str:
    """Alias/preset table key form: trimmed, upper-cased, single-spaced."""
    return _WS_RE.sub(" ", str(key).strip()).upper()


def _normalize_keys(table: Optional[Mapping[Any, Any]]) -> Dict[str, Any]:
    return {normalize_key(k): v for k, v in (table or {}).items()}


class _DialectModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# ---------------------------------------------------------------------------
# Yes / no interpretation
# ---------------------------------------------------------------------------


def _flag_token(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value).strip().upper()


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_yes_value(value: Any, yes_values: Iterable[FlagValue]) -> bool:
    token = _flag_token(value)
    if token is None:
        return False
    return token in {_flag_token(v) for v in yes_values}


def is_no_value(value: Any, no_values: Iterable[FlagValue]) -> bool:
    token = _flag_token(value)
    if token is None:
        return False
    return token in {_flag_token(v) for v in no_values}


# ---------------------------------------------------------------------------
# Named presets
# ---------------------------------------------------------------------------


class HolePreset(_DialectModel):
    """A named drilling pattern; ``kind`` falls back to the table it lives in."""

    kind: Optional[HolePatternKind] = None
    ref_edge: EdgeSide = EdgeSide.L1
    offsets_mm: List[float] = Field(default_factory=list)
    distance_from_edge_mm: float = 22
    count: Optional[int] = None
    diameter_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    hardware_id: Optional[str] = None
    note: Optional[str] = None

    def to_spec(self, default_kind: HolePatternKind, pattern_id: Optional[str] = None) -> HolePatternSpec:
        return HolePatternSpec(
            kind=self.kind or default_kind,
            ref_edge=self.ref_edge,
            offsets_mm=list(self.offsets_mm),
            distance_from_edge_mm=self.distance_from_edge_mm,
            count=self.count,
            diameter_mm=self.diameter_mm,
            depth_mm=self.depth_mm,
            hardware_id=self.hardware_id,
            pattern_id=pattern_id,
            note=self.note,
        )


class CncMacro(_DialectModel):
    type: CncOpType
    shape_id: str = "custom"
    params: Dict[str, ParamValue] = Field(default_factory=dict)
    face: Optional[PartFace] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def _check_params(self) -> "CncMacro":
        model = CNC_PARAM_MODELS.get(self.type)
        if model is not None:
            try:
                model.model_validate(self.params)
            except ValidationError as exc:
                missing = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
                raise ValueError(f"{self.type.value} macro params invalid: {missing or exc.error_count()}") from exc
        return self

    def to_operation(self) -> CncOperation:
        return CncOperation(
            type=self.type,
            shape_id=self.shape_id,
            params=dict(self.params),
            face=self.face,
            note=self.note,
        )


# ---------------------------------------------------------------------------
# Family dialects
# ---------------------------------------------------------------------------


class _FamilyDialect(_DialectModel):
    aliases: Dict[str, str] = Field(default_factory=dict)
    yes_values: List[FlagValue] = Field(default_factory=list)
    no_values: List[FlagValue] = Field(default_factory=list)
    default_if_blank: Optional[str] = None
    patterns: List[DialectPattern] = Field(default_factory=list)
    column_mappings: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("aliases", mode="before")
    @classmethod
    def _upper_alias_keys(cls, value: Any) -> Any:
        return _normalize_keys(value) if isinstance(value, Mapping) else value

    def resolve_alias(self, text: str) -> Optional[str]:
        return self.aliases.get(normalize_key(text))


class EdgebandDialect(_FamilyDialect):
    pass


class GrooveDialect(_FamilyDialect):
    default_width_mm: float = 4
    default_depth_mm: float = 10
    default_offset_mm: float = 10
    drawer_bottom_offset_mm: float = 12
    drawer_bottom_depth_mm: float = 8


class DrillingDialect(_FamilyDialect):
    hinge_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    shelf_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    handle_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    knob_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    drawer_slide_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    cam_lock_patterns: Dict[str, HolePreset] = Field(default_factory=dict)
    dowel_patterns: Dict[str, HolePreset] = Field(default_factory=dict)

    @field_validator(
        "hinge_patterns",
        "shelf_patterns",
        "handle_patterns",
        "knob_patterns",
        "drawer_slide_patterns",
        "cam_lock_patterns",
        "dowel_patterns",
        mode="before",
    )
    @classmethod
    def _upper_preset_keys(cls, value: Any) -> Any:
        return _normalize_keys(value) if isinstance(value, Mapping) else value

    def preset_tables(self) -> List[tuple[HolePatternKind, Dict[str, HolePreset]]]:
        """Named tables in lookup order, each with the kind its entries default to."""
        return [
            (HolePatternKind.hinge, self.hinge_patterns),
            (HolePatternKind.shelf_pins, self.shelf_patterns),
            (HolePatternKind.handle, self.handle_patterns),
            (HolePatternKind.knob, self.knob_patterns),
            (HolePatternKind.drawer_slide, self.drawer_slide_patterns),
            (HolePatternKind.cam_lock, self.cam_lock_patterns),
            (HolePatternKind.dowel, self.dowel_patterns),
        ]


class CncDialect(_FamilyDialect):
    macros: Dict[str, CncMacro] = Field(default_factory=dict)

    @field_validator("macros", mode="before")
    @classmethod
    def _upper_macro_keys(cls, value: Any) -> Any:
        return _normalize_keys(value) if isinstance(value, Mapping) else value


class ServiceDialect(_DialectModel):
    organization_id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    version: Optional[str] = None
    edgeband: EdgebandDialect = Field(default_factory=EdgebandDialect)
    groove: GrooveDialect = Field(default_factory=GrooveDialect)
    drilling: DrillingDialect = Field(default_factory=DrillingDialect)
    cnc: CncDialect = Field(default_factory=CncDialect)
    use_ai_fallback: bool = True
    auto_learn: bool = True


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

# Fields merged key by key; everything else supplied by the organization replaces
_MERGE_BY_KEY = {
    "aliases",
    "column_mappings",
    "macros",
    "hinge_patterns",
    "shelf_patterns",
    "handle_patterns",
    "knob_patterns",
    "drawer_slide_patterns",
    "cam_lock_patterns",
    "dowel_patterns",
}

F = TypeVar("F", bound=_FamilyDialect)


def _merge_family(base: F, patch: Optional[F]) -> F:
    if patch is None:
        return base
    updates: Dict[str, Any] = {}
    for name in patch.model_fields_set:
        value = getattr(patch, name)
        if name in _MERGE_BY_KEY:
            updates[name] = {**getattr(base, name), **value}
        elif name == "patterns":
            updates[name] = [*base.patterns, *value]
        else:
            updates[name] = value
    merged = base.model_copy(update=updates)
    return merged.model_copy(update={"patterns": sort_patterns(merged.patterns)})


def parse_dialect(data: Union[ServiceDialect, Mapping[str, Any], None], organization_id: Optional[str] = None) -> ServiceDialect:
    """Validate a stored (possibly partial) dialect record."""
    if isinstance(data, ServiceDialect):
        return data
    try:
        return ServiceDialect.model_validate(dict(data or {}))
    except ValidationError as exc:
        raise DialectError(
            ErrorCode.DIALECT_INVALID,
            f"Invalid dialect configuration: {exc.error_count()} error(s)",
            organization_id=organization_id,
        ) from exc


def merge_with_default(
    partial: Union[ServiceDialect, Mapping[str, Any], None],
    default: Optional[ServiceDialect] = None,
) -> ServiceDialect:
    """Layer an organization's partial dialect over ``default``.

    Alias, preset, macro and column-mapping tables merge by key (organization
    wins); yes/no sets, ``default_if_blank`` and scalars are replaced when
    supplied; custom rules are concatenated and sorted once by priority.
    """
    if default is None:
        from .default_dialect import DEFAULT_DIALECT

        default = DEFAULT_DIALECT
    patch = parse_dialect(partial)
    fields = patch.model_fields_set
    top: Dict[str, Any] = {
        name: getattr(patch, name)
        for name in ("organization_id", "name", "description", "version", "use_ai_fallback", "auto_learn")
        if name in fields
    }
    top["edgeband"] = _merge_family(default.edgeband, patch.edgeband if "edgeband" in fields else None)
    top["groove"] = _merge_family(default.groove, patch.groove if "groove" in fields else None)
    top["drilling"] = _merge_family(default.drilling, patch.drilling if "drilling" in fields else None)
    top["cnc"] = _merge_family(default.cnc, patch.cnc if "cnc" in fields else None)
    return default.model_copy(update=top)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def read_config_file(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON mapping from disk."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise DialectError(ErrorCode.DIALECT_INVALID, f"Cannot read {path}: {exc}", source=path) from exc
    if not isinstance(data, dict):
        raise DialectError(ErrorCode.DIALECT_INVALID, f"{path} must contain a mapping", source=path)
    return data


def load_dialect_partial(path: str, organization_id: Optional[str] = None) -> ServiceDialect:
    """Load an organization dialect file; the dialect may sit under a ``dialect`` key."""
    if not os.path.exists(path):
        raise DialectError(ErrorCode.DIALECT_INVALID, f"{path} not found", organization_id, path)
    data = read_config_file(path)
    section = data.get("dialect", data)
    if not isinstance(section, dict):
        raise DialectError(ErrorCode.DIALECT_INVALID, "dialect section must be a mapping", organization_id, path)
    try:
        return parse_dialect(section, organization_id)
    except DialectError as exc:
        exc.source = path
        raise


__all__ = [
    "CncDialect",
    "CncMacro",
    "DrillingDialect",
    "EdgebandDialect",
    "GrooveDialect",
    "HolePreset",
    "ServiceDialect",
    "is_blank",
    "is_no_value",
    "is_yes_value",
    "load_dialect_partial",
    "merge_with_default",
    "normalize_key",
    "parse_dialect",
    "read_config_file",
]
