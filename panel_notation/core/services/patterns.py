"""Organization-defined pattern rules.

A rule is plain data: a regular expression plus a transform descriptor. No
executable code is ever loaded from configuration.

Transforms:

``code``
    ``template`` is rendered with the match groups (``{1}``, ``{name}``) and the
    result is decoded by the family's shortcode codec, e.g.
    ``pattern: "^BAND\\s+(\\w+)$"`` + ``template: "{1}"``.

``fields``
    ``fields`` is a static mapping whose string values may reference groups; the
    family normalizer builds its canonical spec from it, e.g.
    ``{"on_edge": "W2", "width_mm": "{1}"}``.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}
_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
_NUMERIC_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


class TransformKind(str, Enum):
    code = "code"
    fields = "fields"


class PatternTransform(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    kind: TransformKind
    template: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)


class DialectPattern(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str = ""
    pattern: str
    flags: str = "i"
    transform: Optional[PatternTransform] = None
    priority: int = 0
    enabled: bool = True
    example: Optional[str] = None
    # Legacy serialized handler body; kept for round-tripping, never executed
    handler_code: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _disable_unusable(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        name = data.get("name") or data.get("pattern")
        if data.get("transform") is None and data.get("enabled", True):
            if data.get("handler_code") or data.get("handlerCode"):
                logger.warning(
                    "pattern rule has a code handler but no transform; disabled",
                    extra={"rule": name},
                )
            else:
                logger.warning("pattern rule has no transform; disabled", extra={"rule": name})
            data = {**data, "enabled": False}
        pattern = data.get("pattern")
        if isinstance(pattern, str):
            try:
                compile_pattern(pattern, str(data.get("flags", "i") or ""))
            except re.error as exc:
                logger.warning(
                    "pattern rule regex invalid; disabled",
                    extra={"rule": name, "error_code": str(exc)},
                )
                data = {**data, "enabled": False}
        return data


@lru_cache(maxsize=512)
def compile_pattern(pattern: str, flags: str = "i") -> Pattern[str]:
    value = 0
    for flag in flags.lower():
        value |= _FLAG_MAP.get(flag, 0)
    return re.compile(pattern, value)


def sort_patterns(patterns: Iterable[DialectPattern]) -> List[DialectPattern]:
    """Order rules by descending priority; ties keep their configured order."""
    return sorted(patterns, key=lambda p: -p.priority)


def _group(match: re.Match, key: str) -> Optional[str]:
    try:
        return match.group(int(key)) if key.isdigit() else match.group(key)
    except IndexError:
        return None


def substitute(template: str, match: re.Match) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: _group(match, m.group(1)) or "", template)


def render_fields(fields: Dict[str, Any], match: re.Match) -> Dict[str, Any]:
    """Resolve group references in ``fields``; a value that is only a number becomes one."""
    rendered: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, str):
            text = substitute(value, match)
            if _NUMERIC_RE.match(text):
                number = float(text)
                rendered[key] = int(number) if number.is_integer() else number
            else:
                rendered[key] = text
        elif isinstance(value, dict):
            rendered[key] = render_fields(value, match)
        elif isinstance(value, list):
            rendered[key] = [
                render_fields({"v": item}, match)["v"] if isinstance(item, (str, dict)) else item
                for item in value
            ]
        else:
            rendered[key] = value
    return rendered


Payload = Union[str, Dict[str, Any]]


def evaluate_rules(
    patterns: Iterable[DialectPattern],
    text: str,
    convert: Callable[[TransformKind, Payload], Optional[T]],
    family: str,
) -> Optional[Tuple[T, DialectPattern]]:
    """Return the first non-empty conversion of the first matching enabled rule.

    ``patterns`` must already be priority-ordered. A rule whose transform or
    conversion fails is skipped as if it had not matched.
    """
    for rule in patterns:
        if not rule.enabled or rule.transform is None:
            continue
        try:
            match = compile_pattern(rule.pattern, rule.flags).search(text)
            if match is None:
                continue
            transform = rule.transform
            if transform.kind == TransformKind.code:
                payload: Payload = substitute(transform.template or "", match)
            else:
                payload = render_fields(transform.fields, match)
            result = convert(transform.kind, payload)
        except Exception as exc:
            logger.warning(
                "pattern rule failed; treated as no match",
                extra={"rule": rule.name or rule.pattern, "family": family, "error_code": repr(exc)},
            )
            continue
        if result:
            return result, rule
    return None


__all__ = [
    "DialectPattern",
    "PatternTransform",
    "TransformKind",
    "compile_pattern",
    "evaluate_rules",
    "render_fields",
    "sort_patterns",
    "substitute",
]
