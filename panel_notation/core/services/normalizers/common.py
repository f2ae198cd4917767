"""Strategy chain shared by the four family normalizers."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from panel_notation.core.config import get_settings
from panel_notation.utils.metrics import record_strategy

from ..dialect import is_no_value, is_yes_value
from ..patterns import DialectPattern, Payload, TransformKind, evaluate_rules
from ..shortcodes import Number, parse_shortcode

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Text meaning "no service"
ABSENCE_TOKENS = {"", "-", "0", "NONE"}

_SEGMENT_SPLIT_RE = re.compile(r"[,;]")


def is_absent(text: Optional[str]) -> bool:
    return text is None or text.strip().upper() in ABSENCE_TOKENS


def is_code_cell(value: Any, yes_values: Sequence[Any], no_values: Sequence[Any] = ()) -> bool:
    """A column cell holding notation text rather than a yes/no flag."""
    if not isinstance(value, str) or len(value.strip()) <= 1:
        return False
    return not is_yes_value(value, yes_values) and not is_no_value(value, no_values)


def heuristics_enabled(heuristics: bool) -> bool:
    return heuristics and get_settings().NL_HEURISTICS_ENABLED


def split_overrides(text: str) -> Tuple[str, Dict[str, Number]]:
    """Split ``text`` at ``@`` only when the suffix holds real overrides."""
    if "@" not in text:
        return text, {}
    parsed = parse_shortcode(text)
    if not parsed.has_overrides:
        return text, {}
    return text.partition("@")[0].strip(), dict(parsed.overrides)


Step = Tuple[str, Callable[[str], Optional[T]]]


class TextResolver(Generic[T]):
    """Resolve one text notation through an ordered strategy chain.

    ``steps`` are the exact strategies (alias, preset, codec, built-ins);
    custom rules and the heuristic recognizer follow them. A comma or
    semicolon separated text that no exact strategy reads as a whole is
    resolved per segment when every segment resolves on its own.
    """

    def __init__(
        self,
        family: str,
        steps: Sequence[Step],
        patterns: Sequence[DialectPattern],
        convert_rule: Callable[[TransformKind, Payload], Optional[T]],
        heuristic: Optional[Callable[[str], Optional[T]]],
        apply_overrides: Callable[[T, Dict[str, Number]], T],
        combine: Callable[[List[T]], T],
    ):
        self.family = family
        self.steps = list(steps)
        self.patterns = patterns
        self.convert_rule = convert_rule
        self.heuristic = heuristic
        self.apply_overrides = apply_overrides
        self.combine = combine

    def _exact(self, text: str) -> Optional[Tuple[T, str]]:
        for name, step in self.steps:
            result = step(text)
            if result:
                return result, name
        hit = evaluate_rules(self.patterns, text, self.convert_rule, self.family)
        if hit is not None:
            result, rule = hit
            logger.debug(
                "custom rule matched",
                extra={"family": self.family, "rule": rule.name or rule.pattern},
            )
            return result, "rule"
        return None

    def _single(self, text: str, use_heuristics: bool) -> Optional[Tuple[T, str]]:
        base, overrides = split_overrides(text)
        if is_absent(base):
            return None
        found = self._exact(base)
        if found is None and use_heuristics and self.heuristic is not None:
            result = self.heuristic(base)
            if result:
                found = (result, "heuristic")
        if found is None:
            return None
        result, strategy = found
        if overrides:
            result = self.apply_overrides(result, overrides)
        return result, strategy

    def resolve(self, text: Optional[str], use_heuristics: bool = True) -> Optional[Tuple[T, str]]:
        if is_absent(text):
            return None
        text = text.strip()
        segments = [s.strip() for s in _SEGMENT_SPLIT_RE.split(text) if s.strip()]
        if len(segments) > 1:
            # An override suffix belongs to one segment, never to the whole list
            whole = self._exact(text) if "@" not in text else None
            if whole is not None:
                return whole
            parts = [self._single(segment, use_heuristics) for segment in segments if not is_absent(segment)]
            if parts and all(p is not None for p in parts):
                return self.combine([p[0] for p in parts]), "segments"
        return self._single(text, use_heuristics)


def note_strategy(family: str, strategy: str, **extra: Any) -> None:
    record_strategy(family, strategy)
    logger.debug("notation resolved", extra={"family": family, "strategy": strategy, **extra})


def concat(parts: List[List[T]]) -> List[T]:
    out: List[T] = []
    for part in parts:
        out.extend(part)
    return out


__all__ = [
    "ABSENCE_TOKENS",
    "TextResolver",
    "concat",
    "heuristics_enabled",
    "is_absent",
    "is_code_cell",
    "note_strategy",
    "split_overrides",
]
