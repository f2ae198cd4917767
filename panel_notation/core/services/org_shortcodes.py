"""Organization-specific shortcode definitions with system-default fallback.

An organization may re-define a canonical code (``2L`` with 1mm tape) or add
its own (``BACK`` as a groove). Resolution looks at the organization's active
configs first, then at :data:`SYSTEM_DEFAULTS`; ``@`` overrides from the input
are applied on top either way.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from panel_notation.utils.metrics import shortcode_resolve_total

from .cache import DEFAULT_TTL_SECONDS, TTLCache
from .shortcodes import (
    CNC_PRESETS,
    EDGE_CODES,
    GROOVE_PRESETS,
    HOLE_PRESETS,
    Number,
    ServiceType,
    detect_service_type,
    parse_shortcode,
)

logger = logging.getLogger(__name__)

SpecValue = Any


class OrgShortcodeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    org_id: str
    service_type: ServiceType
    shortcode: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    default_specs: Dict[str, SpecValue] = Field(default_factory=dict)
    is_active: bool = True
    priority: int = 0  # higher wins

    @field_validator("shortcode")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.strip().upper()


class ResolvedShortcode(BaseModel):
    input: str
    base_code: str
    service_type: ServiceType
    is_org_specific: bool = False
    display_name: str
    specs: Dict[str, SpecValue] = Field(default_factory=dict)
    org_config: Optional[OrgShortcodeConfig] = None


class AvailableShortcode(BaseModel):
    code: str
    display_name: str
    is_org_specific: bool
    service_type: ServiceType


def _edges(edges) -> str:
    return ",".join(e.value for e in edges)


SYSTEM_DEFAULTS: Dict[ServiceType, Dict[str, Dict[str, SpecValue]]] = {
    ServiceType.edgeband: {code: {"edges": _edges(edges), "thickness_mm": 0.5} for code, edges in EDGE_CODES.items()},
    ServiceType.groove: {
        code: {"edges": _edges(g.edges), "width_mm": g.width_mm, "offset_mm": g.offset_mm}
        for code, g in GROOVE_PRESETS.items()
    },
    ServiceType.hole: {
        code: {"kind": h.kind.value, "count": h.count or 1, "offset_mm": h.offset_mm or 0}
        for code, h in HOLE_PRESETS.items()
    },
    ServiceType.cnc: {
        code.upper(): {"type": op.type.value, "shape_id": op.shape_id, **op.params} for code, op in CNC_PRESETS.items()
    },
    ServiceType.custom: {},
}

# Override key -> spec field
_OVERRIDE_FIELDS = (
    ("depth", "depth_mm"),
    ("width", "width_mm"),
    ("offset", "offset_mm"),
    ("diameter", "diameter_mm"),
    ("count", "count"),
    ("centers", "centers_mm"),
    ("radius", "radius"),
    ("value", "value"),
)


def apply_overrides(specs: Dict[str, SpecValue], overrides: Dict[str, Number]) -> Dict[str, SpecValue]:
    """Return a copy of ``specs`` with ``@`` overrides written onto spec fields."""
    result = dict(specs)
    for key, field in _OVERRIDE_FIELDS:
        if overrides.get(key) is not None:
            result[field] = overrides[key]
    return result


def generate_display_name(code: str, service_type: ServiceType) -> str:
    prefix = {
        ServiceType.edgeband: "Edge",
        ServiceType.groove: "Groove",
        ServiceType.hole: "Holes",
        ServiceType.cnc: "CNC",
    }.get(service_type)
    return f"{prefix}: {code}" if prefix else code


def _pick_config(configs: List[OrgShortcodeConfig], base_code: str, detected: ServiceType) -> Optional[OrgShortcodeConfig]:
    matching = [c for c in configs if c.shortcode == base_code]
    if not matching:
        return None
    same_type = [c for c in matching if c.service_type == detected]
    if same_type:
        return same_type[0]
    # Codes the codec does not know take the organization's declared type
    return matching[0] if detected == ServiceType.custom else None


class OrgShortcodeResolver:
    """Resolves shortcodes for an organization, caching its configs per TTL."""

    def __init__(self, store: Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self.store = store
        self._cache: TTLCache[List[OrgShortcodeConfig]] = TTLCache(ttl_seconds)

    def org_configs(self, org_id: Optional[str]) -> List[OrgShortcodeConfig]:
        if not org_id:
            return []
        try:
            configs, _ = self._cache.get_or_load(org_id, lambda: list(self.store.load_shortcodes(org_id)))
        except Exception as exc:
            logger.warning(
                "shortcode config load failed",
                extra={
                    "organization_id": org_id,
                    "cache": "shortcodes",
                    "error_code": getattr(getattr(exc, "code", None), "value", type(exc).__name__),
                },
            )
            return []
        return configs

    def resolve(self, code: str, org_id: Optional[str] = None) -> ResolvedShortcode:
        parsed = parse_shortcode(code)
        base = parsed.base_code
        detected = detect_service_type(base)

        config = _pick_config(self.org_configs(org_id), base, detected)
        if config is not None:
            shortcode_resolve_total.labels(source="org").inc()
            return ResolvedShortcode(
                input=code,
                base_code=base,
                service_type=config.service_type,
                is_org_specific=True,
                display_name=config.display_name or base,
                specs=apply_overrides(config.default_specs, parsed.overrides),
                org_config=config,
            )

        defaults = SYSTEM_DEFAULTS.get(detected, {}).get(base)
        shortcode_resolve_total.labels(source="system" if defaults is not None else "unknown").inc()
        return ResolvedShortcode(
            input=code,
            base_code=base,
            service_type=detected,
            display_name=generate_display_name(base, detected),
            specs=apply_overrides(defaults or {}, parsed.overrides),
        )

    def available_shortcodes(
        self,
        org_id: Optional[str] = None,
        service_type: Optional[ServiceType] = None,
    ) -> List[AvailableShortcode]:
        """Organization codes first, then system defaults it has not redefined."""
        configs = [c for c in self.org_configs(org_id) if service_type is None or c.service_type == service_type]
        org_items = sorted(
            (
                AvailableShortcode(
                    code=c.shortcode,
                    display_name=c.display_name or c.shortcode,
                    is_org_specific=True,
                    service_type=c.service_type,
                )
                for c in configs
            ),
            key=lambda item: (item.service_type.value, item.code),
        )
        seen = {(c.service_type, c.shortcode) for c in configs}
        types = [service_type] if service_type is not None else [
            ServiceType.edgeband,
            ServiceType.groove,
            ServiceType.hole,
            ServiceType.cnc,
        ]
        system_items: List[AvailableShortcode] = []
        for st in types:
            for code in sorted(SYSTEM_DEFAULTS.get(st, {})):
                if (st, code) in seen:
                    continue
                system_items.append(
                    AvailableShortcode(
                        code=code,
                        display_name=generate_display_name(code, st),
                        is_org_specific=False,
                        service_type=st,
                    )
                )
        return org_items + system_items

    def invalidate(self, org_id: str) -> bool:
        return self._cache.invalidate(org_id)

    def clear(self) -> None:
        self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        return self._cache.stats()


__all__ = [
    "AvailableShortcode",
    "OrgShortcodeConfig",
    "OrgShortcodeResolver",
    "ResolvedShortcode",
    "SYSTEM_DEFAULTS",
    "apply_overrides",
    "generate_display_name",
]
