"""Canonical machining services for panel parts.

Typical use::

    from panel_notation.core.services import normalize_from_text, format_services_summary

    services = normalize_from_text("2L2W G-ALL-4-10 H2-110")
    format_services_summary(services)  # "EB:2L2W | GRV:4 | HOLE:1"
"""

from .default_dialect import DEFAULT_DIALECT, get_default_dialect
from .dialect import ServiceDialect, merge_with_default, parse_dialect
from .formatters import (
    NONE_MARKER,
    format_cnc_codes,
    format_cnc_description,
    format_edgeband_code,
    format_edgeband_description,
    format_edges_visual,
    format_groove_description,
    format_grooves_code,
    format_hole_description,
    format_holes_code,
    format_services_detailed,
    format_services_summary,
    format_services_tooltip,
)
from .normalizers import (
    NormalizationResult,
    merge_part_services,
    normalize_and_validate,
    normalize_cnc,
    normalize_edgeband,
    normalize_from_columns,
    normalize_from_text,
    normalize_grooves,
    normalize_holes,
    normalize_services,
)
from .raw_fields import RawServiceFields, extract_raw_fields_from_columns, extract_raw_fields_from_text
from .shortcodes import detect_service_type, parse_shortcode
from .types import (
    CncOperation,
    CncOpType,
    EdgeBandSpec,
    EdgeSide,
    GrooveSpec,
    HolePatternKind,
    HolePatternSpec,
    PartServices,
)
from .validation import ValidationReport, validate_services

__all__ = [
    "CncOpType",
    "CncOperation",
    "DEFAULT_DIALECT",
    "EdgeBandSpec",
    "EdgeSide",
    "GrooveSpec",
    "HolePatternKind",
    "HolePatternSpec",
    "NONE_MARKER",
    "NormalizationResult",
    "PartServices",
    "RawServiceFields",
    "ServiceDialect",
    "ValidationReport",
    "detect_service_type",
    "extract_raw_fields_from_columns",
    "extract_raw_fields_from_text",
    "format_cnc_codes",
    "format_cnc_description",
    "format_edgeband_code",
    "format_edgeband_description",
    "format_edges_visual",
    "format_groove_description",
    "format_grooves_code",
    "format_hole_description",
    "format_holes_code",
    "format_services_detailed",
    "format_services_summary",
    "format_services_tooltip",
    "get_default_dialect",
    "merge_part_services",
    "merge_with_default",
    "normalize_and_validate",
    "normalize_cnc",
    "normalize_edgeband",
    "normalize_from_columns",
    "normalize_from_text",
    "normalize_grooves",
    "normalize_holes",
    "normalize_services",
    "parse_dialect",
    "parse_shortcode",
    "validate_services",
]
