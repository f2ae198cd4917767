"""Global default dialect.

Covers the common cut-list conventions: X/XX edge marks, ALL/4S/FULL aliases,
standard hinge, shelf-pin, handle and knob spacing. Organizations layer their
own dialect on top via ``merge_with_default``; this value is never mutated.
"""

from __future__ import annotations

from typing import Any, Dict

from .dialect import ServiceDialect

DEFAULT_DIALECT_VERSION = "2024.1"

_SYSTEM32 = {"ref_edge": "L1", "offsets_mm": [37, 69, 101], "distance_from_edge_mm": 37}


def _hinge(offset: int, count: int = 2, hardware_id: str | None = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "ref_edge": "L1",
        "offsets_mm": [offset],
        "distance_from_edge_mm": 22,
        "count": count,
    }
    if hardware_id:
        entry["hardware_id"] = hardware_id
    return entry


def _handle(centers: int) -> Dict[str, Any]:
    return {"ref_edge": "L1", "offsets_mm": [0, centers], "distance_from_edge_mm": 30}


DEFAULT_DIALECT_CONFIG: Dict[str, Any] = {
    "organization_id": None,
    "name": "Default",
    "description": "Standard dialect supporting common industry formats",
    "version": DEFAULT_DIALECT_VERSION,
    "edgeband": {
        "aliases": {
            "ALL": "2L2W",
            "4": "2L2W",
            "4S": "2L2W",
            "4SIDES": "2L2W",
            "FULL": "2L2W",
            "COMPLETE": "2L2W",
            "XXXX": "2L2W",
            "2L2W1": "2L2W",
            "LONG": "2L",
            "LONGS": "2L",
            "LL": "2L",
            "SHORT": "2W",
            "SHORTS": "2W",
            "WW": "2W",
            "WIDTH": "2W",
            "LW": "L2W",
            "WL": "L2W",
        },
        "yes_values": ["X", "XX", "XXX", "XXXX", "Y", "YES", "1", 1, "TRUE", True, "✓", "✔", "●", "*"],
        "no_values": ["", "-", "0", 0, "N", "NO", "FALSE", False, "NONE", "○", "·"],
        "default_if_blank": None,
        "column_mappings": {
            "L1": ["L1", "LONG1", "EDGE L1", "EDGING L1", "EDGEBAND L1", "EB L1"],
            "L2": ["L2", "LONG2", "EDGE L2", "EDGING L2", "EDGEBAND L2", "EB L2"],
            "W1": ["W1", "WIDTH1", "SHORT1", "EDGE W1", "EDGING W1", "EDGEBAND W1", "EB W1"],
            "W2": ["W2", "WIDTH2", "SHORT2", "EDGE W2", "EDGING W2", "EDGEBAND W2", "EB W2"],
            "long": ["L", "LONG", "LONG EDGES", "EDGING L", "EDGEBAND L", "EB L"],
            "width": ["W", "SHORT", "SHORT EDGES", "EDGING W", "EDGEBAND W", "EB W"],
            "all": ["ALL", "ALL EDGES", "4 SIDES", "EDGING", "EDGEBAND", "EB"],
        },
    },
    "groove": {
        "aliases": {
            "BACK": "GW2-4-10",
            "BACKPANEL": "GW2-4-10",
            "BACK PANEL": "GW2-4-10",
            "BP": "GW2-4-10",
            "BOTTOM": "GW1-4-12",
            "BTM": "GW1-4-12",
            "DRAWER": "GW1-4-12",
            "DRAWER BTM": "GW1-4-12",
            "ALL": "G-ALL-4-10",
            "4S": "G-ALL-4-10",
            "4MM": "GW2-4-10",
            "3MM": "GW2-3-10",
        },
        "default_width_mm": 4,
        "default_depth_mm": 10,
        "default_offset_mm": 10,
        "drawer_bottom_offset_mm": 12,
        "drawer_bottom_depth_mm": 8,
        "yes_values": ["X", "Y", "YES", "1", 1, "TRUE", True, "✓", "G"],
        "no_values": ["", "-", "0", 0, "N", "NO", "FALSE", False, "NONE"],
        "column_mappings": {
            "long": ["GROOVE L", "GRV L", "GROOVE LONG"],
            "width": ["GROOVE W", "GRV W", "GROOVE WIDTH", "GROOVE SHORT"],
            "all": ["GROOVE", "GRV", "GROOVES"],
            "back": ["GROOVE BACK", "BACK GROOVE", "BP GROOVE", "BACK PANEL"],
            "bottom": ["GROOVE BTM", "BTM GROOVE", "DRAWER GROOVE"],
            "width_mm": ["GROOVE WIDTH MM", "GRV WIDTH", "GROOVE W MM"],
            "depth_mm": ["GROOVE DEPTH", "GRV DEPTH"],
            "offset_mm": ["GROOVE OFFSET", "GRV OFFSET"],
        },
    },
    "drilling": {
        "aliases": {
            "HINGE": "H2-100",
            "HINGES": "H2-100",
            "2H": "H2-100",
            "3H": "H3-100",
            "SHELF": "SP-32",
            "SHELVES": "SP-32",
            "PINS": "SP-32",
            "HANDLE": "HD-CC96",
            "PULL": "HD-CC128",
            "KNOB": "KN-CTR",
            "SLIDE": "DS-STD",
            "CAM": "CAM-STD",
            "DOWEL": "DWL-2",
            "DOWELS": "DWL-2",
        },
        "hinge_patterns": {
            "STD": _hinge(100),
            "110": _hinge(110),
            "100": _hinge(100),
            "90": _hinge(90),
            "3H-110": _hinge(110, 3),
            "3H-100": _hinge(100, 3),
            "3H-90": _hinge(90, 3),
            "BLUM": _hinge(100, hardware_id="Blum ClipTop"),
            "HETTICH": _hinge(100, hardware_id="Hettich Sensys"),
            "GRASS": _hinge(100, hardware_id="Grass Tiomos"),
        },
        "shelf_patterns": {
            "32MM": {**_SYSTEM32, "kind": "system32"},
            "32": {**_SYSTEM32, "kind": "system32"},
            "SYSTEM32": {**_SYSTEM32, "kind": "system32"},
            "STD": {"ref_edge": "L1", "offsets_mm": [50, 100, 150], "distance_from_edge_mm": 35},
            "FULL": {"ref_edge": "L1", "offsets_mm": [], "distance_from_edge_mm": 37, "note": "Full column"},
        },
        "handle_patterns": {
            "96": _handle(96),
            "CC96": _handle(96),
            "128": _handle(128),
            "CC128": _handle(128),
            "160": _handle(160),
            "CC160": _handle(160),
            "192": _handle(192),
            "256": _handle(256),
        },
        "knob_patterns": {
            "CENTER": {"ref_edge": "L1", "offsets_mm": [], "distance_from_edge_mm": 0, "note": "Center of part"},
            "CTR": {"ref_edge": "L1", "offsets_mm": [], "distance_from_edge_mm": 0, "note": "Center of part"},
            "37": {"ref_edge": "W1", "offsets_mm": [37], "distance_from_edge_mm": 37},
        },
        "drawer_slide_patterns": {
            "STD": {"ref_edge": "W1", "offsets_mm": [37, 100], "distance_from_edge_mm": 37, "note": "Drawer slide mounting"},
            "UNDERMOUNT": {
                "ref_edge": "W1",
                "offsets_mm": [37, 261],
                "distance_from_edge_mm": 37,
                "note": "Undermount slide",
            },
        },
        "cam_lock_patterns": {
            "STD": {"ref_edge": "W1", "offsets_mm": [37], "distance_from_edge_mm": 34, "diameter_mm": 15},
            "MINIFIX": {"ref_edge": "W1", "offsets_mm": [37], "distance_from_edge_mm": 24, "diameter_mm": 15},
        },
        "dowel_patterns": {
            "STD": {"ref_edge": "W1", "offsets_mm": [37, 69], "distance_from_edge_mm": 9, "count": 2, "diameter_mm": 8},
        },
        "yes_values": ["X", "Y", "YES", "1", 1, "TRUE", True, "✓"],
        "no_values": ["", "-", "0", 0, "N", "NO", "FALSE", False, "NONE"],
        "column_mappings": {
            "holes": ["HOLES", "DRILLING", "DRILL"],
            "hinge": ["HINGE", "HINGES"],
            "shelf": ["SHELF", "SHELF PINS", "SP"],
            "handle": ["HANDLE", "PULL"],
            "knob": ["KNOB"],
        },
    },
    "cnc": {
        "macros": {
            "SINK-600x500": {
                "type": "cutout",
                "shape_id": "sink_rect",
                "params": {"width": 600, "height": 500},
                "note": "Standard sink cutout",
            },
            "SINK-800x500": {
                "type": "cutout",
                "shape_id": "sink_rect",
                "params": {"width": 800, "height": 500},
                "note": "Large sink cutout",
            },
            "HOB-580x510": {
                "type": "cutout",
                "shape_id": "hob_rect",
                "params": {"width": 580, "height": 510},
                "note": "Standard hob cutout",
            },
            "R3": {"type": "radius", "shape_id": "corner_radius", "params": {"radius": 3, "corners": "all"}},
            "R6": {"type": "radius", "shape_id": "corner_radius", "params": {"radius": 6, "corners": "all"}},
            "R25-FRONT": {"type": "radius", "shape_id": "corner_radius", "params": {"radius": 25, "corners": "front"}},
            "OGEE": {"type": "contour", "shape_id": "ogee_profile"},
            "BEVEL-45": {"type": "contour", "shape_id": "bevel_profile", "params": {"angle": 45}},
            "ROUNDOVER": {"type": "contour", "shape_id": "round_profile", "params": {"radius": 3}},
        },
        "aliases": {
            "SINK": "SINK-600x500",
            "HOB": "HOB-580x510",
            "COOKTOP": "HOB-580x510",
            "RADIUS": "R3",
            "ROUNDED": "R3",
        },
        "yes_values": ["X", "Y", "YES", "1", 1, "TRUE", True, "✓"],
        "no_values": ["", "-", "0", 0, "N", "NO", "FALSE", False, "NONE"],
        "column_mappings": {
            "cnc": ["CNC", "CNC PROGRAM", "CNC OP"],
            "routing": ["ROUTING", "ROUTE", "PROFILE"],
            "machining": ["MACHINING"],
        },
    },
    "use_ai_fallback": True,
    "auto_learn": True,
}

DEFAULT_DIALECT: ServiceDialect = ServiceDialect.model_validate(DEFAULT_DIALECT_CONFIG)


def get_default_dialect() -> ServiceDialect:
    return DEFAULT_DIALECT


__all__ = ["DEFAULT_DIALECT", "DEFAULT_DIALECT_CONFIG", "DEFAULT_DIALECT_VERSION", "get_default_dialect"]
