import pytest

from panel_notation.core.services import (
    format_edgeband_code,
    format_grooves_code,
    format_holes_code,
    format_services_summary,
    merge_part_services,
    normalize_and_validate,
    normalize_from_columns,
    normalize_from_text,
    normalize_services,
)
from panel_notation.core.services.raw_fields import RawGrooveFields, RawServiceFields
from panel_notation.core.services.types import EdgeSide, HolePatternKind, PartServices, has_any_services


def test_mixed_shortcode_line():
    services = normalize_from_text("2L2W G-ALL-4-10 H2-110")
    assert services.edgeband.edges == [EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2]
    assert len(services.grooves) == 4
    assert services.holes[0].kind == HolePatternKind.hinge
    assert services.cnc == []
    assert format_services_summary(services) == "EB:2L2W | GRV:4 | HOLE:1"
    assert format_edgeband_code(services.edgeband) == "2L2W"
    assert format_grooves_code(services.grooves) == "G-ALL-4-10"
    assert format_holes_code(services.holes) == "H2-110"


def test_natural_language_line():
    services = normalize_from_text("band long edges, back panel groove, 2 hinges at 110mm, sink cutout")
    assert services.edgeband.edges == [EdgeSide.L1, EdgeSide.L2]
    assert [g.on_edge for g in services.grooves] == [EdgeSide.W2]
    assert services.holes[0].offsets_mm == [110]
    assert services.cnc[0].shape_id == "sink_rect"


def test_only_restricts_families():
    services = normalize_from_text("2L2W G-ALL-4-10 H2-110", only=["edgeband"])
    assert services.edgeband is not None
    assert services.grooves == []
    assert services.holes == []


def test_only_rejects_unknown_family():
    with pytest.raises(ValueError):
        normalize_from_text("2L", only=["paint"])


def test_absent_families_stay_empty():
    services = normalize_services(RawServiceFields(groove=RawGrooveFields(text="BACK")))
    assert services.edgeband is None
    assert len(services.grooves) == 1
    assert normalize_services(None) == PartServices()


def test_nothing_recognized():
    services = normalize_from_text("Door, oak veneer")
    assert not has_any_services(services)
    assert format_services_summary(services) == "-"


def test_columns_row():
    services = normalize_from_columns(
        {"Part": "Side", "L": "X", "W": "", "L1": "", "L2": "Y", "Groove Back": "X", "Hinge": "X"}
    )
    assert services.edgeband.edges == [EdgeSide.L1, EdgeSide.L2]
    assert [g.on_edge for g in services.grooves] == [EdgeSide.W2]
    assert services.holes[0].kind == HolePatternKind.hinge


def test_merge_part_services_unites_edges_and_concatenates_lists():
    text = normalize_from_text("2L H2-110")
    columns = normalize_from_columns({"W1": "X", "Shelf": "X"})
    merged = merge_part_services(text, None, columns)
    assert merged.edgeband.edges == [EdgeSide.L1, EdgeSide.L2, EdgeSide.W1]
    assert [h.kind for h in merged.holes] == [HolePatternKind.hinge, HolePatternKind.system32]


def test_normalize_and_validate_reports_warnings():
    raw = RawServiceFields(groove=RawGrooveFields(text="GL-4-10@d0"))
    result = normalize_and_validate(raw)
    assert len(result.services.grooves) == 2
    assert result.warnings == ["Groove depth must be positive: 0", "Groove depth must be positive: 0"]


def test_columns_holding_shortcodes():
    services = normalize_from_columns(
        {"Edging": "2L2W", "Groove": "GL-4-10", "Holes": "H2-110", "CNC": "CUTOUT-SINK-600x500"}
    )
    assert services.edgeband.edges == [EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2]
    assert [g.on_edge for g in services.grooves] == [EdgeSide.L1, EdgeSide.L2]
    assert len(services.holes) == 1
    assert len(services.cnc) == 1
