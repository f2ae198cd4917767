from panel_notation.core.services.dialect import merge_with_default
from panel_notation.core.services.normalizers import normalize_grooves
from panel_notation.core.services.raw_fields import RawGrooveColumns, RawGrooveFields
from panel_notation.core.services.types import EdgeSide, PartFace

L1, L2, W1, W2 = EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2


def _grooves(text, dialect=None, **kwargs):
    return normalize_grooves(RawGrooveFields(text=text), dialect, **kwargs)


def test_depth_override():
    grooves = _grooves("GL-4-10@d6")
    assert [g.on_edge for g in grooves] == [L1, L2]
    for g in grooves:
        assert g.depth_mm == 6
        assert g.width_mm == 4
        assert g.distance_from_edge_mm == 10
        assert g.face == PartFace.back


def test_all_edges_code_expands_per_edge():
    grooves = _grooves("G-ALL-4-10")
    assert [g.on_edge for g in grooves] == [L1, L2, W1, W2]
    assert {g.depth_mm for g in grooves} == {10}


def test_back_alias():
    grooves = _grooves("back")
    assert len(grooves) == 1
    assert grooves[0].on_edge == W2
    assert grooves[0].width_mm == 4
    assert grooves[0].distance_from_edge_mm == 10


def test_bare_width_forms():
    assert _grooves("4MM")[0].on_edge == W2
    five = _grooves("5mm")
    assert five[0].width_mm == 5
    assert five[0].on_edge == W2


def test_yes_flag_means_back_panel_groove():
    grooves = _grooves("X")
    assert len(grooves) == 1
    assert grooves[0].on_edge == W2
    assert grooves[0].note == "Back panel groove"


def test_phrases():
    back = _grooves("back panel groove")
    assert [g.on_edge for g in back] == [W2]

    drawer = _grooves("drawer groove")
    assert drawer[0].on_edge == W1
    assert drawer[0].distance_from_edge_mm == 12
    assert drawer[0].depth_mm == 8


def test_unreadable_and_absent_text():
    assert _grooves("-") is None
    assert _grooves("sparkly") is None
    assert normalize_grooves(None) is None


def test_segments():
    grooves = _grooves("GL1-4-10; GW2-3-8")
    assert [(g.on_edge, g.width_mm) for g in grooves] == [(L1, 4), (W2, 3)]


def test_columns_back_and_bottom():
    raw = RawGrooveFields(columns=RawGrooveColumns(back="X", bottom="Y"))
    grooves = normalize_grooves(raw)
    assert [g.on_edge for g in grooves] == [W2, W1]
    bottom = grooves[1]
    assert bottom.depth_mm == 8
    assert bottom.distance_from_edge_mm == 12


def test_columns_all_with_depth():
    raw = RawGrooveFields(columns=RawGrooveColumns(all="X", depth_mm=8, width_mm=3))
    grooves = normalize_grooves(raw)
    assert len(grooves) == 4
    assert all(g.depth_mm == 8 and g.width_mm == 3 for g in grooves)


def test_dialect_default_depth_applies_to_codes():
    dialect = merge_with_default({"groove": {"defaultDepthMm": 8}})
    assert {g.depth_mm for g in _grooves("GL-4-10", dialect)} == {8}


def test_fields_rule(example_dialect_dir):
    from panel_notation.core.services.runtime import get_dialect_cache

    dialect = get_dialect_cache().get("example-org")
    grooves = _grooves("BG6", dialect)
    assert len(grooves) == 1
    assert grooves[0].on_edge == W2
    assert grooves[0].width_mm == 6
    assert grooves[0].distance_from_edge_mm == 12
    assert grooves[0].note == "Back groove"


def test_organization_alias(example_dialect_dir):
    from panel_notation.core.services.runtime import get_dialect_cache

    dialect = get_dialect_cache().get("example-org")
    grooves = _grooves("hardboard", dialect)
    assert grooves[0].width_mm == 3
    assert grooves[0].distance_from_edge_mm == 8
    assert grooves[0].depth_mm == 8


def test_column_holding_a_code_adds_to_flags():
    raw = RawGrooveFields(columns=RawGrooveColumns(all="GL-4-10", back="X"))
    grooves = normalize_grooves(raw)
    assert sorted(g.on_edge.value for g in grooves) == ["L1", "L2", "W2"]
