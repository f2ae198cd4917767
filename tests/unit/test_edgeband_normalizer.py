import pytest

from panel_notation.core.config import reset_settings
from panel_notation.core.services.dialect import merge_with_default
from panel_notation.core.services.normalizers import normalize_edgeband, normalize_from_columns, normalize_xx_notation
from panel_notation.core.services.raw_fields import RawEdgebandColumns, RawEdgebandFields
from panel_notation.core.services.types import EdgeSide

L1, L2, W1, W2 = EdgeSide.L1, EdgeSide.L2, EdgeSide.W1, EdgeSide.W2


@pytest.mark.parametrize("text", ["2L2W", "ALL", "4S", "FULL", "all", " 2l2w "])
def test_all_edge_spellings_agree(text):
    spec = normalize_edgeband(RawEdgebandFields(text=text))
    assert spec.edges == [L1, L2, W1, W2]


@pytest.mark.parametrize("text", ["", "-", "0", "NONE", "none", None])
def test_absence_tokens_yield_no_edgeband(text):
    assert normalize_edgeband(RawEdgebandFields(text=text)) is None


def test_none_raw_yields_none():
    assert normalize_edgeband(None) is None


def test_per_edge_columns():
    services = normalize_from_columns({"L": "X", "W": "", "L1": "", "L2": "Y"})
    assert services.edgeband.edges == [L1, L2]


def test_explicit_no_column_removes_edge():
    raw = RawEdgebandFields(columns=RawEdgebandColumns(all="X", W2="N"))
    spec = normalize_edgeband(raw)
    assert spec.edges == [L1, L2, W1]


def test_text_wins_over_columns():
    raw = RawEdgebandFields(text="2W", columns=RawEdgebandColumns(L="X"))
    assert normalize_edgeband(raw).edges == [W1, W2]


def test_columns_used_when_text_unreadable():
    raw = RawEdgebandFields(text="???", columns=RawEdgebandColumns(L="X"))
    assert normalize_edgeband(raw).edges == [L1, L2]


def test_organization_alias_beats_heuristic():
    dialect = merge_with_default({"edgeband": {"aliases": {"ALL EDGES": "2L"}}})
    assert normalize_edgeband(RawEdgebandFields(text="all edges"), dialect).edges == [L1, L2]
    assert normalize_edgeband(RawEdgebandFields(text="all edges")).edges == [L1, L2, W1, W2]


def test_heuristic_phrases():
    assert normalize_edgeband(RawEdgebandFields(text="long edges")).edges == [L1, L2]
    assert normalize_edgeband(RawEdgebandFields(text="front edge")).edges == [L1]
    assert normalize_edgeband(RawEdgebandFields(text="both short")).edges == [W1, W2]


def test_heuristics_can_be_disabled_per_call():
    assert normalize_edgeband(RawEdgebandFields(text="long edges"), heuristics=False) is None


def test_heuristics_can_be_disabled_by_setting(monkeypatch):
    monkeypatch.setenv("NL_HEURISTICS_ENABLED", "false")
    reset_settings()
    assert normalize_edgeband(RawEdgebandFields(text="long edges")) is None
    # exact notation is unaffected
    assert normalize_edgeband(RawEdgebandFields(text="2L")).edges == [L1, L2]


def test_override_sets_thickness():
    spec = normalize_edgeband(RawEdgebandFields(text="2L2W@1"))
    assert spec.edges == [L1, L2, W1, W2]
    assert spec.thickness_mm == 1.0


def test_edge_list_notation():
    assert normalize_edgeband(RawEdgebandFields(text="L1, W2")).edges == [L1, W2]
    assert normalize_edgeband(RawEdgebandFields(text="L2+W1")).edges == [L2, W1]


def test_segments_resolve_independently():
    dialect = merge_with_default({"edgeband": {"aliases": {"FRONT": "L1"}}})
    spec = normalize_edgeband(RawEdgebandFields(text="FRONT; 2W"), dialect)
    assert spec.edges == [L1, W1, W2]


def test_custom_rule():
    dialect = merge_with_default(
        {
            "edgeband": {
                "patterns": [
                    {"name": "band-prefix", "pattern": r"^BAND\s+(\w+)$", "transform": {"kind": "code", "template": "{1}"}}
                ]
            }
        }
    )
    assert normalize_edgeband(RawEdgebandFields(text="band 2W"), dialect).edges == [W1, W2]


def test_default_if_blank():
    dialect = merge_with_default({"edgeband": {"defaultIfBlank": "ALL"}})
    assert normalize_edgeband(RawEdgebandFields(text=""), dialect).edges == [L1, L2, W1, W2]


def test_tape_is_carried():
    spec = normalize_edgeband(RawEdgebandFields(text="2L", tape_id="ABS-WHITE", thickness_mm=0.8))
    assert spec.tape_id == "ABS-WHITE"
    assert spec.thickness_mm == 0.8


def test_xx_notation():
    assert normalize_xx_notation("XX", "X") == [L1, L2, W1]
    assert normalize_xx_notation("", "XX") == [W1, W2]
    assert normalize_xx_notation(None, None) == []


def test_grouped_column_holding_a_code():
    assert normalize_from_columns({"Edging": "2L2W"}).edgeband.edges == [L1, L2, W1, W2]
    raw = RawEdgebandFields(columns=RawEdgebandColumns(all="L2+W1"))
    assert normalize_edgeband(raw).edges == [L2, W1]
