import pytest

from panel_notation.core.errors import DialectError, ErrorCode
from panel_notation.core.services.default_dialect import DEFAULT_DIALECT, DEFAULT_DIALECT_VERSION
from panel_notation.core.services.dialect import (
    is_blank,
    is_no_value,
    is_yes_value,
    load_dialect_partial,
    merge_with_default,
    normalize_key,
    parse_dialect,
)


def test_default_dialect_loaded():
    assert DEFAULT_DIALECT.version == DEFAULT_DIALECT_VERSION
    assert DEFAULT_DIALECT.edgeband.resolve_alias("4s") == "2L2W"
    assert DEFAULT_DIALECT.groove.resolve_alias("back  panel") == "GW2-4-10"
    assert "STD" in DEFAULT_DIALECT.drilling.hinge_patterns
    assert "SINK-600X500" in DEFAULT_DIALECT.cnc.macros


def test_normalize_key():
    assert normalize_key("  all   edges ") == "ALL EDGES"
    assert normalize_key(110) == "110"


@pytest.mark.parametrize("value", ["X", "x", " yes ", 1, "1", True, "✓"])
def test_yes_values(value):
    assert is_yes_value(value, DEFAULT_DIALECT.edgeband.yes_values)


@pytest.mark.parametrize("value", ["", "-", "n", 0, False, "NONE"])
def test_no_values(value):
    assert is_no_value(value, DEFAULT_DIALECT.edgeband.no_values)
    assert not is_yes_value(value, DEFAULT_DIALECT.edgeband.yes_values)


def test_none_is_neither_yes_nor_no():
    assert not is_yes_value(None, DEFAULT_DIALECT.edgeband.yes_values)
    assert not is_no_value(None, DEFAULT_DIALECT.edgeband.no_values)
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank(0)


def test_merge_adds_aliases_without_dropping_defaults():
    merged = merge_with_default({"edgeband": {"aliases": {"all edges": "2L"}}})
    assert merged.edgeband.resolve_alias("ALL EDGES") == "2L"
    assert merged.edgeband.resolve_alias("FULL") == "2L2W"
    # untouched families are the default's
    assert merged.groove == DEFAULT_DIALECT.groove
    assert merged.version == DEFAULT_DIALECT.version


def test_merge_replaces_yes_values_and_scalars():
    merged = merge_with_default({"groove": {"yes_values": ["G"], "default_depth_mm": 8}})
    assert merged.groove.yes_values == ["G"]
    assert merged.groove.default_depth_mm == 8
    assert merged.groove.default_width_mm == 4
    assert merged.groove.resolve_alias("BACK") == "GW2-4-10"


def test_merge_accepts_camel_case_keys():
    merged = merge_with_default(
        {
            "organizationId": "acme",
            "groove": {"defaultDepthMm": 6, "drawerBottomOffsetMm": 14},
            "drilling": {"hingePatterns": {"salice": {"offsetsMm": [95], "count": 2}}},
        }
    )
    assert merged.organization_id == "acme"
    assert merged.groove.default_depth_mm == 6
    assert merged.groove.drawer_bottom_offset_mm == 14
    assert merged.drilling.hinge_patterns["SALICE"].offsets_mm == [95]
    assert "BLUM" in merged.drilling.hinge_patterns


def test_merge_concatenates_and_orders_patterns():
    base = merge_with_default(
        {"edgeband": {"patterns": [{"name": "low", "pattern": "^A$", "transform": {"kind": "code", "template": "2L"}}]}}
    )
    merged = merge_with_default(
        {
            "edgeband": {
                "patterns": [
                    {"name": "high", "pattern": "^B$", "priority": 5, "transform": {"kind": "code", "template": "2W"}}
                ]
            }
        },
        base,
    )
    assert [p.name for p in merged.edgeband.patterns] == ["high", "low"]


def test_merge_does_not_mutate_default():
    before = DEFAULT_DIALECT.edgeband.aliases.copy()
    merge_with_default({"edgeband": {"aliases": {"ZZ": "2L"}}})
    assert DEFAULT_DIALECT.edgeband.aliases == before


def test_merge_none_returns_default_content():
    merged = merge_with_default(None)
    assert merged.edgeband.aliases == DEFAULT_DIALECT.edgeband.aliases


def test_invalid_dialect_raises_dialect_error():
    with pytest.raises(DialectError) as exc_info:
        parse_dialect({"groove": {"default_depth_mm": "deep"}}, organization_id="acme")
    err = exc_info.value
    assert err.code == ErrorCode.DIALECT_INVALID
    assert err.to_dict()["organization_id"] == "acme"


def test_macro_params_checked_at_load():
    with pytest.raises(DialectError) as exc_info:
        merge_with_default({"cnc": {"macros": {"LOGO": {"type": "cutout", "shapeId": "logo"}}}})
    assert exc_info.value.code == ErrorCode.DIALECT_INVALID
    merged = merge_with_default({"cnc": {"macros": {"LOGO": {"type": "contour", "shapeId": "logo"}}}})
    assert merged.cnc.macros["LOGO"].to_operation().shape_id == "logo"


def test_load_dialect_partial_reads_dialect_section(tmp_path):
    path = tmp_path / "acme.yaml"
    path.write_text("dialect:\n  edgeband:\n    aliases:\n      FR: L1\n", encoding="utf-8")
    partial = load_dialect_partial(str(path))
    assert partial.edgeband.aliases == {"FR": "L1"}


def test_load_dialect_partial_json_without_section(tmp_path):
    path = tmp_path / "acme.json"
    path.write_text('{"cnc": {"aliases": {"BIG": "SINK-800x500"}}}', encoding="utf-8")
    merged = merge_with_default(load_dialect_partial(str(path)))
    assert merged.cnc.resolve_alias("big") == "SINK-800x500"


def test_load_dialect_partial_missing_file(tmp_path):
    with pytest.raises(DialectError):
        load_dialect_partial(str(tmp_path / "nope.yaml"))


def test_load_dialect_partial_rejects_non_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(DialectError) as exc_info:
        load_dialect_partial(str(path))
    assert exc_info.value.source == str(path)
