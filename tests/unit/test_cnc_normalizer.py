import pytest

from panel_notation.core.services.default_dialect import DEFAULT_DIALECT
from panel_notation.core.services.dialect import CncMacro
from panel_notation.core.services.normalizers import infer_cnc_type, normalize_cnc, normalize_from_columns
from panel_notation.core.services.raw_fields import RawCncFields
from panel_notation.core.services.types import CncOpType


def _ops(text, dialect=None, **kwargs):
    return normalize_cnc(RawCncFields(text=text), dialect, **kwargs)


def test_codec():
    ops = _ops("CUTOUT-SINK-600x500")
    assert len(ops) == 1
    assert ops[0].type == CncOpType.cutout
    assert ops[0].params == {"width": 600, "height": 500}


def test_alias_to_macro():
    ops = _ops("sink")
    assert ops[0].shape_id == "sink_rect"
    assert ops[0].note == "Standard sink cutout"


def test_macro_with_value_override():
    ops = _ops("R3@5")
    assert ops[0].type == CncOpType.radius
    assert ops[0].params["radius"] == 5
    assert ops[0].params["corners"] == "all"


def test_heuristic_sizes_cutout():
    ops = _ops("sink cutout 800x500")
    assert len(ops) == 1
    assert ops[0].params == {"width": 800, "height": 500}


def test_flag_only_text_is_custom():
    ops = _ops("CNC")
    assert ops[0].type == CncOpType.custom
    assert ops[0].note == "Custom CNC operation"


def test_absent_and_unreadable():
    assert _ops("-") is None
    assert _ops("zzz") is None


def test_program_reference():
    macro = normalize_cnc(RawCncFields(program_id="SINK"))
    assert macro[0].type == CncOpType.cutout

    program = normalize_cnc(RawCncFields(program_id="P-1234"))
    assert program[0].type == CncOpType.custom
    assert program[0].params == {"program_id": "P-1234"}
    assert program[0].note == "CNC Program: P-1234"


def test_structured_shape():
    ops = normalize_cnc(RawCncFields(shape_type="Sink cutout", params={"width": 600, "height": 450}))
    assert ops[0].type == CncOpType.cutout
    assert ops[0].params["height"] == 450


def test_structured_shape_with_bad_params_is_skipped():
    assert normalize_cnc(RawCncFields(shape_type="pocket", params={"width": 10})) is None


def test_flag_columns():
    services = normalize_from_columns({"CNC": "X", "Routing": "Y"})
    assert [op.type for op in services.cnc] == [CncOpType.custom, CncOpType.contour]


def test_column_text_is_resolved():
    services = normalize_from_columns({"CNC": "HOB"})
    assert services.cnc[0].shape_id == "hob_rect"


@pytest.mark.parametrize(
    "shape,expected",
    [
        ("Sink", CncOpType.cutout),
        ("corner radius", CncOpType.radius),
        ("edge profile", CncOpType.contour),
        ("logo engraving", CncOpType.text),
        ("rabbet", CncOpType.rebate),
        ("mystery", CncOpType.custom),
    ],
)
def test_infer_cnc_type(shape, expected):
    assert infer_cnc_type(shape) == expected


def test_macro_with_missing_params_is_skipped():
    bad = CncMacro.model_construct(type=CncOpType.cutout, shape_id="logo", params={}, face=None, note=None)
    cnc = DEFAULT_DIALECT.cnc.model_copy(update={"macros": {**DEFAULT_DIALECT.cnc.macros, "LOGO": bad}})
    dialect = DEFAULT_DIALECT.model_copy(update={"cnc": cnc})
    assert _ops("LOGO", dialect, heuristics=False) is None
    program = normalize_cnc(RawCncFields(program_id="LOGO"), dialect)
    assert program[0].type == CncOpType.custom
