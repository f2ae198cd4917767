from panel_notation.core.services.patterns import (
    DialectPattern,
    TransformKind,
    compile_pattern,
    evaluate_rules,
    render_fields,
    sort_patterns,
    substitute,
)


def _code_rule(name, pattern, template, priority=0):
    return DialectPattern.model_validate(
        {"name": name, "pattern": pattern, "priority": priority, "transform": {"kind": "code", "template": template}}
    )


def _echo(kind, payload):
    return (kind, payload)


def test_substitute_positional_and_named_groups():
    match = compile_pattern(r"^BAND\s+(?P<edges>\w+)$").search("band 2L")
    assert substitute("{1}", match) == "2L"
    assert substitute("{edges}-X", match) == "2L-X"
    assert substitute("{7}", match) == ""


def test_render_fields_converts_numbers():
    match = compile_pattern(r"^BG(\d+)$").search("BG6")
    fields = render_fields({"on_edge": "W2", "width_mm": "{1}", "depth_mm": 8, "nested": {"w": "{1}.5"}}, match)
    assert fields == {"on_edge": "W2", "width_mm": 6, "depth_mm": 8, "nested": {"w": 6.5}}


def test_rule_without_transform_is_disabled():
    rule = DialectPattern.model_validate({"name": "legacy", "pattern": "^X$", "handlerCode": "return '2L'"})
    assert rule.enabled is False
    assert rule.handler_code == "return '2L'"
    assert evaluate_rules([rule], "X", _echo, "edgeband") is None


def test_rule_with_invalid_regex_is_disabled():
    rule = DialectPattern.model_validate(
        {"pattern": "([", "transform": {"kind": "code", "template": "2L"}}
    )
    assert rule.enabled is False


def test_first_matching_rule_by_priority_wins():
    rules = sort_patterns(
        [
            _code_rule("low", r"^EDGE\s+(\w+)$", "{1}", priority=1),
            _code_rule("high", r"^EDGE\s+(\w+)$", "2W", priority=9),
        ]
    )
    result, rule = evaluate_rules(rules, "edge 2L", _echo, "edgeband")
    assert rule.name == "high"
    assert result == (TransformKind.code, "2W")


def test_rule_whose_conversion_fails_is_skipped():
    rules = [_code_rule("boom", r"^A$", "x", priority=5), _code_rule("ok", r"^A$", "y")]

    def convert(kind, payload):
        if payload == "x":
            raise ValueError("bad payload")
        return payload

    result, rule = evaluate_rules(rules, "A", convert, "edgeband")
    assert result == "y"
    assert rule.name == "ok"


def test_rule_with_empty_conversion_falls_through():
    rules = [_code_rule("empty", r"^A$", "x", priority=5), _code_rule("ok", r"^A$", "y")]
    result, _ = evaluate_rules(rules, "A", lambda kind, payload: payload if payload == "y" else None, "groove")
    assert result == "y"


def test_fields_transform_payload():
    rule = DialectPattern.model_validate(
        {
            "pattern": r"^BG(\d+)$",
            "transform": {"kind": "fields", "fields": {"on_edge": "W2", "width_mm": "{1}"}},
        }
    )
    result, _ = evaluate_rules([rule], "bg5", _echo, "groove")
    assert result == (TransformKind.fields, {"on_edge": "W2", "width_mm": 5})
