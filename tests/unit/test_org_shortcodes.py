from panel_notation.core.errors import DialectError, ErrorCode
from panel_notation.core.services.org_shortcodes import (
    OrgShortcodeConfig,
    OrgShortcodeResolver,
    SYSTEM_DEFAULTS,
    apply_overrides,
    generate_display_name,
)
from panel_notation.core.services.shortcodes import ServiceType
from panel_notation.core.services.store import FileDialectStore, StoreConfig


class FakeStore:
    def __init__(self, configs=None, error=None):
        self.configs = configs or {}
        self.error = error
        self.calls = 0

    def load_shortcodes(self, org_id):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.configs.get(org_id, [])


def _config(code, service_type, **kwargs):
    return OrgShortcodeConfig(org_id="acme", shortcode=code, service_type=service_type, **kwargs)


def test_system_defaults_cover_every_family():
    assert SYSTEM_DEFAULTS[ServiceType.edgeband]["2L"] == {"edges": "L1,L2", "thickness_mm": 0.5}
    assert SYSTEM_DEFAULTS[ServiceType.groove]["GL-4-10"]["width_mm"] == 4
    assert SYSTEM_DEFAULTS[ServiceType.hole]["H2-110"] == {"kind": "hinge", "count": 2, "offset_mm": 110}
    assert SYSTEM_DEFAULTS[ServiceType.cnc]["CUTOUT-SINK-600X500"]["width"] == 600


def test_apply_overrides():
    assert apply_overrides({"width_mm": 4}, {"depth": 6, "width": 5}) == {"width_mm": 5, "depth_mm": 6}
    original = {"count": 2}
    apply_overrides(original, {"count": 3})
    assert original == {"count": 2}


def test_generate_display_name():
    assert generate_display_name("2L", ServiceType.edgeband) == "Edge: 2L"
    assert generate_display_name("H2-110", ServiceType.hole) == "Holes: H2-110"
    assert generate_display_name("FOO", ServiceType.custom) == "FOO"


def test_resolve_system_code():
    resolver = OrgShortcodeResolver(FakeStore())
    resolved = resolver.resolve("gl-4-10@d6")
    assert resolved.base_code == "GL-4-10"
    assert resolved.service_type == ServiceType.groove
    assert resolved.is_org_specific is False
    assert resolved.display_name == "Groove: GL-4-10"
    assert resolved.specs["depth_mm"] == 6
    assert resolved.specs["offset_mm"] == 10


def test_resolve_unknown_code():
    resolved = OrgShortcodeResolver(FakeStore()).resolve("MYSTERY")
    assert resolved.service_type == ServiceType.custom
    assert resolved.specs == {}


def test_org_config_wins_over_system_default():
    store = FakeStore(
        {"acme": [_config("2L", ServiceType.edgeband, display_name="Long 1mm", default_specs={"thickness_mm": 1.0})]}
    )
    resolver = OrgShortcodeResolver(store)
    resolved = resolver.resolve("2L@2", "acme")
    assert resolved.is_org_specific is True
    assert resolved.display_name == "Long 1mm"
    assert resolved.specs == {"thickness_mm": 1.0, "value": 2}
    assert resolved.org_config.shortcode == "2L"
    # other organizations still see the system default
    assert resolver.resolve("2L", "other").is_org_specific is False


def test_org_only_code_takes_declared_type():
    store = FakeStore({"acme": [_config("HB", ServiceType.groove, default_specs={"width_mm": 3})]})
    resolved = OrgShortcodeResolver(store).resolve("hb", "acme")
    assert resolved.service_type == ServiceType.groove
    assert resolved.specs == {"width_mm": 3}


def test_config_of_other_type_is_ignored_for_known_code():
    store = FakeStore({"acme": [_config("2L", ServiceType.cnc)]})
    resolved = OrgShortcodeResolver(store).resolve("2L", "acme")
    assert resolved.is_org_specific is False
    assert resolved.service_type == ServiceType.edgeband


def test_configs_are_cached_per_org():
    store = FakeStore({"acme": [_config("HB", ServiceType.groove)]})
    resolver = OrgShortcodeResolver(store)
    resolver.resolve("HB", "acme")
    resolver.resolve("HB", "acme")
    assert store.calls == 1
    resolver.invalidate("acme")
    resolver.resolve("HB", "acme")
    assert store.calls == 2


def test_store_error_degrades_to_system_defaults():
    store = FakeStore(error=DialectError(ErrorCode.STORE_UNAVAILABLE, "down"))
    resolver = OrgShortcodeResolver(store)
    resolved = resolver.resolve("2L", "acme")
    assert resolved.is_org_specific is False
    assert resolver.org_configs("acme") == []


def test_available_shortcodes_lists_org_codes_first():
    store = FakeStore(
        {
            "acme": [
                _config("2L", ServiceType.edgeband, display_name="Long 1mm"),
                _config("HB", ServiceType.groove),
            ]
        }
    )
    items = OrgShortcodeResolver(store).available_shortcodes("acme")
    assert [(i.code, i.is_org_specific) for i in items[:2]] == [("2L", True), ("HB", True)]
    system_edgeband = [i.code for i in items if i.service_type == ServiceType.edgeband and not i.is_org_specific]
    assert "2L" not in system_edgeband
    assert "2L2W" in system_edgeband


def test_available_shortcodes_filtered_by_type():
    items = OrgShortcodeResolver(FakeStore()).available_shortcodes(service_type=ServiceType.hole)
    assert items
    assert all(i.service_type == ServiceType.hole for i in items)
    assert [i.code for i in items] == sorted(SYSTEM_DEFAULTS[ServiceType.hole])


def test_example_organization_file(example_dialect_dir):
    resolver = OrgShortcodeResolver(FileDialectStore(StoreConfig(dir_path=example_dialect_dir)))
    softclose = resolver.resolve("SOFTCLOSE", "example-org")
    assert softclose.service_type == ServiceType.hole
    assert softclose.specs["count"] == 3
    # inactive configs are not offered
    codes = [i.code for i in resolver.available_shortcodes("example-org") if i.is_org_specific]
    assert "OLD-SINK" not in codes
    assert "2L" in codes
