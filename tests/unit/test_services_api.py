from fastapi.testclient import TestClient

from panel_notation.main import app

client = TestClient(app)
HEADERS = {"X-API-Key": "test"}


def test_normalize_text():
    resp = client.post(
        "/api/v1/services/normalize",
        json={"text": "2L2W G-ALL-4-10 H2-110"},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["codes"] == {"edgeband": "2L2W", "grooves": "G-ALL-4-10", "holes": "H2-110", "cnc": "-"}
    assert data["summary"] == "EB:2L2W | GRV:4 | HOLE:1"
    assert data["warnings"] == []
    assert data["organization_id"] is None


def test_normalize_columns():
    resp = client.post(
        "/api/v1/services/normalize",
        json={"columns": {"Part": "Side", "L": "X", "Groove Back": "X", "Hinge": "X"}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    services = resp.json()["services"]
    assert services["edgeband"]["edges"] == ["L1", "L2"]
    assert [g["on_edge"] for g in services["grooves"]] == ["W2"]
    assert services["holes"][0]["kind"] == "hinge"


def test_normalize_reports_warnings():
    resp = client.post("/api/v1/services/normalize", json={"text": "GL-4-10@d0"}, headers=HEADERS)
    assert resp.status_code == 200
    assert len(resp.json()["warnings"]) == 2


def test_normalize_requires_input():
    resp = client.post("/api/v1/services/normalize", json={"text": "  "}, headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INPUT_ERROR"


def test_normalize_rejects_unknown_family():
    resp = client.post(
        "/api/v1/services/normalize",
        json={"text": "2L", "only": ["paint"]},
        headers=HEADERS,
    )
    assert resp.status_code == 400


def test_normalize_with_organization(example_dialect_dir):
    resp = client.post(
        "/api/v1/services/normalize",
        json={"columns": {"Front Edge": "EB"}},
        headers={**HEADERS, "X-Org-Id": "example-org"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["organization_id"] == "example-org"
    assert data["dialect_version"] == "2024.3"
    assert data["services"]["edgeband"]["edges"] == ["L1"]

    # the default dialect knows neither the header nor the flag
    resp = client.post("/api/v1/services/normalize", json={"columns": {"Front Edge": "EB"}}, headers=HEADERS)
    assert resp.json()["services"]["edgeband"] is None


def test_normalize_with_inline_dialect(dialect_dir):
    resp = client.post(
        "/api/v1/services/normalize",
        json={"columns": {"Left": "X"}, "dialect": {"edgeband": {"columnMappings": {"L1": ["LEFT"]}}}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["services"]["edgeband"]["edges"] == ["L1"]


def test_invalid_inline_dialect_is_422(dialect_dir):
    resp = client.post(
        "/api/v1/services/normalize",
        json={"text": "2L", "dialect": {"groove": {"defaultDepthMm": "deep"}}},
        headers=HEADERS,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "DIALECT_INVALID"


def test_inline_macro_without_params_is_422(dialect_dir):
    resp = client.post(
        "/api/v1/services/normalize",
        json={"text": "LOGO", "dialect": {"cnc": {"macros": {"LOGO": {"type": "cutout", "shape_id": "logo"}}}}},
        headers=HEADERS,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "DIALECT_INVALID"


def test_format_endpoint():
    resp = client.post(
        "/api/v1/services/format",
        json={"services": {"edgeband": {"edges": ["L1", "W1"]}}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["edges_visual"] == "●═══●\n║   │\n○───○"
    assert data["detailed"][0].startswith("Edgeband:")
    assert data["codes"]["grooves"] == "-"


def test_validate_endpoint():
    resp = client.post(
        "/api/v1/services/validate",
        json={"services": {"grooves": [{"on_edge": "W2", "distance_from_edge_mm": 10, "width_mm": 4, "depth_mm": 0}]}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is False
    assert len(data["warnings"]) == 1


def test_dialect_merge_endpoint():
    resp = client.post(
        "/api/v1/services/dialect/merge",
        json={"dialect": {"groove": {"defaultDepthMm": 8}}},
        headers={**HEADERS, "X-Org-Id": "acme"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["groove"]["default_depth_mm"] == 8
    assert data["organization_id"] == "acme"
    assert data["edgeband"]["aliases"]


def test_resolve_shortcode(example_dialect_dir):
    resp = client.get("/api/v1/shortcodes/resolve", params={"code": "2L"}, headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["specs"] == {"edges": "L1,L2", "thickness_mm": 0.5}

    resp = client.get(
        "/api/v1/shortcodes/resolve",
        params={"code": "2L"},
        headers={**HEADERS, "X-Org-Id": "example-org"},
    )
    data = resp.json()
    assert data["is_org_specific"] is True
    assert data["specs"]["thickness_mm"] == 1.0


def test_available_shortcodes(example_dialect_dir):
    resp = client.get(
        "/api/v1/shortcodes/available",
        params={"service_type": "hole"},
        headers={**HEADERS, "X-Org-Id": "example-org"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == len(data["shortcodes"])
    assert data["shortcodes"][0]["code"] == "SOFTCLOSE"
    assert all(item["service_type"] == "hole" for item in data["shortcodes"])


def test_shortcode_reference():
    resp = client.get("/api/v1/shortcodes/reference", headers=HEADERS)
    assert resp.status_code == 200
    assert set(resp.json()) >= {"edgeband", "groove", "holes"}


def test_cache_invalidate_requires_org():
    resp = client.post("/api/v1/shortcodes/cache/invalidate", headers=HEADERS)
    assert resp.status_code == 400
    resp = client.post("/api/v1/shortcodes/cache/invalidate", headers={**HEADERS, "X-Org-Id": "acme"})
    assert resp.status_code == 200
    assert resp.json() == {"organization_id": "acme", "invalidated": True}


def test_cache_stats(example_dialect_dir):
    client.post(
        "/api/v1/services/normalize",
        json={"text": "2L"},
        headers={**HEADERS, "X-Org-Id": "example-org"},
    )
    resp = client.get("/api/v1/cache/stats", headers=HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["dialects"]["size"] == 1
    assert data["dialects"]["misses"] == 1


def test_health_and_metrics():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    metrics = client.get("/metrics/")
    assert metrics.status_code == 200
    assert "notation_normalize_total" in metrics.text
