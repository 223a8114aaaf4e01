from fastapi.testclient import TestClient

from rigfit.main import app


client = TestClient(app)


def test_catalog_endpoint_lists_categories():
    resp = client.get("/api/catalog")
    assert resp.status_code == 200
    body = resp.json()
    assert "cpu" in body
    assert body["case"][0]["maxGpuLength"] == 392


def test_unknown_category_returns_404():
    assert client.get("/api/catalog/toaster").status_code == 404
    resp = client.post("/api/eligible", json={"category": "toaster", "selection": {}})
    assert resp.status_code == 404


def test_eligible_endpoint_filters_and_explains():
    resp = client.post(
        "/api/eligible",
        json={"category": "cpu", "selection": {"motherboard": "mb-b650-tomahawk"}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert {c["id"] for c in body["eligible"]} == {"cpu-7800x3d", "cpu-7600"}
    assert [d["id"] for d in body["ineligible"]] == ["cpu-14700k"]
    assert body["ineligible"][0]["reasons"][0].startswith("Socket mismatch")


def test_compatibility_endpoint_groups_by_severity():
    resp = client.post(
        "/api/compatibility",
        json={"selection": {"cpu": "cpu-14700k", "motherboard": "mb-b650-tomahawk"}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [i["title"] for i in body["critical"]] == ["CPU & Motherboard Socket Mismatch"]
    assert [i["title"] for i in body["warning"]] == ["CPU Generation Compatibility"]
    assert body["critical"][0]["affectedComponents"] == [
        "Intel Core i7-14700K",
        "MSI MAG B650 Tomahawk WiFi",
    ]


def test_resolve_endpoint_applies_variant():
    resp = client.post(
        "/api/resolve",
        json={"category": "case", "component_id": "case-lancool-216", "variant": {"colour": "White"}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["resolved"]["price"] == 99.99
    assert body["resolved"]["ean"] == "4718466013522"
    assert body["resolved"]["images"] == ["/images/case/lancool-216-white-1.jpg"]
    assert body["has_multiple_prices"] is True
    assert body["lowest_price"] == 94.99
    assert body["options"] == [{"key": "colour", "values": ["Black", "White"]}]


def test_resolve_endpoint_missing_component():
    resp = client.post("/api/resolve", json={"category": "case", "component_id": "nope"})
    assert resp.status_code == 404


def test_total_endpoint():
    resp = client.post(
        "/api/total",
        json={
            "selection": {"storage": "ssd-990-pro", "cpu": "cpu-7600"},
            "peripherals": {"mouse": ["mouse-g502"]},
            "variants": {"ssd-990-pro": {"storage": "2TB"}},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert abs(body["total"] - (159.99 + 179.99 + 79.99)) < 1e-6
    assert body["complete"] is False


def test_session_flow_keeps_variant_choices():
    session = "api-session-variants"
    resp = client.post(f"/api/sessions/{session}/select", json={"category": "ram", "component_id": "ram-vengeance-32-6000"})
    assert resp.status_code == 200

    resp = client.post(
        f"/api/sessions/{session}/variant",
        json={"component_id": "ram-vengeance-32-6000", "option": "size", "value": "64GB"},
    )
    assert abs(resp.json()["total"] - 194.99) < 1e-6

    client.post(f"/api/sessions/{session}/select", json={"category": "ram", "component_id": "ram-fury-16-3200"})
    resp = client.post(f"/api/sessions/{session}/select", json={"category": "ram", "component_id": "ram-vengeance-32-6000"})
    assert abs(resp.json()["total"] - 194.99) < 1e-6

    snapshot = client.get(f"/api/sessions/{session}").json()
    assert snapshot["selection"]["ram"] == "ram-vengeance-32-6000"


def test_session_select_unknown_component_returns_404():
    resp = client.post("/api/sessions/api-404/select", json={"category": "cpu", "component_id": "ghost"})
    assert resp.status_code == 404


def test_session_peripherals():
    resp = client.post(
        "/api/sessions/api-peripherals/peripherals",
        json={"category": "keyboard", "component_ids": ["kb-k70"]},
    )
    assert resp.status_code == 200
    assert abs(resp.json()["total"] - 149.99) < 1e-6
