import importlib

import pytest

from ship_calc import web
from ship_calc.config import Settings
from ship_calc.gs1 import validate_gtin14, validate_upc_code
from ship_calc.sequence import InMemoryRegistry
from ship_calc.web import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setitem(app.config, "SETTINGS", Settings(gs1_company_prefix="012345"))
    monkeypatch.setitem(app.config, "CODE_REGISTRY", InMemoryRegistry())
    monkeypatch.setitem(app.config, "PACKAGING_INDICATORS", {12: "2"})
    return app.test_client()


def test_pallet_endpoint(client):
    response = client.post(
        "/api/pallet",
        json={"box_dimensions_in": [12, 10, 8], "ti": 20, "hi": 5, "case_weight_kg": 10},
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["ti_validation"]["is_valid"] is False
    assert body["ti_validation"]["optimal_arrangement"]["orientation"] == "lengthwise"
    assert body["overhang"]["severity"] == "danger"
    assert body["metrics"]["cases_per_pallet"] == 100


def test_pallet_endpoint_rejects_bad_body(client):
    response = client.post("/api/pallet", json=[1, 2])
    assert response.status_code == 400
    assert "JSON object" in response.get_json()["error"]


def test_ti_and_overhang_endpoints(client):
    layout = {"ti": 12, "box_length_in": 12, "box_width_in": 10}
    body = client.post("/api/ti/validate", json=layout).get_json()
    assert body["message"] == "Optimal layout fits 16 cases per layer. Current: 12 (75% efficiency)"

    body = client.post("/api/overhang", json=dict(layout, ti=20)).get_json()
    assert body["front"] == 5
    assert body["has_overhang"] is True


def test_validate_code_endpoint(client):
    body = client.get("/api/codes/validate/10036000291459").get_json()
    assert body == {"code": "10036000291459", "type": "GTIN-14", "valid": True}
    body = client.get("/api/codes/validate/12").get_json()
    assert body["type"] is None
    assert body["valid"] is False


def test_code_builders(client):
    assert client.post("/api/upc", json={"item_number": 1}).get_json()["upc"] == "012345000014"
    body = client.post("/api/gtin", json={"upc": "036000291452", "packaging_indicator": "1"}).get_json()
    assert body["display"] == "(1) 00-36000-29145-9"
    body = client.post(
        "/api/sscc",
        json={"company_prefix": "0614141", "serial_number": "123456789", "extension_digit": "1"},
    ).get_json()
    assert body["sscc"] == "106141411234567897"


def test_code_builder_errors(client):
    response = client.post("/api/gtin", json={"upc": "1234"})
    assert response.status_code == 400
    response = client.post("/api/upc", json={})
    assert response.status_code == 400
    assert "item_number" in response.get_json()["error"]


def test_next_upc_pair(client):
    first = client.post("/api/upc/next", json={"case_pack_size": 12}).get_json()
    second = client.post("/api/upc/next").get_json()
    assert validate_upc_code(first["unit_upc"])
    assert validate_gtin14(first["case_upc"])
    assert first["case_upc"].startswith("2")
    assert second["case_upc"].startswith("1")
    assert first["unit_upc"] != second["unit_upc"]


def test_next_upc_without_prefix(client, monkeypatch):
    monkeypatch.setitem(app.config, "SETTINGS", Settings())
    response = client.post("/api/upc/next")
    assert response.status_code == 400


def test_rejected_indicator_leaves_registry_untouched(client):
    response = client.post("/api/upc/next", json={"packaging_indicator": "9"})
    assert response.status_code == 400
    assert "Packaging indicator" in response.get_json()["error"]
    assert app.config["CODE_REGISTRY"].assigned_codes() == []


def test_settings_are_loaded_on_first_request(client, monkeypatch):
    monkeypatch.delitem(app.config, "SETTINGS")
    monkeypatch.delenv("SHIP_CALC_CONFIG", raising=False)
    monkeypatch.setenv("SHIP_CALC_GS1_PREFIX", "012345")
    assert client.post("/api/upc", json={"item_number": 1}).get_json()["upc"] == "012345000014"
    assert app.config["SETTINGS"].gs1_company_prefix == "012345"


def test_bad_config_file_fails_the_request_not_the_import(client, monkeypatch, tmp_path):
    config = tmp_path / "broken.json"
    config.write_text("{not json", encoding="utf-8")
    monkeypatch.delitem(app.config, "SETTINGS")
    monkeypatch.setenv("SHIP_CALC_CONFIG", str(config))
    module = importlib.reload(web)
    assert "SETTINGS" not in module.app.config
    response = client.post("/api/upc", json={"item_number": 1})
    assert response.status_code == 400
    assert "Cannot read configuration file" in response.get_json()["error"]
