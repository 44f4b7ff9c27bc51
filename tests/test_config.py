import json

import pytest

from ship_calc.config import DEFAULT_LIMITS, PALLET_TYPES, load_settings, resolve_pallet


def test_resolve_standard_pallets():
    assert resolve_pallet("us_standard") is PALLET_TYPES["US_STANDARD"]
    assert resolve_pallet("EURO").length_in == 47.24


def test_resolve_custom_pallet():
    pallet = resolve_pallet("custom", 42, 42)
    assert (pallet.length_in, pallet.width_in) == (42, 42)
    assert resolve_pallet("CUSTOM").length_in == 0


def test_resolve_unknown_pallet():
    with pytest.raises(ValueError, match="Valid values"):
        resolve_pallet("gma")


def test_defaults_without_file():
    settings = load_settings(environ={})
    assert settings.limits == DEFAULT_LIMITS
    assert settings.gs1_company_prefix is None


def test_load_settings_from_file(tmp_path):
    path = tmp_path / "ship_calc.json"
    path.write_text(
        json.dumps({"limits": {"max_pallet_weight_lbs": 2200}, "gs1_company_prefix": "0614141"}),
        encoding="utf-8",
    )
    settings = load_settings(path, environ={})
    assert settings.limits.max_pallet_weight_lbs == 2200
    assert settings.limits.truck_height_in == 102
    assert settings.gs1_company_prefix == "0614141"


def test_environment_overrides(tmp_path):
    path = tmp_path / "ship_calc.json"
    path.write_text(json.dumps({"gs1_company_prefix": "0614141"}), encoding="utf-8")
    settings = load_settings(
        environ={"SHIP_CALC_CONFIG": str(path), "SHIP_CALC_GS1_PREFIX": "012345"}
    )
    assert settings.gs1_company_prefix == "012345"


def test_rejects_bad_limits(tmp_path):
    path = tmp_path / "ship_calc.json"
    path.write_text(json.dumps({"limits": {"max_height": 90}}), encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown pallet limit"):
        load_settings(path, environ={})

    path.write_text(json.dumps({"limits": {"rack_height_in": "tall"}}), encoding="utf-8")
    with pytest.raises(ValueError, match="must be a number"):
        load_settings(path, environ={})


def test_rejects_unreadable_file(tmp_path):
    with pytest.raises(ValueError, match="Cannot read"):
        load_settings(tmp_path / "missing.json", environ={})
