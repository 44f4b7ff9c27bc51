"""Flask JSON API for pallet checks and GS1 codes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, current_app, jsonify, request

from .calculator import (
    Arrangement,
    OverhangResult,
    PalletReport,
    TiValidationResult,
    build_pallet_report,
    calculate_overhang,
    get_overhang_severity,
    validate_ti_configuration,
)
from .config import US_STANDARD, Settings, load_settings
from .gs1 import (
    BarcodeError,
    format_gtin14_for_display,
    format_upc_for_display,
    generate_gtin14_from_upc,
    generate_sscc,
    generate_upc_code,
    identify_code,
)
from .sequence import InMemoryRegistry, SequenceConflictError, generate_upc_pair

app = Flask(__name__)
app.config.setdefault("CODE_REGISTRY", InMemoryRegistry())
app.config.setdefault("PACKAGING_INDICATORS", {})


def _settings() -> Settings:
    settings = current_app.config.get("SETTINGS")
    if settings is None:
        settings = current_app.config["SETTINGS"] = load_settings()
    return settings


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    return data


def _required(data: Dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError as exc:
        raise ValueError(f"Missing field '{key}'.") from exc


def _layout_args(data: Dict[str, Any]):
    return (
        data.get("ti"),
        data.get("box_length_in"),
        data.get("box_width_in"),
        data.get("pallet_length_in", US_STANDARD.length_in),
        data.get("pallet_width_in", US_STANDARD.width_in),
    )


def _serialise_arrangement(arrangement: Optional[Arrangement]):
    if arrangement is None:
        return None
    return {
        "cols": arrangement.cols,
        "rows": arrangement.rows,
        "orientation": arrangement.orientation,
    }


def _serialise_validation(result: TiValidationResult) -> Dict[str, Any]:
    return {
        "is_valid": result.is_valid,
        "max_ti": result.max_ti,
        "optimal_ti": result.optimal_ti,
        "message": result.message,
        "optimal_arrangement": _serialise_arrangement(result.optimal_arrangement),
    }


def _serialise_overhang(result: OverhangResult) -> Dict[str, Any]:
    return {
        "front": result.front,
        "back": result.back,
        "left": result.left,
        "right": result.right,
        "max_overhang": result.max_overhang,
        "has_overhang": result.has_overhang,
        "severity": get_overhang_severity(result.max_overhang),
    }


def _serialise_report(report: PalletReport) -> Dict[str, Any]:
    """Convert a pallet report into JSON-like dictionaries."""

    metrics = report.metrics
    return {
        "pallet": {
            "name": report.pallet.name,
            "length_in": report.pallet.length_in,
            "width_in": report.pallet.width_in,
        },
        "ti_validation": _serialise_validation(report.ti_validation),
        "overhang": _serialise_overhang(report.overhang),
        "metrics": (
            {
                "cases_per_pallet": metrics.cases_per_pallet,
                "total_units": metrics.total_units,
                "total_weight_kg": metrics.total_weight_kg,
                "total_weight_lbs": metrics.total_weight_lbs,
                "cubic_feet": metrics.cubic_feet,
                "cubic_meters": metrics.cubic_meters,
                "cube_utilization": metrics.cube_utilization,
                "stack_height_in": metrics.stack_height_in,
                "is_overweight": metrics.is_overweight,
                "weight_warning": metrics.weight_warning,
            }
            if metrics
            else None
        ),
        "height_warning": report.height_warning,
    }


@app.errorhandler(SequenceConflictError)
def _conflict(exc: SequenceConflictError):
    current_app.logger.warning("UPC allocation conflict: %s", exc)
    return jsonify({"error": str(exc)}), 409


@app.errorhandler(ValueError)
def _bad_request(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


@app.route("/api/pallet", methods=["POST"])
def pallet_report():
    report = build_pallet_report(_payload(), limits=_settings().limits)
    return jsonify(_serialise_report(report))


@app.route("/api/ti/validate", methods=["POST"])
def ti_validate():
    result = validate_ti_configuration(*_layout_args(_payload()))
    return jsonify(_serialise_validation(result))


@app.route("/api/overhang", methods=["POST"])
def overhang():
    result = calculate_overhang(*_layout_args(_payload()))
    return jsonify(_serialise_overhang(result))


@app.route("/api/codes/validate/<code>", methods=["GET"])
def validate_code(code: str):
    kind, valid = identify_code(code)
    return jsonify({"code": code, "type": kind, "valid": valid})


@app.route("/api/upc", methods=["POST"])
def upc():
    data = _payload()
    prefix = data.get("company_prefix") or _settings().gs1_company_prefix
    if not prefix:
        raise BarcodeError("GS1 company prefix not configured")
    code = generate_upc_code(prefix, _required(data, "item_number"))
    return jsonify({"upc": code, "display": format_upc_for_display(code)})


@app.route("/api/gtin", methods=["POST"])
def gtin():
    data = _payload()
    code = generate_gtin14_from_upc(
        _required(data, "upc"), data.get("packaging_indicator", "1")
    )
    return jsonify({"gtin": code, "display": format_gtin14_for_display(code)})


@app.route("/api/sscc", methods=["POST"])
def sscc():
    data = _payload()
    prefix = data.get("company_prefix") or _settings().gs1_company_prefix
    if not prefix:
        raise BarcodeError("GS1 company prefix not configured")
    code = generate_sscc(prefix, _required(data, "serial_number"), data.get("extension_digit", "0"))
    return jsonify({"sscc": code})


@app.route("/api/upc/next", methods=["POST"])
def next_upc():
    data = request.get_json(silent=True) or {}
    pair = generate_upc_pair(
        current_app.config["CODE_REGISTRY"],
        _settings().gs1_company_prefix,
        case_pack_size=data.get("case_pack_size"),
        indicators=current_app.config["PACKAGING_INDICATORS"],
        packaging_indicator=data.get("packaging_indicator"),
    )
    current_app.logger.info("Assigned UPC pair %s / %s", pair.unit_upc, pair.case_upc)
    return jsonify(
        {
            "unit_upc": pair.unit_upc,
            "case_upc": pair.case_upc,
            "unit_display": format_upc_for_display(pair.unit_upc),
            "case_display": format_gtin14_for_display(pair.case_upc),
        }
    )


if __name__ == "__main__":
    app.run(debug=True)
