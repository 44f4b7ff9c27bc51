"""Pallet configuration and GS1 barcode utilities."""

from .calculator import (
    PalletMetrics,
    PalletReport,
    build_pallet_report,
    calculate_max_ti,
    calculate_overhang,
    calculate_pallet_metrics,
    validate_ti_configuration,
)
from .gs1 import (
    BarcodeError,
    generate_gtin14_from_upc,
    generate_sscc,
    generate_upc_code,
    validate_gtin14,
    validate_upc_code,
)

__all__ = [
    "BarcodeError",
    "PalletMetrics",
    "PalletReport",
    "build_pallet_report",
    "calculate_max_ti",
    "calculate_overhang",
    "calculate_pallet_metrics",
    "generate_gtin14_from_upc",
    "generate_sscc",
    "generate_upc_code",
    "validate_gtin14",
    "validate_ti_configuration",
    "validate_upc_code",
]
