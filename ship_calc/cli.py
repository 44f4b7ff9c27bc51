"""Command-line interface for pallet checks and GS1 codes."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .calculator import PalletReport, build_pallet_report
from .config import Settings, load_settings
from .gs1 import (
    BarcodeError,
    format_gtin14_for_display,
    format_upc_for_display,
    generate_gtin14_from_upc,
    generate_sscc,
    generate_upc_code,
    identify_code,
)


def _load_input(path: str | Path) -> Dict[str, Any]:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _print_report(report: PalletReport) -> None:
    validation = report.ti_validation
    print(f"Pallet: {report.pallet.name} ({report.pallet.length_in:g} × {report.pallet.width_in:g} in)")
    if validation.optimal_arrangement:
        arrangement = validation.optimal_arrangement
        print(
            f"Best layout: {arrangement.cols} × {arrangement.rows} {arrangement.orientation}"
            f" ({validation.max_ti} cases per layer)"
        )
    print(f"Ti check: {'ok' if validation.is_valid else 'INVALID'}")
    if validation.message:
        print(f"  {validation.message}")

    overhang = report.overhang
    print(
        f"Overhang: {report.overhang_severity}"
        f" (front {overhang.front:.2f}, back {overhang.back:.2f},"
        f" left {overhang.left:.2f}, right {overhang.right:.2f} in)"
    )

    metrics = report.metrics
    if metrics is None:
        print("Metrics: enter Ti and Hi to calculate pallet metrics.")
        return
    print(f"Cases per pallet: {metrics.cases_per_pallet}")
    print(f"Total units: {metrics.total_units}")
    print(f"Total weight: {metrics.total_weight_kg:.1f} kg / {metrics.total_weight_lbs:.1f} lbs")
    print(f"Volume: {metrics.cubic_feet:.2f} CUFT / {metrics.cubic_meters:.3f} CBM")
    print(f"Cube utilization: {metrics.cube_utilization:.1f}%")
    print(f"Stack height: {metrics.stack_height_in:.1f} in")
    for warning in (metrics.weight_warning, report.height_warning):
        if warning:
            print(f"WARNING: {warning}")


def _cmd_pallet(args: argparse.Namespace, settings: Settings) -> int:
    report = build_pallet_report(_load_input(args.input), limits=settings.limits)
    _print_report(report)
    return 0


def _cmd_upc(args: argparse.Namespace, settings: Settings) -> int:
    prefix = args.prefix or settings.gs1_company_prefix
    if not prefix:
        raise BarcodeError("GS1 company prefix not configured")
    code = generate_upc_code(prefix, args.item)
    print(f"{code}  {format_upc_for_display(code)}")
    return 0


def _cmd_gtin(args: argparse.Namespace, settings: Settings) -> int:
    code = generate_gtin14_from_upc(args.upc, args.indicator)
    print(f"{code}  {format_gtin14_for_display(code)}")
    return 0


def _cmd_sscc(args: argparse.Namespace, settings: Settings) -> int:
    prefix = args.prefix or settings.gs1_company_prefix
    if not prefix:
        raise BarcodeError("GS1 company prefix not configured")
    print(generate_sscc(prefix, args.serial, args.extension))
    return 0


def _cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    kind, valid = identify_code(args.code)
    if kind is None:
        print(f"{args.code}: not a UPC-A, GTIN-14 or SSCC-18")
        return 1
    print(f"{args.code}: {'valid' if valid else 'invalid'} {kind}")
    return 0 if valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pallet configuration checks and GS1 barcodes.")
    parser.add_argument("--config", help="Path to a JSON configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    pallet = sub.add_parser("pallet", help="Evaluate a pallet configuration.")
    pallet.add_argument(
        "input",
        type=str,
        help="Path to a JSON file describing the case and pallet (use '-' for stdin).",
    )
    pallet.set_defaults(func=_cmd_pallet)

    upc = sub.add_parser("upc", help="Build a UPC-A from prefix and item number.")
    upc.add_argument("item", help="Item reference number.")
    upc.add_argument("--prefix", help="GS1 company prefix (defaults to configuration).")
    upc.set_defaults(func=_cmd_upc)

    gtin = sub.add_parser("gtin", help="Derive a GTIN-14 case code from a UPC-A.")
    gtin.add_argument("upc", help="12-digit UPC-A.")
    gtin.add_argument("--indicator", default="1", help="Packaging indicator 0-8 (default 1).")
    gtin.set_defaults(func=_cmd_gtin)

    sscc = sub.add_parser("sscc", help="Build an SSCC-18 for a logistics unit.")
    sscc.add_argument("serial", help="Serial reference.")
    sscc.add_argument("--prefix", help="GS1 company prefix (defaults to configuration).")
    sscc.add_argument("--extension", default="0", help="Extension digit 0-9 (default 0).")
    sscc.set_defaults(func=_cmd_sscc)

    validate = sub.add_parser("validate", help="Check a UPC-A, GTIN-14 or SSCC-18.")
    validate.add_argument("code")
    validate.set_defaults(func=_cmd_validate)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(args.config)
        return args.func(args, settings)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
