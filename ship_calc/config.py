"""Deployment-level constants for pallet and barcode calculations."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SHIP_CALC_CONFIG"
PREFIX_ENV_VAR = "SHIP_CALC_GS1_PREFIX"


@dataclass(frozen=True)
class PalletDimensions:
    name: str
    length_in: float
    width_in: float


PALLET_TYPES: Dict[str, PalletDimensions] = {
    "US_STANDARD": PalletDimensions('US Standard (48" × 40")', 48.0, 40.0),
    "EURO": PalletDimensions("Euro Pallet (1200mm × 800mm)", 47.24, 31.5),
    "CUSTOM": PalletDimensions("Custom", 0.0, 0.0),
}

US_STANDARD = PALLET_TYPES["US_STANDARD"]


@dataclass(frozen=True)
class PalletLimits:
    """Physical limits used for warnings.

    Weights are in pounds, heights in inches, except ``pallet_weight_kg``
    which is the tare of an empty wooden pallet.
    """

    pallet_height_in: float = 6.0
    pallet_weight_kg: float = 20.0
    max_pallet_weight_lbs: float = 2500.0
    truck_weight_lbs: float = 44000.0
    container_20ft_weight_lbs: float = 47900.0
    container_40ft_weight_lbs: float = 58860.0
    truck_height_in: float = 102.0
    rack_height_in: float = 96.0
    doorway_height_in: float = 84.0


DEFAULT_LIMITS = PalletLimits()


@dataclass(frozen=True)
class Settings:
    limits: PalletLimits = field(default_factory=PalletLimits)
    gs1_company_prefix: Optional[str] = None


def resolve_pallet(
    kind: str,
    length_in: Optional[float] = None,
    width_in: Optional[float] = None,
) -> PalletDimensions:
    """Return the named standard pallet, or a custom one from the given sizes."""

    try:
        pallet = PALLET_TYPES[kind.upper()]
    except (KeyError, AttributeError) as exc:
        valid = ", ".join(sorted(PALLET_TYPES))
        raise ValueError(f"Unsupported pallet type '{kind}'. Valid values: {valid}.") from exc
    if kind.upper() != "CUSTOM":
        return pallet
    return PalletDimensions(
        name=pallet.name,
        length_in=float(length_in or 0.0),
        width_in=float(width_in or 0.0),
    )


def _load_limits(raw: Mapping[str, Any], base: PalletLimits) -> PalletLimits:
    known = {f.name for f in fields(PalletLimits)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown pallet limit(s): {', '.join(unknown)}.")
    values: Dict[str, float] = {}
    for key, value in raw.items():
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Pallet limit '{key}' must be a number, got {value!r}.") from exc
        if not math.isfinite(number) or number < 0:
            raise ValueError(f"Pallet limit '{key}' must be a non-negative number.")
        values[key] = number
    return replace(base, **values)


def load_settings(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build settings from an optional JSON file and environment overrides."""

    env = os.environ if environ is None else environ
    path = path or env.get(CONFIG_ENV_VAR)
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Cannot read configuration file {path}.") from exc
        if not isinstance(data, dict):
            raise ValueError("Configuration file must contain a JSON object.")
        logger.debug("Loaded configuration from %s", path)

    limits = _load_limits(data.get("limits") or {}, DEFAULT_LIMITS)
    prefix = env.get(PREFIX_ENV_VAR) or data.get("gs1_company_prefix")
    if prefix is not None:
        prefix = str(prefix).strip() or None
    return Settings(limits=limits, gs1_company_prefix=prefix)
