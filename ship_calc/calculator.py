"""Pallet layout, overhang, weight and cube calculations.

All dimensions are inches and all masses kilograms unless a name says
otherwise. Every public function is total: missing, zero, negative or
non-finite numeric input degrades to a zero/``None`` result instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Mapping, Optional, Tuple

from .config import DEFAULT_LIMITS, US_STANDARD, PalletDimensions, PalletLimits, resolve_pallet

LBS_PER_KG = 2.20462
CUBIC_INCHES_PER_CUFT = 1728.0
CBM_PER_CUFT = 0.0283168

# Overhang of one inch or more is unsafe to ship.
OVERHANG_DANGER_IN = 1.0

_VEHICLE_LIMITS = {
    "truck": "truck_weight_lbs",
    "20ft": "container_20ft_weight_lbs",
    "40ft": "container_40ft_weight_lbs",
}


@dataclass(frozen=True)
class Arrangement:
    cols: int
    rows: int
    orientation: str

    @property
    def cases(self) -> int:
        return self.cols * self.rows


@dataclass(frozen=True)
class TiFit:
    max_ti: int
    optimal_ti: int
    arrangement: Optional[Arrangement]


@dataclass(frozen=True)
class TiValidationResult:
    is_valid: bool
    max_ti: int
    optimal_ti: int
    message: Optional[str]
    optimal_arrangement: Optional[Arrangement]


@dataclass(frozen=True)
class OverhangResult:
    front: float
    back: float
    left: float
    right: float
    max_overhang: float
    has_overhang: bool


@dataclass(frozen=True)
class PalletWeight:
    kg: float
    lbs: float


@dataclass(frozen=True)
class PalletMetrics:
    cases_per_pallet: int
    total_units: int
    total_weight_kg: float
    total_weight_lbs: float
    cubic_feet: float
    cubic_meters: float
    cube_utilization: float
    stack_height_in: float
    is_overweight: bool
    weight_warning: Optional[str]


@dataclass(frozen=True)
class PalletReport:
    pallet: PalletDimensions
    ti_validation: TiValidationResult
    overhang: OverhangResult
    overhang_severity: str
    metrics: Optional[PalletMetrics]
    height_warning: Optional[str]


_NO_OVERHANG = OverhangResult(0.0, 0.0, 0.0, 0.0, 0.0, False)


def _number(value: Any) -> float:
    """Return ``value`` as a positive float, or 0.0 when it is unusable."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number <= 0:
        return 0.0
    return number


def _count(value: Any) -> int:
    return int(_number(value))


def _orientations(
    box_length: float, box_width: float, pallet_length: float, pallet_width: float
) -> Tuple[Arrangement, Arrangement]:
    return (
        Arrangement(
            cols=math.floor(pallet_length / box_length),
            rows=math.floor(pallet_width / box_width),
            orientation="lengthwise",
        ),
        Arrangement(
            cols=math.floor(pallet_length / box_width),
            rows=math.floor(pallet_width / box_length),
            orientation="widthwise",
        ),
    )


def calculate_max_ti(
    box_length: float,
    box_width: float,
    pallet_length: float = US_STANDARD.length_in,
    pallet_width: float = US_STANDARD.width_in,
) -> TiFit:
    """Return the largest number of cases per layer and the layout that achieves it.

    Only the two axis-aligned orientations are compared; a layer never mixes
    rotated and unrotated cases. Ties go to the lengthwise layout.
    """

    box_length, box_width = _number(box_length), _number(box_width)
    if not box_length or not box_width:
        return TiFit(max_ti=0, optimal_ti=0, arrangement=None)

    lengthwise, widthwise = _orientations(
        box_length, box_width, _number(pallet_length), _number(pallet_width)
    )
    best = lengthwise if lengthwise.cases >= widthwise.cases else widthwise
    return TiFit(max_ti=best.cases, optimal_ti=best.cases, arrangement=best)


def validate_ti_configuration(
    ti: int,
    box_length: float,
    box_width: float,
    pallet_length: float = US_STANDARD.length_in,
    pallet_width: float = US_STANDARD.width_in,
) -> TiValidationResult:
    if not _number(box_length) or not _number(box_width):
        return TiValidationResult(
            is_valid=True,
            max_ti=0,
            optimal_ti=0,
            message=None,
            optimal_arrangement=None,
        )

    # Compared unrounded so a fractional Ti above the maximum is still rejected.
    ti = _number(ti)
    if ti.is_integer():
        ti = int(ti)
    fit = calculate_max_ti(box_length, box_width, pallet_length, pallet_width)

    if ti > fit.max_ti:
        return TiValidationResult(
            is_valid=False,
            max_ti=fit.max_ti,
            optimal_ti=fit.optimal_ti,
            message=(
                f"Maximum {fit.max_ti} cases fit per layer. You entered {ti}. "
                f"Please reduce to {fit.max_ti} or less."
            ),
            optimal_arrangement=fit.arrangement,
        )

    if 0 < ti < fit.optimal_ti:
        efficiency = round(ti / fit.optimal_ti * 100)
        return TiValidationResult(
            is_valid=True,
            max_ti=fit.max_ti,
            optimal_ti=fit.optimal_ti,
            message=(
                f"Optimal layout fits {fit.optimal_ti} cases per layer. "
                f"Current: {ti} ({efficiency}% efficiency)"
            ),
            optimal_arrangement=fit.arrangement,
        )

    return TiValidationResult(
        is_valid=True,
        max_ti=fit.max_ti,
        optimal_ti=fit.optimal_ti,
        message=None,
        optimal_arrangement=fit.arrangement,
    )


def calculate_overhang(
    ti: int,
    box_length: float,
    box_width: float,
    pallet_length: float = US_STANDARD.length_in,
    pallet_width: float = US_STANDARD.width_in,
) -> OverhangResult:
    """Return how far a layer of ``ti`` cases extends past each pallet edge.

    Excess footprint is split evenly between opposite edges. Clearance
    (a layer smaller than the pallet) is reported as zero overhang.
    """

    ti = _count(ti)
    box_length, box_width = _number(box_length), _number(box_width)
    if not ti or not box_length or not box_width:
        return _NO_OVERHANG

    pallet_length, pallet_width = _number(pallet_length), _number(pallet_width)
    lengthwise, widthwise = _orientations(box_length, box_width, pallet_length, pallet_width)

    if lengthwise.cases >= ti or lengthwise.cases >= widthwise.cases:
        chosen, case_length, case_width = lengthwise, box_length, box_width
    else:
        chosen, case_length, case_width = widthwise, box_width, box_length

    # A case bigger than the pallet still occupies one column/row.
    cols = min(math.ceil(ti / max(chosen.rows, 1)), max(chosen.cols, 1))
    rows = math.ceil(ti / cols)

    overhang_length = cols * case_length - pallet_length
    overhang_width = rows * case_width - pallet_width

    front = back = max(0.0, overhang_width / 2)
    left = right = max(0.0, overhang_length / 2)
    max_overhang = max(front, back, left, right)
    return OverhangResult(
        front=front,
        back=back,
        left=left,
        right=right,
        max_overhang=max_overhang,
        has_overhang=max_overhang > 0,
    )


def get_overhang_severity(overhang_in: float) -> str:
    overhang_in = _number(overhang_in)
    if overhang_in <= 0:
        return "none"
    if overhang_in < OVERHANG_DANGER_IN:
        return "warning"
    return "danger"


def calculate_total_weight(
    ti: int,
    hi: int,
    case_weight_kg: float,
    pallet_weight_kg: Optional[float] = None,
    *,
    limits: PalletLimits = DEFAULT_LIMITS,
) -> PalletWeight:
    """Gross pallet weight; zero when Ti, Hi or case weight is missing."""

    ti, hi, case_weight_kg = _count(ti), _count(hi), _number(case_weight_kg)
    if not ti or not hi or not case_weight_kg:
        return PalletWeight(kg=0.0, lbs=0.0)
    if pallet_weight_kg is None:
        pallet_weight_kg = limits.pallet_weight_kg
    total_kg = ti * hi * case_weight_kg + _number(pallet_weight_kg)
    return PalletWeight(kg=total_kg, lbs=total_kg * LBS_PER_KG)


def calculate_cubic_feet(
    ti: int, hi: int, box_length: float, box_width: float, box_height: float
) -> float:
    ti, hi = _count(ti), _count(hi)
    box_volume = _number(box_length) * _number(box_width) * _number(box_height)
    if not ti or not hi or not box_volume:
        return 0.0
    return ti * hi * box_volume / CUBIC_INCHES_PER_CUFT


def calculate_cube_utilization(
    ti: int,
    hi: int,
    box_length: float,
    box_width: float,
    box_height: float,
    pallet_length: float = US_STANDARD.length_in,
    pallet_width: float = US_STANDARD.width_in,
    *,
    limits: PalletLimits = DEFAULT_LIMITS,
) -> float:
    """Percentage of the loaded pallet's bounding volume taken by product."""

    ti, hi, box_height = _count(ti), _count(hi), _number(box_height)
    box_volume = _number(box_length) * _number(box_width) * box_height
    if not ti or not hi or not box_volume:
        return 0.0

    stack_height = limits.pallet_height_in + hi * box_height
    pallet_volume = _number(pallet_length) * _number(pallet_width) * stack_height
    if pallet_volume == 0:
        return 0.0
    return ti * hi * box_volume / pallet_volume * 100


def calculate_pallet_metrics(
    ti: int,
    hi: int,
    units_per_case: int,
    case_weight_kg: float,
    box_length: float,
    box_width: float,
    box_height: float,
    pallet_length: float = US_STANDARD.length_in,
    pallet_width: float = US_STANDARD.width_in,
    *,
    limits: PalletLimits = DEFAULT_LIMITS,
) -> Optional[PalletMetrics]:
    ti, hi = _count(ti), _count(hi)
    if not ti or not hi:
        return None

    cases_per_pallet = ti * hi
    weight = calculate_total_weight(ti, hi, case_weight_kg, limits=limits)
    cubic_feet = calculate_cubic_feet(ti, hi, box_length, box_width, box_height)
    cube_utilization = calculate_cube_utilization(
        ti, hi, box_length, box_width, box_height, pallet_length, pallet_width, limits=limits
    )
    stack_height = limits.pallet_height_in + hi * _number(box_height)

    is_overweight = weight.lbs > limits.max_pallet_weight_lbs
    weight_warning = None
    if is_overweight:
        weight_warning = (
            f"Exceeds standard pallet capacity ({limits.max_pallet_weight_lbs:,.0f} lbs)"
        )

    return PalletMetrics(
        cases_per_pallet=cases_per_pallet,
        total_units=cases_per_pallet * _count(units_per_case),
        total_weight_kg=weight.kg,
        total_weight_lbs=weight.lbs,
        cubic_feet=cubic_feet,
        cubic_meters=cubic_feet * CBM_PER_CUFT,
        cube_utilization=cube_utilization,
        stack_height_in=stack_height,
        is_overweight=is_overweight,
        weight_warning=weight_warning,
    )


def get_height_warning(
    stack_height_in: float, *, limits: PalletLimits = DEFAULT_LIMITS
) -> Optional[str]:
    """Return the most restrictive clearance the stack exceeds, if any."""

    stack_height_in = _number(stack_height_in)
    if stack_height_in > limits.truck_height_in:
        return f'Exceeds truck interior height ({limits.truck_height_in:g}")'
    if stack_height_in > limits.rack_height_in:
        return f'Exceeds standard rack height ({limits.rack_height_in:g}")'
    if stack_height_in > limits.doorway_height_in:
        return f'Exceeds standard doorway ({limits.doorway_height_in:g}")'
    return None


def calculate_load_capacity(
    pallet_weight_lbs: float,
    vehicle: str = "truck",
    *,
    limits: PalletLimits = DEFAULT_LIMITS,
) -> int:
    """Number of pallets of the given gross weight a vehicle can carry by weight."""

    try:
        limit = getattr(limits, _VEHICLE_LIMITS[vehicle.lower()])
    except (KeyError, AttributeError) as exc:
        valid = ", ".join(sorted(_VEHICLE_LIMITS))
        raise ValueError(f"Unsupported vehicle '{vehicle}'. Valid values: {valid}.") from exc
    pallet_weight_lbs = _number(pallet_weight_lbs)
    if not pallet_weight_lbs:
        return 0
    return math.floor(limit / pallet_weight_lbs)


def _load_pallet(raw: Any) -> PalletDimensions:
    if raw is None:
        return US_STANDARD
    if isinstance(raw, str):
        return resolve_pallet(raw)
    if isinstance(raw, Mapping):
        return resolve_pallet(
            str(raw.get("type", "CUSTOM")),
            length_in=_number(raw.get("length_in")),
            width_in=_number(raw.get("width_in")),
        )
    raise ValueError("Invalid pallet specification.")


def _load_box(raw: Mapping[str, Any]) -> Tuple[float, float, float]:
    try:
        dims = raw["box_dimensions_in"]
        length, width, height = dims[0], dims[1], dims[2]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("box_dimensions_in must be a [length, width, height] list.") from exc
    return _number(length), _number(width), _number(height)


def build_pallet_report(
    raw: Mapping[str, Any], *, limits: PalletLimits = DEFAULT_LIMITS
) -> PalletReport:
    """Evaluate a pallet configuration described by a JSON-style mapping.

    Expected keys: ``box_dimensions_in`` ([L, W, H]), ``ti``, ``hi`` and
    optionally ``units_per_case``, ``case_weight_kg`` and ``pallet`` (a
    standard name or ``{"type": "CUSTOM", "length_in": .., "width_in": ..}``).
    """

    if not isinstance(raw, Mapping):
        raise ValueError("Pallet configuration must be a JSON object.")
    length, width, height = _load_box(raw)
    pallet = _load_pallet(raw.get("pallet"))
    ti, hi = raw.get("ti"), raw.get("hi")

    overhang = calculate_overhang(ti, length, width, pallet.length_in, pallet.width_in)
    metrics = calculate_pallet_metrics(
        ti,
        hi,
        raw.get("units_per_case"),
        raw.get("case_weight_kg"),
        length,
        width,
        height,
        pallet.length_in,
        pallet.width_in,
        limits=limits,
    )
    return PalletReport(
        pallet=pallet,
        ti_validation=validate_ti_configuration(
            ti, length, width, pallet.length_in, pallet.width_in
        ),
        overhang=overhang,
        overhang_severity=get_overhang_severity(overhang.max_overhang),
        metrics=metrics,
        height_warning=(
            get_height_warning(metrics.stack_height_in, limits=limits) if metrics else None
        ),
    )
