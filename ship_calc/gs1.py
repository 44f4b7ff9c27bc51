"""GS1 identifier check digits and code construction.

Covers the three identifiers the warehouse prints:

* UPC-A (12 digits): company prefix + item reference + check digit
* GTIN-14 (14 digits): packaging indicator + ``0`` + UPC-A data digits + check digit
* SSCC-18 (18 digits): extension digit + company prefix + serial reference + check digit

Builders raise :class:`BarcodeError` when a length or range rule is broken.
Validators never raise; malformed input is simply invalid.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple, Union

UPC_LENGTH = 12
GTIN14_LENGTH = 14
SSCC_LENGTH = 18
MIN_PREFIX_LENGTH = 6
MAX_PREFIX_LENGTH = 10

PACKAGING_INDICATORS: Dict[str, str] = {
    "0": "Mixed assortment",
    "1": "Inner carton",
    "2": "Outer case",
    "3": "Higher aggregation level 3",
    "4": "Higher aggregation level 4",
    "5": "Higher aggregation level 5",
    "6": "Higher aggregation level 6",
    "7": "Higher aggregation level 7",
    "8": "Higher aggregation level 8",
}

_CODE_TYPES = {
    UPC_LENGTH: "UPC-A",
    GTIN14_LENGTH: "GTIN-14",
    SSCC_LENGTH: "SSCC-18",
}

_NON_DIGITS = re.compile(r"[^0-9]")


class BarcodeError(ValueError):
    """Raised when a code cannot be built from the given parts."""


def _digits(value: Union[str, int, None]) -> str:
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def gs1_check_digit(data: str) -> int:
    """Mod-10 check digit for a string of GS1 data digits.

    Weights alternate 3, 1, 3, ... starting from the rightmost data digit.
    """

    total = sum(
        int(digit) * (3 if position % 2 == 0 else 1)
        for position, digit in enumerate(reversed(data))
    )
    return (10 - total % 10) % 10


def check_company_prefix(company_prefix: Union[str, int, None]) -> str:
    """Return the prefix as bare digits, or raise when it is not 6-10 digits long."""

    prefix = _digits(company_prefix)
    if not MIN_PREFIX_LENGTH <= len(prefix) <= MAX_PREFIX_LENGTH:
        raise BarcodeError(
            f"GS1 company prefix must be {MIN_PREFIX_LENGTH}-{MAX_PREFIX_LENGTH} digits, "
            f"got {len(prefix)}."
        )
    return prefix


def _is_valid(code: Union[str, None], length: int) -> bool:
    digits = _digits(code)
    if len(digits) != length:
        return False
    return gs1_check_digit(digits[:-1]) == int(digits[-1])


def calculate_upc_check_digit(digits: str) -> int:
    cleaned = _digits(digits)
    if len(cleaned) != UPC_LENGTH - 1:
        raise BarcodeError(f"UPC-A check digit needs exactly 11 digits, got {len(cleaned)}.")
    return gs1_check_digit(cleaned)


def generate_upc_code(company_prefix: Union[str, int], item_number: Union[str, int]) -> str:
    """Build a UPC-A from a company prefix and item reference.

    The item reference is zero-padded to fill the digits left after the
    prefix; a longer reference keeps its low-order digits.
    """

    prefix = check_company_prefix(company_prefix)
    reference_length = UPC_LENGTH - 1 - len(prefix)
    reference = _digits(item_number).zfill(reference_length)[-reference_length:]
    data = prefix + reference
    return data + str(calculate_upc_check_digit(data))


def validate_upc_code(upc: Union[str, None]) -> bool:
    return _is_valid(upc, UPC_LENGTH)


def check_packaging_indicator(packaging_indicator: Union[str, int, None]) -> str:
    indicator = str(packaging_indicator).strip()
    if indicator not in PACKAGING_INDICATORS:
        raise BarcodeError(
            f"Packaging indicator must be a single digit 0-8, got {packaging_indicator!r}."
        )
    return indicator


def generate_gtin14_from_upc(product_upc: str, packaging_indicator: Union[str, int] = "1") -> str:
    """Derive the GTIN-14 case code for a retail UPC-A.

    The UPC's own check digit is dropped and a new one is computed over the
    13 data digits.
    """

    upc = _digits(product_upc)
    if len(upc) != UPC_LENGTH:
        raise BarcodeError(f"GTIN-14 requires a 12-digit UPC-A, got {len(upc)} digits.")
    indicator = check_packaging_indicator(packaging_indicator)
    data = indicator + "0" + upc[:-1]
    return data + str(gs1_check_digit(data))


def validate_gtin14(code: Union[str, None]) -> bool:
    return _is_valid(code, GTIN14_LENGTH)


def generate_sscc(
    company_prefix: Union[str, int],
    serial_number: Union[str, int],
    extension_digit: Union[str, int] = "0",
) -> str:
    prefix = check_company_prefix(company_prefix)
    extension = str(extension_digit).strip()
    if len(extension) != 1 or extension not in "0123456789":
        raise BarcodeError(f"SSCC extension digit must be 0-9, got {extension_digit!r}.")
    serial_length = SSCC_LENGTH - 2 - len(prefix)
    serial = _digits(serial_number)
    if len(serial) > serial_length:
        raise BarcodeError(
            f"Serial reference {serial} does not fit in {serial_length} digits "
            f"after a {len(prefix)}-digit prefix."
        )
    data = extension + prefix + serial.zfill(serial_length)
    return data + str(gs1_check_digit(data))


def validate_sscc(code: Union[str, None]) -> bool:
    return _is_valid(code, SSCC_LENGTH)


def format_upc_for_display(upc: str) -> str:
    """``036000291452`` -> ``0-36000-29145-2``; other input is returned as is."""

    digits = _digits(upc)
    if len(digits) != UPC_LENGTH:
        return upc
    return f"{digits[0]}-{digits[1:6]}-{digits[6:11]}-{digits[11]}"


def format_gtin14_for_display(gtin: str) -> str:
    """``10036000291459`` -> ``(1) 00-36000-29145-9``; other input is returned as is."""

    digits = _digits(gtin)
    if len(digits) != GTIN14_LENGTH:
        return gtin
    return f"({digits[0]}) {digits[1:3]}-{digits[3:8]}-{digits[8:13]}-{digits[13]}"


def identify_code(code: Union[str, None]) -> Tuple[Optional[str], bool]:
    """Return the identifier type implied by the digit count and whether it checks out."""

    digits = _digits(code)
    kind = _CODE_TYPES.get(len(digits))
    if kind is None:
        return None, False
    return kind, _is_valid(digits, len(digits))
