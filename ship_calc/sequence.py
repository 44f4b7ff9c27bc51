"""Assigning catalog UPC codes from the company's GS1 prefix.

Sequence numbers are derived by scanning the codes already assigned to
product sizes and legacy product records and taking the highest item
reference plus one. A scan on its own is only advisory: two callers that
scan at the same time get the same number. :func:`allocate_upc` closes the
gap by reserving the code through the registry and retrying on conflict;
registries backed by a database should implement ``reserve`` on top of a
unique constraint.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Iterable, Iterator, List, Mapping, Optional, Protocol, Set

from .gs1 import (
    BarcodeError,
    check_company_prefix,
    check_packaging_indicator,
    generate_gtin14_from_upc,
    generate_upc_code,
)

logger = logging.getLogger(__name__)

DEFAULT_PACKAGING_INDICATOR = "1"


class SequenceConflictError(BarcodeError):
    """Raised when no free UPC could be reserved."""


@dataclass(frozen=True)
class CatalogRecord:
    id: Optional[str] = None
    upc_code: Optional[str] = None
    case_upc_code: Optional[str] = None

    def codes(self) -> Iterator[str]:
        if self.upc_code:
            yield self.upc_code
        if self.case_upc_code:
            yield self.case_upc_code


@dataclass(frozen=True)
class UPCPair:
    unit_upc: str
    case_upc: str


class CodeRegistry(Protocol):
    def assigned_codes(self) -> Iterable[str]:
        ...

    def code_exists(self, code: str, exclude_size_id: Optional[str] = None) -> bool:
        ...

    def reserve(self, code: str) -> bool:
        ...


class InMemoryRegistry:
    """Registry over product-size records and legacy product records."""

    def __init__(
        self,
        sizes: Iterable[CatalogRecord] = (),
        products: Iterable[CatalogRecord] = (),
    ) -> None:
        self.sizes: List[CatalogRecord] = list(sizes)
        self.products: List[CatalogRecord] = list(products)
        self._reserved: Set[str] = set()
        self._lock = threading.Lock()

    def assigned_codes(self) -> List[str]:
        with self._lock:
            codes = [code for record in self.sizes for code in record.codes()]
            codes.extend(code for record in self.products for code in record.codes())
            codes.extend(sorted(self._reserved))
        return codes

    def code_exists(self, code: str, exclude_size_id: Optional[str] = None) -> bool:
        with self._lock:
            return self._exists(code, exclude_size_id)

    def _exists(self, code: str, exclude_size_id: Optional[str] = None) -> bool:
        if code in self._reserved:
            return True
        for record in self.sizes:
            if exclude_size_id is not None and record.id == exclude_size_id:
                continue
            if code in (record.upc_code, record.case_upc_code):
                return True
        return any(code in (record.upc_code, record.case_upc_code) for record in self.products)

    def reserve(self, code: str) -> bool:
        with self._lock:
            if self._exists(code):
                return False
            self._reserved.add(code)
            return True


def _require_prefix(company_prefix: Optional[str]) -> str:
    if not company_prefix:
        logger.error("GS1 company prefix not configured")
        raise BarcodeError("GS1 company prefix not configured")
    return check_company_prefix(company_prefix)


def next_item_number(codes: Iterable[str], company_prefix: str) -> int:
    """Highest item reference among codes under ``company_prefix``, plus one.

    The item reference is everything between the prefix and the check digit.
    Codes under other prefixes, or with non-numeric references, are ignored.
    """

    highest = 0
    for code in codes:
        if not code or not code.startswith(company_prefix):
            continue
        reference = code[len(company_prefix):-1]
        if not (reference.isascii() and reference.isdigit()):
            continue
        highest = max(highest, int(reference))
    return highest + 1


def get_next_upc_sequence(registry: CodeRegistry, company_prefix: Optional[str]) -> int:
    prefix = _require_prefix(company_prefix)
    return next_item_number(registry.assigned_codes(), prefix)


def generate_catalog_upc(
    registry: CodeRegistry,
    company_prefix: Optional[str],
    item_sequence: Optional[int] = None,
) -> str:
    """Format a UPC-A for ``item_sequence``, deriving the sequence when omitted.

    A derived sequence is not reserved; see :func:`allocate_upc`.
    """

    prefix = _require_prefix(company_prefix)
    if not item_sequence:
        item_sequence = get_next_upc_sequence(registry, prefix)
    reference_length = 11 - len(prefix)
    if len(str(item_sequence)) > reference_length:
        raise BarcodeError(
            f"Item sequence {item_sequence} does not fit in {reference_length} digits."
        )
    return generate_upc_code(prefix, item_sequence)


def is_upc_unique(
    registry: CodeRegistry, upc_code: str, exclude_size_id: Optional[str] = None
) -> bool:
    """Whether no size (other than ``exclude_size_id``) or product uses ``upc_code``.

    This answers a point-in-time question only. It does not stop another
    caller from assigning the same code before this one is saved.
    """

    return not registry.code_exists(upc_code, exclude_size_id=exclude_size_id)


def allocate_upc(
    registry: CodeRegistry, company_prefix: Optional[str], attempts: int = 5
) -> str:
    """Derive the next UPC-A and reserve it, retrying when another caller wins."""

    prefix = _require_prefix(company_prefix)
    for attempt in range(1, attempts + 1):
        code = generate_catalog_upc(registry, prefix)
        if registry.reserve(code):
            logger.info("Reserved UPC %s", code)
            return code
        logger.warning("UPC %s already taken (attempt %d/%d)", code, attempt, attempts)
    raise SequenceConflictError(f"Could not reserve a UPC after {attempts} attempts.")


def packaging_indicator_for(
    case_pack_size: Optional[int],
    indicators: Optional[Mapping[int, str]] = None,
    override: Optional[str] = None,
) -> str:
    """Pick the packaging indicator: explicit override, then case-size table, then ``1``."""

    if override:
        return override
    if case_pack_size and indicators:
        indicator = indicators.get(case_pack_size)
        if indicator:
            return indicator
    return DEFAULT_PACKAGING_INDICATOR


def generate_upc_pair(
    registry: CodeRegistry,
    company_prefix: Optional[str],
    case_pack_size: Optional[int] = None,
    indicators: Optional[Mapping[int, str]] = None,
    packaging_indicator: Optional[str] = None,
) -> UPCPair:
    """Allocate a unit UPC-A and derive its GTIN-14 case code."""

    indicator = check_packaging_indicator(
        packaging_indicator_for(case_pack_size, indicators, packaging_indicator)
    )
    unit_upc = allocate_upc(registry, company_prefix)
    return UPCPair(unit_upc=unit_upc, case_upc=generate_gtin14_from_upc(unit_upc, indicator))


def generate_case_upc_from_parent(
    parent_upc: str,
    case_pack_size: Optional[int] = None,
    indicators: Optional[Mapping[int, str]] = None,
    packaging_indicator: Optional[str] = None,
) -> str:
    """GTIN-14 for a case size that inherits the unit UPC of its parent size."""

    indicator = packaging_indicator_for(case_pack_size, indicators, packaging_indicator)
    return generate_gtin14_from_upc(parent_upc, indicator)
