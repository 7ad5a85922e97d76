"""Mapping of decoded spreadsheet rows onto canonical supply records.

Spreadsheets arrive with whatever headers their authors chose. Each canonical
field accepts an ordered list of header aliases; the first alias holding a
non-empty value wins. Structural problems (missing column families, empty or
oversized files) abort the import. Problems with a single row only skip that
row and are reported back as ``RowError`` entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Protocol

from sitestock.domain.errors import (
    EmptyImportError,
    ImportTooLargeError,
    MissingColumnsError,
    RowError,
)
from sitestock.domain.model import DEFAULT_UNIT

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

type RawImportRow = Mapping[str, object]

DEFAULT_MAX_IMPORT_ROWS: Final[int] = 1000
# header row + 1-based spreadsheet numbering
FIRST_DATA_ROW: Final[int] = 2

log = logging.getLogger(__name__)


class ColumnFamily(StrEnum):
    """Canonical field a group of header aliases maps onto."""

    NAME = "Item Name"
    QUANTITY = "Quantity"
    UNIT = "Unit"
    PRICE = "Price"


COLUMN_ALIASES: Final[dict[ColumnFamily, tuple[str, ...]]] = {
    ColumnFamily.NAME: ("itemName", "Item Name", "item_name", "Item", "Name", "Product"),
    ColumnFamily.QUANTITY: ("quantity", "Quantity", "Qty", "qty", "Amount"),
    ColumnFamily.UNIT: ("unit", "Unit", "Units", "UOM"),
    ColumnFamily.PRICE: (
        "entryPrice",
        "Entry Price",
        "Price",
        "price",
        "Current Price",
        "current_price",
        "Unit Price",
        "unit_price",
        "Cost",
        "cost",
    ),
}

_REQUIRED_FAMILIES: Final[tuple[ColumnFamily, ...]] = (
    ColumnFamily.NAME,
    ColumnFamily.QUANTITY,
    ColumnFamily.UNIT,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalRecord:
    """One valid import row in canonical form."""

    display_name: str
    quantity: Decimal
    unit: str = DEFAULT_UNIT
    unit_price: Decimal | None = None
    row: int | None = None

    def __post_init__(self) -> None:
        if not self.display_name.strip():
            raise ValueError("CanonicalRecord requires a non-empty display name")
        if not self.quantity.is_finite() or self.quantity <= 0:
            raise ValueError("CanonicalRecord requires a positive quantity")


@dataclass(slots=True)
class MappingResult:
    """Valid records in source order plus the rows that were skipped."""

    records: list[CanonicalRecord] = field(default_factory=list["CanonicalRecord"])
    invalid_rows: list[RowError] = field(default_factory=list["RowError"])


class MapRecords(Protocol):
    """Turn decoded rows into canonical records."""

    def __call__(
        self,
        rows: Sequence[RawImportRow],
        *,
        require_price: bool,
    ) -> MappingResult: ...


def required_families(*, require_price: bool) -> tuple[ColumnFamily, ...]:
    if require_price:
        return (*_REQUIRED_FAMILIES, ColumnFamily.PRICE)
    return _REQUIRED_FAMILIES


def missing_column_families(
    headers: Sequence[str],
    *,
    require_price: bool,
) -> list[ColumnFamily]:
    """Return the required families none of whose aliases appear in ``headers``."""

    present = set(headers)
    return [
        family
        for family in required_families(require_price=require_price)
        if not present.intersection(COLUMN_ALIASES[family])
    ]


def map_records(
    rows: Sequence[RawImportRow],
    *,
    require_price: bool,
    max_rows: int = DEFAULT_MAX_IMPORT_ROWS,
) -> MappingResult:
    """Validate ``rows`` and extract canonical records.

    Raises ``ValidationError`` subclasses before touching any row when the
    batch is empty, too large, or its first row lacks a required column family.
    """

    if not rows:
        raise EmptyImportError
    if len(rows) > max_rows:
        raise ImportTooLargeError(rows=len(rows), max_rows=max_rows)

    headers = [str(header) for header in rows[0]]
    missing = missing_column_families(headers, require_price=require_price)
    if missing:
        raise MissingColumnsError([family.value for family in missing], found_columns=headers)

    result = MappingResult()
    for index, raw in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        record_or_error = _map_row(raw, row=row_number, require_price=require_price)
        if isinstance(record_or_error, RowError):
            result.invalid_rows.append(record_or_error)
            continue
        result.records.append(record_or_error)

    if result.invalid_rows:
        log.info(
            "Skipped %s of %s import rows (first: row %s, %s)",
            len(result.invalid_rows),
            len(rows),
            result.invalid_rows[0].row,
            result.invalid_rows[0].reason,
        )
    return result


def _map_row(raw: RawImportRow, *, row: int, require_price: bool) -> CanonicalRecord | RowError:
    name = _first_value(raw, ColumnFamily.NAME)
    if name is None:
        return RowError(row=row, reason="Missing item name")

    quantity = _parse_decimal(_first_value(raw, ColumnFamily.QUANTITY))
    if quantity is None or quantity <= 0:
        return RowError(row=row, reason="Invalid or missing quantity")

    unit = _first_value(raw, ColumnFamily.UNIT) or DEFAULT_UNIT

    unit_price: Decimal | None = None
    if require_price:
        price_text = _first_value(raw, ColumnFamily.PRICE)
        if price_text is None:
            return RowError(row=row, reason="Missing price")
        unit_price = _parse_decimal(price_text)
        if unit_price is None or unit_price < 0:
            return RowError(row=row, reason="Invalid price (must be 0 or positive)")

    return CanonicalRecord(
        display_name=name,
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        row=row,
    )


def _first_value(raw: RawImportRow, family: ColumnFamily) -> str | None:
    for alias in COLUMN_ALIASES[family]:
        value = raw.get(alias)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _parse_decimal(text: str | None) -> Decimal | None:
    if text is None:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value
