"""Decode import spreadsheets (CSV or Excel) into raw row mappings.

Only the first worksheet of a workbook is read. The first row holds the
headers; every following non-blank row becomes one mapping keyed by header.
"""

from __future__ import annotations

import csv
import logging
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Final

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from sitestock.domain.errors import ValidationError
from sitestock.domain.reconciliation import ColumnFamily, required_families

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)

CSV_SUFFIXES: Final[frozenset[str]] = frozenset({".csv"})
EXCEL_SUFFIXES: Final[frozenset[str]] = frozenset({".xlsx", ".xlsm"})
SUPPORTED_SUFFIXES: Final[tuple[str, ...]] = (*sorted(CSV_SUFFIXES), *sorted(EXCEL_SUFFIXES))

_SNIFF_BYTES: Final[int] = 4096
_CSV_DELIMITERS: Final[str] = ",;\t|"

_TEMPLATE_EXAMPLES: Final[dict[ColumnFamily, tuple[object, ...]]] = {
    ColumnFamily.NAME: ("Cement Bag", "Steel Rod"),
    ColumnFamily.QUANTITY: (50, 120),
    ColumnFamily.UNIT: ("bags", "pcs"),
    ColumnFamily.PRICE: (350, 85.5),
}


def decode_file(path: str | Path) -> list[dict[str, object]]:
    """Decode ``path`` into header-keyed rows; raises ``ValidationError`` when unreadable."""

    file_path = Path(path)
    if not file_path.exists():
        raise ValidationError(f"File not found: {file_path}")
    suffix = file_path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        rows = decode_csv(file_path)
    elif suffix in EXCEL_SUFFIXES:
        rows = decode_excel(file_path)
    else:
        raise ValidationError(
            f"Unsupported file type {suffix or '(none)'!r}; "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    log.debug("Decoded %s rows from %s", len(rows), file_path.name)
    return rows


def decode_csv(path: Path) -> list[dict[str, object]]:
    try:
        with path.open("r", newline="", encoding="utf-8-sig") as handle:
            sample = handle.read(_SNIFF_BYTES)
            handle.seek(0)
            try:
                dialect: type[csv.Dialect] | csv.Dialect = csv.Sniffer().sniff(
                    sample, delimiters=_CSV_DELIMITERS
                )
            except csv.Error:
                dialect = csv.excel
            reader = csv.reader(handle, dialect=dialect)
            return _rows_from_table(reader)
    except (UnicodeDecodeError, csv.Error) as exc:
        raise ValidationError(f"Failed to parse CSV {path.name}: {exc}") from exc


def decode_excel(path: Path) -> list[dict[str, object]]:
    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as exc:
        raise ValidationError(f"Failed to read workbook {path.name}: {exc}") from exc
    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]
        return _rows_from_table(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()


def write_template(path: str | Path, *, require_price: bool = False) -> Path:
    """Write an import template with the canonical headers and two example rows."""

    file_path = Path(path)
    families = required_families(require_price=require_price)
    headers = [family.value for family in families]
    examples = [
        [_TEMPLATE_EXAMPLES[family][index] for family in families]
        for index in range(len(_TEMPLATE_EXAMPLES[ColumnFamily.NAME]))
    ]
    suffix = file_path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        with file_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(headers)
            writer.writerows(examples)
    elif suffix in EXCEL_SUFFIXES:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        if sheet is None:
            sheet = workbook.create_sheet()
        sheet.title = "Supplies"
        sheet.append(headers)
        for example in examples:
            sheet.append(example)
        workbook.save(file_path)
    else:
        raise ValidationError(f"Unsupported template type {suffix or '(none)'!r}")
    log.info("Wrote import template to %s", file_path)
    return file_path


def _rows_from_table(table: Iterable[Sequence[object]]) -> list[dict[str, object]]:
    iterator = iter(table)
    header_row = next(iterator, None)
    if header_row is None:
        return []
    headers = [_header(cell) for cell in header_row]
    rows: list[dict[str, object]] = []
    for values in iterator:
        if all(_is_blank(value) for value in values):
            continue
        row: dict[str, object] = {}
        for index, header in enumerate(headers):
            if header and header not in row:
                row[header] = values[index] if index < len(values) else None
        rows.append(row)
    return rows


def _header(cell: object) -> str:
    return "" if cell is None else str(cell).strip()


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
