"""Intra-batch deduplication of canonical records.

Responsibilities of this stage:
- collapse records of one import that share a normalized key
- keep merge provenance (which rows were folded into an item)
- avoid persistence lookups

The first occurrence of a key decides display name and unit. Quantities are
summed. Prices keep the highest value seen, later rows may be corrections.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

from .normalize import normalize

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from decimal import Decimal

    from .normalize import NormalizedKey
    from .records import CanonicalRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchItem:
    """One logical item of an import batch."""

    display_name: str
    quantity: Decimal
    unit: str
    normalized_key: NormalizedKey
    unit_price: Decimal | None = None
    merged_from_multiple_rows: bool = False
    source_rows: tuple[int, ...] = ()
    row_count: int = 1

    @property
    def merged_row_count(self) -> int:
        """Rows folded into this item beyond the first one."""
        return self.row_count - 1


class DeduplicateRecords(Protocol):
    """Collapse duplicate records of one batch."""

    def __call__(self, records: Sequence[CanonicalRecord]) -> list[BatchItem]: ...


def deduplicate(records: Iterable[CanonicalRecord]) -> list[BatchItem]:
    """Merge ``records`` by normalized key, keeping first-occurrence order."""

    items_by_key: dict[NormalizedKey, BatchItem] = {}
    for record in records:
        key = normalize(record.display_name)
        rows = (record.row,) if record.row is not None else ()
        existing = items_by_key.get(key)
        if existing is None:
            items_by_key[key] = BatchItem(
                display_name=record.display_name,
                quantity=record.quantity,
                unit=record.unit,
                normalized_key=key,
                unit_price=record.unit_price,
                source_rows=rows,
            )
            continue
        items_by_key[key] = replace(
            existing,
            quantity=existing.quantity + record.quantity,
            unit_price=_highest_price(existing.unit_price, record.unit_price),
            merged_from_multiple_rows=True,
            source_rows=existing.source_rows + rows,
            row_count=existing.row_count + 1,
        )
    return list(items_by_key.values())


def duplicates_merged(items: Iterable[BatchItem]) -> int:
    """Count of rows absorbed into earlier rows of the same batch."""

    return sum(item.merged_row_count for item in items)


def _highest_price(current: Decimal | None, incoming: Decimal | None) -> Decimal | None:
    if current is None:
        return incoming
    if incoming is None:
        return current
    return max(current, incoming)
