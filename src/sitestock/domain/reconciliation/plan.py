"""Reconciliation plan types shared by the reconciler, the review step and commit.

The plan is the contract between:
- the pure preview (mapper, deduplicator, reconciler)
- the human review of proposed creates/updates
- the collaborator that commits the flattened bulk payload

Keeping this model explicit prevents implicit coupling between these phases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from sitestock.domain.errors import CommitError, ReconciliationError, RowError
from sitestock.domain.model import InventoryEntry, PlanAction

from .deduplicate import BatchItem, duplicates_merged

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationPlanItem:
    """Proposed change for one batch item."""

    batch_item: BatchItem
    action: PlanAction
    resulting_quantity: Decimal
    matched_entry: InventoryEntry | None = None
    name_variation_note: str | None = None
    needs_pricing: bool = False

    def __post_init__(self) -> None:
        if (self.action is PlanAction.UPDATE) != (self.matched_entry is not None):
            raise ReconciliationError(
                f"Plan item {self.batch_item.display_name!r}: action {self.action} "
                "does not agree with the matched entry"
            )
        expected = self.batch_item.quantity
        if self.matched_entry is not None:
            expected += self.matched_entry.quantity
        if self.resulting_quantity != expected:
            raise ReconciliationError(
                f"Plan item {self.batch_item.display_name!r}: resulting quantity "
                f"{self.resulting_quantity} != {expected}"
            )

    @property
    def added_quantity(self) -> Decimal:
        return self.batch_item.quantity

    @property
    def existing_quantity(self) -> Decimal:
        if self.matched_entry is None:
            return Decimal(0)
        return self.matched_entry.quantity


@dataclass(frozen=True, slots=True, kw_only=True)
class BulkUpsertItem:
    """One entry of the flattened payload sent to the bulk-upsert endpoint."""

    item_name: str
    quantity: Decimal
    unit: str
    unit_price: Decimal | None = None


@dataclass(slots=True)
class ImportPreview:
    """Reviewable result of reconciling one import against a snapshot."""

    items: list[ReconciliationPlanItem] = field(default_factory=list["ReconciliationPlanItem"])
    invalid_rows: list[RowError] = field(default_factory=list["RowError"])
    require_price: bool = False

    def __iter__(self) -> Iterator[ReconciliationPlanItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def creates(self) -> list[ReconciliationPlanItem]:
        return [item for item in self.items if item.action is PlanAction.CREATE]

    @property
    def updates(self) -> list[ReconciliationPlanItem]:
        return [item for item in self.items if item.action is PlanAction.UPDATE]

    @property
    def needs_pricing_count(self) -> int:
        return sum(1 for item in self.items if item.needs_pricing)

    @property
    def duplicates_merged(self) -> int:
        return duplicates_merged(item.batch_item for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def bulk_payload(self) -> list[BulkUpsertItem]:
        """Flatten the plan into the payload the bulk-upsert endpoint expects.

        Quantities are the imported deltas; the endpoint adds them to stock.
        """

        return [
            BulkUpsertItem(
                item_name=item.batch_item.display_name,
                quantity=item.batch_item.quantity,
                unit=item.batch_item.unit,
                unit_price=item.batch_item.unit_price if self.require_price else None,
            )
            for item in self.items
        ]


@dataclass(frozen=True, slots=True, kw_only=True)
class CommittedItem:
    """An item the commit created or updated."""

    item_name: str
    quantity: Decimal
    unit: str
    previous_quantity: Decimal | None = None
    added_quantity: Decimal | None = None
    unit_price: Decimal | None = None
    imported_name: str | None = None


@dataclass(slots=True)
class CommitSummary:
    """Outcome of a bulk upsert; partial success is expected."""

    created: list[CommittedItem] = field(default_factory=list["CommittedItem"])
    updated: list[CommittedItem] = field(default_factory=list["CommittedItem"])
    errors: list[CommitError] = field(default_factory=list["CommitError"])
    duplicates_merged: int = 0
    needs_pricing: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        parts = [f"{len(self.created)} created", f"{len(self.updated)} updated"]
        if self.duplicates_merged:
            parts.append(f"{self.duplicates_merged} duplicates merged")
        parts.append(f"{len(self.errors)} errors")
        return "Import completed: " + ", ".join(parts)
