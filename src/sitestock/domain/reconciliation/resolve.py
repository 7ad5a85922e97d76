"""Matching of batch items against an inventory snapshot.

The snapshot is read-only here. Inventory entries do not need to store their
normalized key: names are normalized at comparison time. Running ``reconcile``
repeatedly on the same inputs regenerates an equal plan.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from sitestock.domain.model import PlanAction

from .normalize import normalize, same_display_name
from .plan import ReconciliationPlanItem

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal

    from sitestock.domain.model import InventoryEntry

    from .deduplicate import BatchItem
    from .normalize import NormalizedKey

log = logging.getLogger(__name__)


class ReconcileBatch(Protocol):
    """Diff a deduplicated batch against current inventory."""

    def __call__(
        self,
        batch: Sequence[BatchItem],
        snapshot: Sequence[InventoryEntry],
        *,
        require_price: bool,
    ) -> list[ReconciliationPlanItem]: ...


def index_snapshot(snapshot: Sequence[InventoryEntry]) -> dict[NormalizedKey, InventoryEntry]:
    """Map normalized names to entries; the first entry of a key wins."""

    index: dict[NormalizedKey, InventoryEntry] = {}
    for entry in snapshot:
        key = normalize(entry.display_name)
        existing = index.get(key)
        if existing is None:
            index[key] = entry
            continue
        log.warning(
            "Inventory entries %s and %s share normalized name %r; matching the first",
            existing.id,
            entry.id,
            key,
        )
    return index


def reconcile(
    batch: Sequence[BatchItem],
    snapshot: Sequence[InventoryEntry],
    *,
    require_price: bool = False,
) -> list[ReconciliationPlanItem]:
    """Classify every batch item as create or update against ``snapshot``."""

    index = index_snapshot(snapshot)
    return [_plan_item(item, index.get(item.normalized_key), require_price) for item in batch]


def _plan_item(
    item: BatchItem,
    matched: InventoryEntry | None,
    require_price: bool,  # noqa: FBT001
) -> ReconciliationPlanItem:
    if matched is None:
        return ReconciliationPlanItem(
            batch_item=item,
            action=PlanAction.CREATE,
            resulting_quantity=item.quantity,
            needs_pricing=require_price and _is_unpriced(item.unit_price),
        )

    note = None
    if not same_display_name(matched.display_name, item.display_name):
        note = f"Will update '{matched.display_name}'"
    price = item.unit_price if item.unit_price is not None else matched.current_price
    return ReconciliationPlanItem(
        batch_item=item,
        action=PlanAction.UPDATE,
        resulting_quantity=matched.quantity + item.quantity,
        matched_entry=matched,
        name_variation_note=note,
        needs_pricing=require_price and _is_unpriced(price),
    )


def _is_unpriced(price: Decimal | None) -> bool:
    return price is None or price == 0
