"""Translate inventory backend payloads into domain entities and back.

The backend identifies documents with 24-hex object ids. Domain entities use
UUIDs, so object ids are embedded into the low 96 bits of a UUID and restored
when talking to the backend again. Real UUIDs pass through unchanged.
"""

from __future__ import annotations

from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Final
from uuid import UUID

from sitestock.domain.errors import CommitError
from sitestock.domain.model import (
    DEFAULT_UNIT,
    InventoryEntry,
    LocationKind,
    PricingStatus,
    SupplyRequest,
    TransferStatus,
)
from sitestock.domain.reconciliation import CommitSummary, CommittedItem

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitestock.domain.model import Location
    from sitestock.domain.reconciliation import BulkUpsertItem

    from .schema import (
        ImportedItemPayload,
        ImportResultsPayload,
        SupplyPayload,
        SupplyRequestPayload,
    )

log = getLogger(__name__)

_OBJECT_ID_LENGTH: Final[int] = 24
_OBJECT_ID_PREFIX: Final[str] = "0" * (32 - _OBJECT_ID_LENGTH)

_TRANSFER_STATUS_MAP: Final[dict[str, TransferStatus]] = {
    "pending": TransferStatus.PENDING,
    "approved": TransferStatus.APPROVED,
    "in_transit": TransferStatus.APPROVED,
    "rejected": TransferStatus.REJECTED,
}


def to_uuid(remote_id: str) -> UUID:
    """Map a backend id onto a UUID."""

    value = remote_id.strip()
    if len(value) == _OBJECT_ID_LENGTH:
        try:
            return UUID(hex=_OBJECT_ID_PREFIX + value)
        except ValueError:
            pass
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Unsupported backend id {remote_id!r}") from exc


def to_remote_id(entity_id: UUID) -> str:
    """Inverse of ``to_uuid``."""

    if entity_id.hex.startswith(_OBJECT_ID_PREFIX):
        return entity_id.hex[len(_OBJECT_ID_PREFIX) :]
    return str(entity_id)


def parse_entry(payload: SupplyPayload, location: Location) -> InventoryEntry:
    """Build an ``InventoryEntry`` from a site or warehouse supply."""

    if location.kind is LocationKind.SITE:
        # site supplies keep their priced value in ``cost``
        current_price = payload.current_price
        if current_price is None:
            current_price = payload.cost
        if payload.status == PricingStatus.PRICED.value and current_price:
            status = PricingStatus.PRICED
        else:
            status = PricingStatus.PENDING_PRICING
    else:
        current_price = payload.current_price
        priced = current_price or payload.entry_price
        status = PricingStatus.PRICED if priced else PricingStatus.PENDING_PRICING

    return InventoryEntry(
        id=to_uuid(payload.id),
        location_kind=location.kind,
        location_id=location.id,
        display_name=payload.item_name,
        quantity=payload.quantity,
        unit=payload.unit or DEFAULT_UNIT,
        entry_price=payload.entry_price,
        current_price=current_price,
        currency=payload.currency,
        status=status,
        added_by_name=payload.added_by_name,
        priced_by_name=payload.priced_by_name,
        priced_at=payload.priced_at,
        created_at=payload.created_at,
        updated_at=payload.updated_at,
    )


def parse_request(payload: SupplyRequestPayload) -> SupplyRequest:
    status = _TRANSFER_STATUS_MAP.get(payload.status)
    if status is None:
        log.warning(
            "Unknown supply request status %r on %s; treating as pending",
            payload.status,
            payload.id,
        )
        status = TransferStatus.PENDING
    return SupplyRequest(
        id=to_uuid(payload.id),
        site_id=to_uuid(payload.site_id),
        warehouse_id=to_uuid(payload.warehouse_id),
        item_name=payload.item_name,
        requested_quantity=payload.requested_quantity,
        unit=payload.unit or DEFAULT_UNIT,
        status=status,
        transferred_quantity=payload.transferred_quantity,
        requested_by_name=payload.requested_by_name,
        batch_id=payload.batch_id,
        handled_by_name=payload.handled_by_name,
        handled_at=payload.handled_at,
        reason=payload.reason,
        created_at=payload.created_at,
    )


def parse_import_results(results: ImportResultsPayload) -> CommitSummary:
    """Carry the endpoint's ``importResults`` over unchanged in meaning."""

    return CommitSummary(
        created=[_parse_committed(item) for item in results.created],
        updated=[_parse_committed(item) for item in results.updated],
        errors=[
            CommitError(item_name=error.item_name, reason=error.error, row=error.row)
            for error in results.errors
        ],
        duplicates_merged=results.duplicates_in_file,
        needs_pricing=results.needs_pricing,
    )


def bulk_import_body(
    items: Sequence[BulkUpsertItem],
    location: Location,
    *,
    currency: str | None,
) -> dict[str, object]:
    """Request body for ``POST /{sites|warehouses}/{id}/supplies/bulk-import``."""

    supplies: list[dict[str, object]] = []
    for item in items:
        supply: dict[str, object] = {
            "itemName": item.item_name,
            "quantity": _number(item.quantity),
            "unit": item.unit,
        }
        if location.kind is LocationKind.WAREHOUSE and item.unit_price is not None:
            supply["currentPrice"] = _number(item.unit_price)
        supplies.append(supply)

    body: dict[str, object] = {"supplies": supplies}
    if currency:
        body["currency"] = currency
    return body


def supply_body(entry: InventoryEntry) -> dict[str, object]:
    """Request body for adding or editing a supply."""

    body: dict[str, object] = {
        "itemName": entry.display_name,
        "quantity": _number(entry.quantity),
        "unit": entry.unit,
    }
    if entry.location_kind is LocationKind.WAREHOUSE:
        if entry.entry_price is not None:
            body["entryPrice"] = _number(entry.entry_price)
        if entry.currency:
            body["currency"] = entry.currency
    return body


def price_body(entry: InventoryEntry) -> dict[str, object]:
    """Request body for the site pricing or warehouse price endpoint."""

    price = _number(entry.current_price) if entry.current_price is not None else None
    key = "cost" if entry.location_kind is LocationKind.SITE else "currentPrice"
    body: dict[str, object] = {key: price}
    if entry.currency:
        body["currency"] = entry.currency
    return body


def _parse_committed(item: ImportedItemPayload) -> CommittedItem:
    quantity = item.new_quantity if item.new_quantity is not None else item.quantity
    unit_price = next(
        (
            price
            for price in (item.new_price, item.price, item.current_price, item.entry_price)
            if price is not None
        ),
        None,
    )
    return CommittedItem(
        item_name=item.item_name,
        quantity=quantity if quantity is not None else Decimal(0),
        unit=item.unit or DEFAULT_UNIT,
        previous_quantity=item.old_quantity,
        added_quantity=item.added_quantity,
        unit_price=unit_price,
        imported_name=item.imported_name,
    )


def _number(value: Decimal) -> int | float:
    """JSON number for ``value``; integral values stay integers."""

    if value == value.to_integral_value():
        return int(value)
    return float(value)
