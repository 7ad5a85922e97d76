"""Transfer workflow for warehouse-to-site supply requests.

States: ``pending`` -> ``approved`` | ``rejected``; both are terminal.

A supervisor files requests for a site. A manager of the addressed warehouse
resolves them. Approval carries an explicit transfer quantity which may be
smaller than the requested one; the resulting ``StockMovement`` is executed by
the storage collaborator (see ``apply_stock_movement``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from sitestock.domain.clock import utcnow
from sitestock.domain.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransitionError,
    ValidationError,
)
from sitestock.domain.model import (
    DEFAULT_CURRENCY,
    DEFAULT_UNIT,
    InventoryEntry,
    LocationKind,
    PricingStatus,
    StockMovement,
    SupplyRequest,
    TransferStatus,
    new_id,
)
from sitestock.domain.reconciliation.normalize import normalize

from ._validation import require_positive_quantity
from .authorization import can_request_supplies, can_resolve_transfer, ensure

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from sitestock.domain.clock import Clock
    from sitestock.domain.model import Actor

log = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestLine:
    """One item of a request batch."""

    item_name: str
    quantity: Decimal | int | str
    unit: str = DEFAULT_UNIT


@dataclass(frozen=True, slots=True, kw_only=True)
class TransferOutcome:
    """Result of resolving a request.

    ``already_resolved`` marks a repeated action on a resolved request; nothing
    changed and ``movement`` is ``None``.
    """

    request: SupplyRequest
    movement: StockMovement | None = None
    already_resolved: bool = False


def create_request(
    actor: Actor,
    *,
    site_id: UUID,
    warehouse_id: UUID,
    item_name: str,
    quantity: Decimal | int | str,
    unit: str = DEFAULT_UNIT,
    batch_id: str | None = None,
    clock: Clock = utcnow,
) -> SupplyRequest:
    ensure(can_request_supplies(actor), actor, "request supplies")
    name = item_name.strip()
    if not name:
        raise ValidationError("Item name is required")
    return SupplyRequest(
        site_id=site_id,
        warehouse_id=warehouse_id,
        item_name=name,
        requested_quantity=require_positive_quantity(quantity),
        unit=unit.strip() or DEFAULT_UNIT,
        requested_by_name=actor.name,
        batch_id=batch_id,
        created_at=clock(),
    )


def create_request_batch(
    actor: Actor,
    *,
    site_id: UUID,
    warehouse_id: UUID,
    lines: Sequence[RequestLine],
    clock: Clock = utcnow,
) -> list[SupplyRequest]:
    """Create one request per line, all sharing a fresh batch id.

    Every line is validated before any request is returned.
    """

    if not lines:
        raise ValidationError("At least one item is required")
    batch_id = f"batch-{new_id().hex}"
    requests = [
        create_request(
            actor,
            site_id=site_id,
            warehouse_id=warehouse_id,
            item_name=line.item_name,
            quantity=line.quantity,
            unit=line.unit,
            batch_id=batch_id,
            clock=clock,
        )
        for line in lines
    ]
    log.info(
        "%s requested %s items from warehouse %s (%s)",
        actor.name,
        len(requests),
        warehouse_id,
        batch_id,
    )
    return requests


def approve(
    actor: Actor,
    request: SupplyRequest,
    transfer_quantity: Decimal | int | str,
    *,
    available: Decimal | None = None,
    clock: Clock = utcnow,
) -> TransferOutcome:
    """Approve ``request`` for ``transfer_quantity`` (partial fulfilment allowed).

    ``available`` is the warehouse stock of the item when the caller knows it.
    """

    ensure(can_resolve_transfer(actor, request), actor, "resolve supply requests")
    if request.status is TransferStatus.APPROVED:
        log.info("Supply request %s already approved", request.id)
        return TransferOutcome(request=request, already_resolved=True)
    if request.status is TransferStatus.REJECTED:
        raise InvalidTransitionError(f"Supply request {request.id} was already rejected")

    quantity = require_positive_quantity(transfer_quantity, label="transfer quantity")
    if quantity > request.requested_quantity:
        raise InvalidQuantityError(
            f"Transfer quantity {quantity} exceeds the requested "
            f"{request.requested_quantity} {request.unit}"
        )
    if available is not None and quantity > available:
        raise InsufficientStockError(
            f"Insufficient quantity. Available: {available} {request.unit}"
        )

    request.status = TransferStatus.APPROVED
    request.transferred_quantity = quantity
    request.handled_by_name = actor.name
    request.handled_at = clock()
    movement = StockMovement(
        request_id=request.id,
        item_name=request.item_name,
        unit=request.unit,
        quantity=quantity,
        warehouse_id=request.warehouse_id,
        site_id=request.site_id,
    )
    log.info(
        "%s approved %s of %s %s %r for site %s",
        actor.name,
        quantity,
        request.requested_quantity,
        request.unit,
        request.item_name,
        request.site_id,
    )
    return TransferOutcome(request=request, movement=movement)


def reject(
    actor: Actor,
    request: SupplyRequest,
    reason: str | None = None,
    *,
    clock: Clock = utcnow,
) -> TransferOutcome:
    """Reject ``request``; nothing is transferred."""

    ensure(can_resolve_transfer(actor, request), actor, "resolve supply requests")
    if request.status is TransferStatus.REJECTED:
        log.info("Supply request %s already rejected", request.id)
        return TransferOutcome(request=request, already_resolved=True)
    if request.status is TransferStatus.APPROVED:
        raise InvalidTransitionError(f"Supply request {request.id} was already approved")

    request.status = TransferStatus.REJECTED
    request.transferred_quantity = Decimal(0)
    request.reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
    request.handled_by_name = actor.name
    request.handled_at = clock()
    log.info("%s rejected supply request %s: %s", actor.name, request.id, request.reason)
    return TransferOutcome(request=request)


def find_stock(entries: Iterable[InventoryEntry], item_name: str) -> InventoryEntry | None:
    """Return the first entry whose normalized name matches ``item_name``."""

    key = normalize(item_name)
    return next((entry for entry in entries if normalize(entry.display_name) == key), None)


def apply_stock_movement(
    movement: StockMovement,
    *,
    warehouse_entry: InventoryEntry,
    site_entry: InventoryEntry | None,
    actor: Actor,
    clock: Clock = utcnow,
) -> InventoryEntry:
    """Move stock from ``warehouse_entry`` to the site; returns the site entry.

    The site entry is created when the site does not stock the item yet. It is
    priced from the warehouse: current price, else entry price, else zero.
    """

    if warehouse_entry.quantity < movement.quantity:
        raise InsufficientStockError(
            f"Insufficient quantity. Available: {warehouse_entry.quantity} {warehouse_entry.unit}"
        )
    now = clock()
    warehouse_entry.quantity -= movement.quantity
    warehouse_entry.updated_at = now

    price = warehouse_entry.current_price or warehouse_entry.entry_price or Decimal(0)
    currency = warehouse_entry.currency or DEFAULT_CURRENCY

    if site_entry is None:
        site_entry = InventoryEntry(
            location_kind=LocationKind.SITE,
            location_id=movement.site_id,
            display_name=movement.item_name,
            quantity=movement.quantity,
            unit=movement.unit,
            entry_price=warehouse_entry.entry_price or Decimal(0),
            current_price=price,
            currency=currency,
            status=PricingStatus.PRICED,
            added_by_name=actor.name,
            priced_by_name=actor.name,
            priced_at=now,
            created_at=now,
            updated_at=now,
        )
        return site_entry

    site_entry.quantity += movement.quantity
    if site_entry.is_pending_pricing or site_entry.current_price != price:
        site_entry.current_price = price
        site_entry.record_entry_price(price)
        site_entry.currency = currency
        site_entry.status = PricingStatus.PRICED
        site_entry.priced_by_name = actor.name
        site_entry.priced_at = now
    site_entry.updated_at = now
    return site_entry
