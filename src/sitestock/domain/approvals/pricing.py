"""Pricing workflow for inventory entries.

States: ``pending_pricing`` -> ``priced``. ``priced`` is re-entered whenever
the price changes; it is not terminal. Every transition checks the acting
role itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sitestock.domain.clock import utcnow
from sitestock.domain.errors import InvalidPriceError, ValidationError
from sitestock.domain.model import DEFAULT_UNIT, InventoryEntry, PricingStatus

from ._validation import require_positive_quantity, require_price
from .authorization import can_create_supply, can_edit_details, can_set_price, ensure

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from decimal import Decimal

    from sitestock.domain.clock import Clock
    from sitestock.domain.model import Actor, Location

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceChange:
    """Result of ``set_price``: the entry plus what it looked like before."""

    entry: InventoryEntry
    previous_price: Decimal | None
    previous_status: PricingStatus

    @property
    def was_pending(self) -> bool:
        return self.previous_status is PricingStatus.PENDING_PRICING


def create_supply(
    actor: Actor,
    location: Location,
    *,
    name: str,
    quantity: Decimal | int | str,
    unit: str = DEFAULT_UNIT,
    price: Decimal | int | str | None = None,
    currency: str | None = None,
    clock: Clock = utcnow,
) -> InventoryEntry:
    """Create a new entry for ``location``.

    Site entries start ``pending_pricing`` unless an administrator supplies a
    price. Warehouse entries are always created with their entry price.
    """

    ensure(can_create_supply(actor, location), actor, f"add supplies to {location}")
    display_name = _require_name(name)
    amount = require_positive_quantity(quantity)
    now = clock()
    entry = InventoryEntry(
        location_kind=location.kind,
        location_id=location.id,
        display_name=display_name,
        quantity=amount,
        unit=unit.strip() or DEFAULT_UNIT,
        currency=currency,
        added_by_name=actor.name,
        created_at=now,
        updated_at=now,
    )

    if location.requires_price:
        if price is None:
            raise InvalidPriceError("Warehouse supplies require an entry price")
        _apply_price(entry, require_price(price), currency=currency, actor=actor, now=now)
    elif price is not None:
        ensure(can_set_price(actor, location), actor, "price supplies")
        _apply_price(entry, require_price(price), currency=currency, actor=actor, now=now)

    log.info(
        "%s added %s %s of %r to %s (%s)",
        actor.name,
        amount,
        entry.unit,
        display_name,
        location,
        entry.status,
    )
    return entry


def edit_details(
    actor: Actor,
    entry: InventoryEntry,
    *,
    name: str | None = None,
    quantity: Decimal | int | str | None = None,
    unit: str | None = None,
    clock: Clock = utcnow,
) -> InventoryEntry:
    """Change descriptive fields; price and status stay untouched."""

    ensure(can_edit_details(actor, entry.location), actor, "edit supply details")
    if name is not None:
        entry.display_name = _require_name(name)
    if quantity is not None:
        entry.quantity = require_positive_quantity(quantity)
    if unit is not None and unit.strip():
        entry.unit = unit.strip()
    entry.updated_at = clock()
    return entry


def set_price(
    actor: Actor,
    entry: InventoryEntry,
    price: Decimal | int | str,
    *,
    currency: str | None = None,
    clock: Clock = utcnow,
) -> PriceChange:
    """Price ``entry``: ``pending_pricing`` -> ``priced`` or refresh ``priced``."""

    ensure(can_set_price(actor, entry.location), actor, "set supply prices")
    change = PriceChange(
        entry=entry,
        previous_price=entry.current_price,
        previous_status=entry.status,
    )
    _apply_price(entry, require_price(price), currency=currency, actor=actor, now=clock())
    log.info(
        "%s priced %r at %s %s (was %s)",
        actor.name,
        entry.display_name,
        entry.current_price,
        entry.currency or "",
        change.previous_price if change.previous_price is not None else change.previous_status,
    )
    return change


def order_for(actor: Actor, entries: Iterable[InventoryEntry]) -> list[InventoryEntry]:
    """Administrators see pending entries first; everyone else sees stored order."""

    if not actor.is_admin:
        return list(entries)
    # sorted() is stable, so each group keeps its stored order
    return sorted(entries, key=lambda entry: not entry.is_pending_pricing)


def pending_pricing_count(entries: Iterable[InventoryEntry]) -> int:
    return sum(1 for entry in entries if entry.is_pending_pricing)


def _apply_price(
    entry: InventoryEntry,
    price: Decimal,
    *,
    currency: str | None,
    actor: Actor,
    now: datetime,
) -> None:
    entry.current_price = price
    entry.record_entry_price(price)
    if currency:
        entry.currency = currency
    entry.status = PricingStatus.PRICED
    entry.priced_by_name = actor.name
    entry.priced_at = now
    entry.updated_at = now


def _require_name(name: str) -> str:
    display_name = name.strip()
    if not display_name:
        raise ValidationError("Item name is required")
    return display_name
