"""Inventory entities owned by sites and warehouses."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from sitestock.domain.model.entity import Entity
from sitestock.domain.model.enums import LocationKind, PricingStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

DEFAULT_UNIT = "pcs"
DEFAULT_CURRENCY = "₹"


@dataclass(frozen=True, slots=True)
class Location:
    """A site or warehouse holding stock."""

    kind: LocationKind
    id: UUID

    @property
    def requires_price(self) -> bool:
        """Warehouse stock is always imported with prices, site stock is priced later."""
        return self.kind is LocationKind.WAREHOUSE

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass(eq=False, kw_only=True)
class InventoryEntry(Entity):
    """One stock line of a location.

    Two prices are kept apart:
      - ``entry_price``: acquisition cost, written once
      - ``current_price``: present value, changed by pricing and imports
    """

    location_kind: LocationKind
    location_id: UUID

    display_name: str
    quantity: Decimal
    unit: str = DEFAULT_UNIT

    entry_price: Decimal | None = None
    current_price: Decimal | None = None
    currency: str | None = None
    status: PricingStatus = PricingStatus.PENDING_PRICING

    added_by_name: str | None = None
    priced_by_name: str | None = None
    priced_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def location(self) -> Location:
        return Location(self.location_kind, self.location_id)

    @property
    def is_pending_pricing(self) -> bool:
        return self.status is PricingStatus.PENDING_PRICING or not self.current_price

    @property
    def effective_price(self) -> Decimal | None:
        """Price used for valuation: current price, else the entry price."""
        if self.current_price is not None:
            return self.current_price
        return self.entry_price

    def record_entry_price(self, price: Decimal) -> None:
        """Set the acquisition cost unless one is already recorded."""
        if self.entry_price is None:
            self.entry_price = price
