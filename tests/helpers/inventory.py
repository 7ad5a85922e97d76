"""Builders for inventory domain objects used across tests."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sitestock.domain.model import (
    Actor,
    InventoryEntry,
    Location,
    LocationKind,
    PricingStatus,
    Role,
    SupplyRequest,
)

SITE_ID = UUID("00000000-0000-0000-0000-0000000000a1")
WAREHOUSE_ID = UUID("00000000-0000-0000-0000-0000000000b1")
OTHER_WAREHOUSE_ID = UUID("00000000-0000-0000-0000-0000000000b2")

SITE = Location(LocationKind.SITE, SITE_ID)
WAREHOUSE = Location(LocationKind.WAREHOUSE, WAREHOUSE_ID)

FIXED_NOW = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_actor(
    role: Role,
    *,
    name: str | None = None,
    warehouse_id: UUID | None = None,
) -> Actor:
    return Actor(name=name or f"{role.value}-user", role=role, warehouse_id=warehouse_id)


def admin() -> Actor:
    return make_actor(Role.ADMIN, name="Asha")


def supervisor() -> Actor:
    return make_actor(Role.SUPERVISOR, name="Ravi")


def warehouse_manager(warehouse_id: UUID | None = WAREHOUSE_ID) -> Actor:
    return make_actor(Role.WAREHOUSE_MANAGER, name="Meena", warehouse_id=warehouse_id)


def make_entry(
    name: str,
    quantity: int | str | Decimal = 10,
    *,
    location: Location = SITE,
    unit: str = "pcs",
    price: int | str | Decimal | None = None,
    currency: str | None = None,
) -> InventoryEntry:
    """Create an entry; a price marks it priced and seeds the entry price."""

    amount = Decimal(price) if price is not None else None
    return InventoryEntry(
        location_kind=location.kind,
        location_id=location.id,
        display_name=name,
        quantity=Decimal(quantity),
        unit=unit,
        entry_price=amount,
        current_price=amount,
        currency=currency,
        status=PricingStatus.PRICED if amount else PricingStatus.PENDING_PRICING,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


def make_request(
    item_name: str = "Cement Bag",
    quantity: int | str | Decimal = 100,
    *,
    unit: str = "bags",
    site_id: UUID = SITE_ID,
    warehouse_id: UUID = WAREHOUSE_ID,
) -> SupplyRequest:
    return SupplyRequest(
        site_id=site_id,
        warehouse_id=warehouse_id,
        item_name=item_name,
        requested_quantity=Decimal(quantity),
        unit=unit,
        requested_by_name="Ravi",
        created_at=FIXED_NOW,
    )
