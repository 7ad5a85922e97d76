"""Public domain model surface."""

from __future__ import annotations

from sitestock.domain.model.actor import Actor
from sitestock.domain.model.entity import Entity, new_id
from sitestock.domain.model.enums import (
    LocationKind,
    PlanAction,
    PricingStatus,
    Role,
    TransferStatus,
)
from sitestock.domain.model.inventory import (
    DEFAULT_CURRENCY,
    DEFAULT_UNIT,
    InventoryEntry,
    Location,
)
from sitestock.domain.model.requests import StockMovement, SupplyRequest

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    # actors
    "Actor",
    # inventory
    "DEFAULT_CURRENCY",
    "DEFAULT_UNIT",
    "InventoryEntry",
    "Location",
    # transfers
    "StockMovement",
    "SupplyRequest",
    # enums
    "LocationKind",
    "PlanAction",
    "PricingStatus",
    "Role",
    "TransferStatus",
]
