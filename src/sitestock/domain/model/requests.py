"""Warehouse-to-site supply requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from sitestock.domain.model.entity import Entity
from sitestock.domain.model.enums import TransferStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class SupplyRequest(Entity):
    """A site's request for stock held by a warehouse.

    Created by a site actor in ``pending``; only a warehouse actor resolves it.
    """

    site_id: UUID
    warehouse_id: UUID

    item_name: str
    requested_quantity: Decimal
    unit: str

    status: TransferStatus = TransferStatus.PENDING
    transferred_quantity: Decimal = field(default_factory=Decimal)

    requested_by_name: str | None = None
    batch_id: str | None = None

    handled_by_name: str | None = None
    handled_at: datetime | None = None
    reason: str | None = None

    created_at: datetime | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status is not TransferStatus.PENDING


@dataclass(frozen=True, slots=True, kw_only=True)
class StockMovement:
    """Stock an approved request moves from a warehouse to a site."""

    request_id: UUID
    item_name: str
    unit: str
    quantity: Decimal
    warehouse_id: UUID
    site_id: UUID
