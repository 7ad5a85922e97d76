"""Ports to the collaborator that owns inventory storage.

The reconciliation and approval core never stores anything itself. A gateway
is implemented either by the REST backend client or by the local SQLAlchemy
store; the application layer only depends on these protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sitestock.domain.model import (
        Actor,
        InventoryEntry,
        Location,
        StockMovement,
        SupplyRequest,
        TransferStatus,
    )
    from sitestock.domain.reconciliation import BulkUpsertItem, CommitSummary


@runtime_checkable
class InventoryGateway(Protocol):
    """Read and mutate the stock of sites and warehouses."""

    def fetch_snapshot(self, location: Location) -> list[InventoryEntry]:
        """Current entries of ``location`` in stored order."""
        ...

    def bulk_upsert(
        self,
        location: Location,
        items: Sequence[BulkUpsertItem],
        *,
        actor: Actor,
        currency: str | None = None,
    ) -> CommitSummary:
        """Apply a flattened plan; every item succeeds or fails on its own."""
        ...

    def get_entry(self, location: Location, entry_id: UUID) -> InventoryEntry:
        """Raise ``NotFoundError`` when ``entry_id`` is not stocked at ``location``."""
        ...

    def add_entry(self, entry: InventoryEntry) -> InventoryEntry: ...

    def save_price(self, entry: InventoryEntry) -> InventoryEntry: ...

    def save_details(self, entry: InventoryEntry) -> InventoryEntry: ...


@runtime_checkable
class TransferGateway(Protocol):
    """Read and resolve warehouse-to-site supply requests."""

    def get_request(self, request_id: UUID, *, warehouse_id: UUID | None = None) -> SupplyRequest:
        """Raise ``NotFoundError`` for unknown requests.

        ``warehouse_id`` narrows the lookup for stores that index requests per warehouse.
        """
        ...

    def submit_requests(self, requests: Sequence[SupplyRequest]) -> list[SupplyRequest]: ...

    def list_requests(
        self,
        *,
        status: TransferStatus | None = None,
        warehouse_id: UUID | None = None,
    ) -> list[SupplyRequest]: ...

    def approve(
        self,
        request: SupplyRequest,
        movement: StockMovement,
        *,
        actor: Actor,
    ) -> SupplyRequest:
        """Persist an approval and execute its stock movement."""
        ...

    def reject(self, request: SupplyRequest, *, actor: Actor) -> SupplyRequest: ...


@runtime_checkable
class StockGateway(InventoryGateway, TransferGateway, Protocol):
    """A single collaborator serving both stock and transfers."""
