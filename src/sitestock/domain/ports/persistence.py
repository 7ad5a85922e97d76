"""Ports for persisting inventory aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sitestock.domain.model import InventoryEntry, SupplyRequest

if TYPE_CHECKING:
    from uuid import UUID

    from sitestock.domain.model import Location, TransferStatus


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class InventoryEntryRepository(Repository[InventoryEntry], Protocol):
    """Persistence contract for inventory entries."""

    def list_for(self, location: Location) -> list[InventoryEntry]: ...


@runtime_checkable
class SupplyRequestRepository(Repository[SupplyRequest], Protocol):
    """Persistence contract for supply requests."""

    def list(
        self,
        *,
        status: TransferStatus | None = None,
        warehouse_id: UUID | None = None,
        site_id: UUID | None = None,
    ) -> list[SupplyRequest]: ...
