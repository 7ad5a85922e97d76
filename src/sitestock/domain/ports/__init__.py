"""Domain port definitions for adapters."""

from __future__ import annotations

from .gateways import InventoryGateway, StockGateway, TransferGateway
from .persistence import InventoryEntryRepository, Repository, SupplyRequestRepository
from .unit_of_work import (
    InventoryRepositories,
    InventoryUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "InventoryEntryRepository",
    "InventoryGateway",
    "InventoryRepositories",
    "InventoryUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "StockGateway",
    "SupplyRequestRepository",
    "TransferGateway",
    "UnitOfWork",
]
