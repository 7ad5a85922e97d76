"""SQLAlchemy adapter package for the local inventory store."""

from __future__ import annotations

from .gateway import LocalGateway
from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyInventoryEntryRepository, SqlAlchemySupplyRequestRepository
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "LocalGateway",
    "SqlAlchemyInventoryEntryRepository",
    "SqlAlchemySupplyRequestRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
