"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from sitestock.adapters.sqlalchemy.mappings import (
    inventory_entry_table,
    supply_request_table,
)
from sitestock.domain.model import InventoryEntry, SupplyRequest

if TYPE_CHECKING:
    import uuid

    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.orm import Session

    from sitestock.domain.model import Location, TransferStatus


def _next_position(
    session: Session,
    table: Table,
    *criteria: ColumnElement[bool],
) -> int:
    stmt = select(func.coalesce(func.max(table.c._position), 0)).where(*criteria)  # noqa: SLF001
    return int(session.execute(stmt).scalar_one()) + 1


class SqlAlchemyInventoryEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: InventoryEntry) -> None:
        # flush pending adds so their positions are counted
        self.session.flush()
        position = _next_position(
            self.session,
            inventory_entry_table,
            inventory_entry_table.c.location_kind == entity.location_kind,
            inventory_entry_table.c.location_id == entity.location_id,
        )
        entity._position = position  # type: ignore[attr-defined]  # noqa: SLF001
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> InventoryEntry | None:
        return self.session.get(InventoryEntry, entity_id)

    def list_for(self, location: Location) -> list[InventoryEntry]:
        stmt = (
            select(InventoryEntry)
            .where(inventory_entry_table.c.location_kind == location.kind)
            .where(inventory_entry_table.c.location_id == location.id)
            .order_by(inventory_entry_table.c._position)  # noqa: SLF001
        )
        return list(self.session.execute(stmt).scalars().all())


class SqlAlchemySupplyRequestRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SupplyRequest) -> None:
        self.session.flush()
        entity._position = _next_position(  # type: ignore[attr-defined]  # noqa: SLF001
            self.session, supply_request_table
        )
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> SupplyRequest | None:
        return self.session.get(SupplyRequest, entity_id)

    def list(
        self,
        *,
        status: TransferStatus | None = None,
        warehouse_id: uuid.UUID | None = None,
        site_id: uuid.UUID | None = None,
    ) -> list[SupplyRequest]:
        stmt = select(SupplyRequest).order_by(supply_request_table.c._position)  # noqa: SLF001
        if status is not None:
            stmt = stmt.where(supply_request_table.c.status == status)
        if warehouse_id is not None:
            stmt = stmt.where(supply_request_table.c.warehouse_id == warehouse_id)
        if site_id is not None:
            stmt = stmt.where(supply_request_table.c.site_id == site_id)
        return list(self.session.execute(stmt).scalars().all())


if TYPE_CHECKING:
    from sitestock.domain.ports.persistence import (
        InventoryEntryRepository,
        SupplyRequestRepository,
    )

    _session_stub = cast("Session", object())
    _entry_repo: InventoryEntryRepository = SqlAlchemyInventoryEntryRepository(_session_stub)
    _request_repo: SupplyRequestRepository = SqlAlchemySupplyRequestRepository(_session_stub)
