"""SQLAlchemy mapping metadata for the inventory domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from sitestock.domain.model import (
    DEFAULT_UNIT,
    InventoryEntry,
    LocationKind,
    PricingStatus,
    SupplyRequest,
    TransferStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DecimalText(TypeDecorator[Decimal]):
    """Exact decimals stored as text (SQLite has no fixed-point type)."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Stored decimal {value!r} is not a number") from exc


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

inventory_entry_table = Table(
    "inventory_entry",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("location_kind", Enum(LocationKind, native_enum=False), nullable=False),
    Column("location_id", UUIDColumnType, nullable=False),
    # stored order of a location's entries
    Column("position", Integer, key="_position", nullable=False, default=0),
    Column("display_name", String, nullable=False),
    Column("quantity", DecimalText, nullable=False),
    Column("unit", String, nullable=False, default=DEFAULT_UNIT),
    Column("entry_price", DecimalText, nullable=True),
    Column("current_price", DecimalText, nullable=True),
    Column("currency", String, nullable=True),
    Column(
        "status",
        Enum(PricingStatus, native_enum=False),
        nullable=False,
        default=PricingStatus.PENDING_PRICING,
    ),
    Column("added_by_name", String, nullable=True),
    Column("priced_by_name", String, nullable=True),
    Column("priced_at", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
    Index("ix_inventory_entry_location", "location_kind", "location_id", "_position"),
)

supply_request_table = Table(
    "supply_request",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("site_id", UUIDColumnType, nullable=False, index=True),
    Column("warehouse_id", UUIDColumnType, nullable=False, index=True),
    Column("position", Integer, key="_position", nullable=False, default=0),
    Column("item_name", String, nullable=False),
    Column("requested_quantity", DecimalText, nullable=False),
    Column("unit", String, nullable=False, default=DEFAULT_UNIT),
    Column(
        "status",
        Enum(TransferStatus, native_enum=False),
        nullable=False,
        default=TransferStatus.PENDING,
    ),
    Column("transferred_quantity", DecimalText, nullable=False, default=Decimal(0)),
    Column("requested_by_name", String, nullable=True),
    Column("batch_id", String, nullable=True),
    Column("handled_by_name", String, nullable=True),
    Column("handled_at", UTCDateTime, nullable=True),
    Column("reason", String, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables (idempotent)."""

    log.info("Starting mappers")

    mapper_registry.map_imperatively(InventoryEntry, inventory_entry_table)
    mapper_registry.map_imperatively(SupplyRequest, supply_request_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
