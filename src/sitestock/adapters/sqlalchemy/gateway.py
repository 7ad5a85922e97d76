"""Local inventory store: the gateway ports on top of the SQLAlchemy unit of work.

Used when no REST backend is configured. A bulk upsert applies every item in
its own savepoint, so one failing item never undoes the others.
"""

from __future__ import annotations

from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from sitestock.domain.approvals import (
    apply_stock_movement,
    can_create_supply,
    ensure,
    find_stock,
)
from sitestock.domain.clock import utcnow
from sitestock.domain.errors import ApprovalError, CommitError, NotFoundError
from sitestock.domain.model import (
    DEFAULT_CURRENCY,
    DEFAULT_UNIT,
    InventoryEntry,
    Location,
    LocationKind,
    PricingStatus,
)
from sitestock.domain.reconciliation import CommitSummary, CommittedItem, normalize
from sitestock.domain.reconciliation.resolve import index_snapshot

from .unit_of_work import SqlAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from uuid import UUID

    from sitestock.domain.clock import Clock
    from sitestock.domain.model import Actor, StockMovement, SupplyRequest, TransferStatus
    from sitestock.domain.ports.unit_of_work import InventoryUnitOfWork
    from sitestock.domain.reconciliation import BulkUpsertItem, NormalizedKey

    UnitOfWorkFactory = Callable[[], InventoryUnitOfWork]

log = getLogger(__name__)


class _ItemRejectedError(ValueError):
    """A bulk item failed validation inside its savepoint."""


class LocalGateway:
    """Inventory and transfer gateway backed by the local database."""

    def __init__(
        self,
        *,
        unit_of_work_factory: UnitOfWorkFactory | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory: UnitOfWorkFactory = unit_of_work_factory or SqlAlchemyUnitOfWork
        self._clock = clock

    # inventory

    def fetch_snapshot(self, location: Location) -> list[InventoryEntry]:
        with self._uow_factory() as uow:
            return uow.repositories.entries.list_for(location)

    def bulk_upsert(
        self,
        location: Location,
        items: Sequence[BulkUpsertItem],
        *,
        actor: Actor,
        currency: str | None = None,
    ) -> CommitSummary:
        ensure(can_create_supply(actor, location), actor, f"import supplies to {location}")
        summary = CommitSummary()
        with self._uow_factory() as uow:
            index = index_snapshot(uow.repositories.entries.list_for(location))
            for item in items:
                try:
                    with uow.savepoint():
                        committed, entry, created = self._upsert_item(
                            uow, location, index, item, actor=actor, currency=currency
                        )
                except (_ItemRejectedError, ApprovalError, SQLAlchemyError) as exc:
                    log.warning("Import of %r into %s failed: %s", item.item_name, location, exc)
                    summary.errors.append(CommitError(item_name=item.item_name, reason=str(exc)))
                    continue
                (summary.created if created else summary.updated).append(committed)
                if entry.is_pending_pricing:
                    summary.needs_pricing += 1
            uow.commit()
        log.info("%s imported into %s: %s", actor.name, location, summary.message)
        return summary

    def get_entry(self, location: Location, entry_id: UUID) -> InventoryEntry:
        with self._uow_factory() as uow:
            entry = uow.repositories.entries.get(entry_id)
            if entry is None or entry.location != location:
                raise NotFoundError(f"Supply {entry_id} not found at {location}")
            return entry

    def add_entry(self, entry: InventoryEntry) -> InventoryEntry:
        with self._uow_factory() as uow:
            uow.repositories.entries.add(entry)
            uow.commit()
        return entry

    def save_price(self, entry: InventoryEntry) -> InventoryEntry:
        return self._save(entry)

    def save_details(self, entry: InventoryEntry) -> InventoryEntry:
        return self._save(entry)

    # transfers

    def get_request(self, request_id: UUID, *, warehouse_id: UUID | None = None) -> SupplyRequest:
        with self._uow_factory() as uow:
            request = uow.repositories.requests.get(request_id)
            if request is None or (
                warehouse_id is not None and request.warehouse_id != warehouse_id
            ):
                raise NotFoundError(f"Supply request {request_id} not found")
            return request

    def submit_requests(self, requests: Sequence[SupplyRequest]) -> list[SupplyRequest]:
        with self._uow_factory() as uow:
            for request in requests:
                uow.repositories.requests.add(request)
            uow.commit()
        return list(requests)

    def list_requests(
        self,
        *,
        status: TransferStatus | None = None,
        warehouse_id: UUID | None = None,
    ) -> list[SupplyRequest]:
        with self._uow_factory() as uow:
            return uow.repositories.requests.list(status=status, warehouse_id=warehouse_id)

    def approve(
        self,
        request: SupplyRequest,
        movement: StockMovement,
        *,
        actor: Actor,
    ) -> SupplyRequest:
        """Persist the approval and move the stock in one transaction."""

        with self._uow_factory() as uow:
            warehouse = Location(LocationKind.WAREHOUSE, movement.warehouse_id)
            site = Location(LocationKind.SITE, movement.site_id)
            warehouse_entry = find_stock(
                uow.repositories.entries.list_for(warehouse), movement.item_name
            )
            if warehouse_entry is None:
                raise NotFoundError(f"Item {movement.item_name!r} not found in {warehouse}")
            site_entry = find_stock(uow.repositories.entries.list_for(site), movement.item_name)
            updated_site_entry = apply_stock_movement(
                movement,
                warehouse_entry=warehouse_entry,
                site_entry=site_entry,
                actor=actor,
                clock=self._clock,
            )
            if site_entry is None:
                uow.repositories.entries.add(updated_site_entry)
            stored = uow.session.merge(request)
            uow.commit()
        log.info(
            "Moved %s %s of %r from %s to %s",
            movement.quantity,
            movement.unit,
            movement.item_name,
            warehouse,
            site,
        )
        return stored

    def reject(self, request: SupplyRequest, *, actor: Actor) -> SupplyRequest:
        with self._uow_factory() as uow:
            stored = uow.session.merge(request)
            uow.commit()
        log.info("%s rejected supply request %s", actor.name, request.id)
        return stored

    # internals

    def _save(self, entry: InventoryEntry) -> InventoryEntry:
        with self._uow_factory() as uow:
            if uow.repositories.entries.get(entry.id) is None:
                raise NotFoundError(f"Supply {entry.id} not found at {entry.location}")
            stored = uow.session.merge(entry)
            uow.commit()
        return stored

    def _upsert_item(
        self,
        uow: InventoryUnitOfWork,
        location: Location,
        index: dict[NormalizedKey, InventoryEntry],
        item: BulkUpsertItem,
        *,
        actor: Actor,
        currency: str | None,
    ) -> tuple[CommittedItem, InventoryEntry, bool]:
        name = item.item_name.strip()
        if not name:
            raise _ItemRejectedError("Missing item name")
        if not item.quantity.is_finite() or item.quantity <= 0:
            raise _ItemRejectedError("Invalid quantity: must be a positive number")
        price = item.unit_price
        if location.requires_price:
            if price is None:
                raise _ItemRejectedError("Missing price")
            if not price.is_finite() or price < 0:
                raise _ItemRejectedError("Invalid price: must be 0 or positive number")

        now = self._clock()
        key = normalize(name)
        existing = index.get(key)
        if existing is not None:
            previous = existing.quantity
            existing.quantity = previous + item.quantity
            if location.requires_price and price is not None:
                _reprice(existing, price, currency=currency, actor=actor, now=now)
            existing.updated_at = now
            committed = CommittedItem(
                item_name=existing.display_name,
                quantity=existing.quantity,
                unit=existing.unit,
                previous_quantity=previous,
                added_quantity=item.quantity,
                unit_price=price if location.requires_price else None,
                imported_name=name if name != existing.display_name else None,
            )
            return committed, existing, False

        entry = InventoryEntry(
            location_kind=location.kind,
            location_id=location.id,
            display_name=name,
            quantity=item.quantity,
            unit=item.unit.strip() or DEFAULT_UNIT,
            added_by_name=actor.name,
            created_at=now,
            updated_at=now,
        )
        if location.requires_price and price is not None:
            entry.currency = currency or DEFAULT_CURRENCY
            _reprice(entry, price, currency=None, actor=actor, now=now)
        uow.repositories.entries.add(entry)
        index[key] = entry
        committed = CommittedItem(
            item_name=entry.display_name,
            quantity=entry.quantity,
            unit=entry.unit,
            unit_price=price if location.requires_price else None,
        )
        return committed, entry, True


def _reprice(
    entry: InventoryEntry,
    price: Decimal,
    *,
    currency: str | None,
    actor: Actor,
    now: datetime,
) -> None:
    entry.current_price = price
    entry.record_entry_price(price)
    if currency:
        entry.currency = currency
    entry.status = PricingStatus.PRICED if price > Decimal(0) else PricingStatus.PENDING_PRICING
    entry.priced_by_name = actor.name
    entry.priced_at = now


if TYPE_CHECKING:
    from sitestock.domain.ports import InventoryGateway, TransferGateway

    def _gateway_check(gateway: LocalGateway) -> tuple[InventoryGateway, TransferGateway]:
        return gateway, gateway
