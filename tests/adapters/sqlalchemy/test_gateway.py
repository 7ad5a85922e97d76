from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from sitestock.adapters.sqlalchemy import LocalGateway
from sitestock.domain.approvals import approve, reject, set_price
from sitestock.domain.errors import AuthorizationError, NotFoundError
from sitestock.domain.model import PricingStatus, TransferStatus
from sitestock.domain.reconciliation import BulkUpsertItem
from tests.helpers.inventory import (
    OTHER_WAREHOUSE_ID,
    SITE,
    WAREHOUSE,
    admin,
    fixed_clock,
    make_entry,
    make_request,
    supervisor,
    warehouse_manager,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sitestock.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


@pytest.fixture
def gateway(sqlite_unit_of_work: UnitOfWorkFactory) -> LocalGateway:
    return LocalGateway(unit_of_work_factory=sqlite_unit_of_work, clock=fixed_clock)


def _item(
    name: str,
    quantity: str,
    *,
    unit: str = "pcs",
    price: str | None = None,
) -> BulkUpsertItem:
    return BulkUpsertItem(
        item_name=name,
        quantity=Decimal(quantity),
        unit=unit,
        unit_price=Decimal(price) if price is not None else None,
    )


def test_bulk_upsert_creates_and_updates_site_stock(gateway: LocalGateway) -> None:
    gateway.add_entry(make_entry("Cement Bags", 20, unit="bags"))

    summary = gateway.bulk_upsert(
        SITE,
        [_item("cement bag", "10", unit="bags"), _item("Gravel", "4", unit="kg")],
        actor=supervisor(),
    )

    assert summary.ok
    (updated,) = summary.updated
    assert updated.item_name == "Cement Bags"
    assert updated.imported_name == "cement bag"
    assert updated.previous_quantity == Decimal(20)
    assert updated.quantity == Decimal(30)
    (created,) = summary.created
    assert created.item_name == "Gravel"
    assert summary.needs_pricing == 2
    snapshot = gateway.fetch_snapshot(SITE)
    assert [(entry.display_name, entry.quantity) for entry in snapshot] == [
        ("Cement Bags", Decimal(30)),
        ("Gravel", Decimal(4)),
    ]


def test_failing_item_does_not_undo_the_others(gateway: LocalGateway) -> None:
    summary = gateway.bulk_upsert(
        WAREHOUSE,
        [
            _item("Steel Rod", "10", price="85"),
            _item("Sand", "5"),
            _item("  ", "1", price="1"),
            _item("Gravel", "-2", price="3"),
            _item("Bricks", "100", price="-1"),
            _item("Steel Rods", "5", price="90"),
        ],
        actor=warehouse_manager(),
        currency="₹",
    )

    assert [error.reason for error in summary.errors] == [
        "Missing price",
        "Missing item name",
        "Invalid quantity: must be a positive number",
        "Invalid price: must be 0 or positive number",
    ]
    assert [item.item_name for item in summary.created] == ["Steel Rod"]
    assert [item.item_name for item in summary.updated] == ["Steel Rod"]
    (steel,) = gateway.fetch_snapshot(WAREHOUSE)
    assert steel.quantity == Decimal(15)
    assert steel.current_price == Decimal(90)
    assert steel.entry_price == Decimal(85)
    assert steel.currency == "₹"
    assert summary.message == "Import completed: 1 created, 1 updated, 4 errors"


def test_zero_priced_warehouse_import_stays_pending(gateway: LocalGateway) -> None:
    summary = gateway.bulk_upsert(
        WAREHOUSE,
        [_item("Sand", "5", price="0")],
        actor=admin(),
    )

    (sand,) = gateway.fetch_snapshot(WAREHOUSE)
    assert sand.status is PricingStatus.PENDING_PRICING
    assert summary.needs_pricing == 1


def test_bulk_upsert_checks_the_role(gateway: LocalGateway) -> None:
    with pytest.raises(AuthorizationError):
        gateway.bulk_upsert(WAREHOUSE, [_item("Sand", "1", price="1")], actor=supervisor())
    assert gateway.fetch_snapshot(WAREHOUSE) == []


def test_saved_price_is_visible_in_later_snapshots(gateway: LocalGateway) -> None:
    entry = gateway.add_entry(make_entry("Cement Bags", 20))

    stored = gateway.get_entry(SITE, entry.id)
    set_price(admin(), stored, "350", currency="₹")
    gateway.save_price(stored)

    (reloaded,) = gateway.fetch_snapshot(SITE)
    assert reloaded.status is PricingStatus.PRICED
    assert reloaded.current_price == Decimal(350)
    assert reloaded.priced_by_name == "Asha"


def test_entries_are_scoped_to_their_location(gateway: LocalGateway) -> None:
    entry = gateway.add_entry(make_entry("Sand"))

    with pytest.raises(NotFoundError):
        gateway.get_entry(WAREHOUSE, entry.id)
    with pytest.raises(NotFoundError):
        gateway.save_details(make_entry("Ghost"))


def test_approval_moves_stock_in_one_transaction(gateway: LocalGateway) -> None:
    gateway.add_entry(make_entry("Cement Bags", 500, location=WAREHOUSE, unit="bags", price="350"))
    (request,) = gateway.submit_requests([make_request("Cement Bag", 100)])
    manager = warehouse_manager()

    pending = gateway.get_request(request.id, warehouse_id=WAREHOUSE.id)
    outcome = approve(manager, pending, 60, available=Decimal(500))
    assert outcome.movement is not None
    stored = gateway.approve(pending, outcome.movement, actor=manager)

    assert stored.status is TransferStatus.APPROVED
    (warehouse_entry,) = gateway.fetch_snapshot(WAREHOUSE)
    (site_entry,) = gateway.fetch_snapshot(SITE)
    assert warehouse_entry.quantity == Decimal(440)
    assert site_entry.display_name == "Cement Bag"
    assert site_entry.quantity == Decimal(60)
    assert site_entry.current_price == Decimal(350)
    assert site_entry.status is PricingStatus.PRICED
    (approved,) = gateway.list_requests(status=TransferStatus.APPROVED)
    assert approved.transferred_quantity == Decimal(60)
    assert gateway.list_requests(status=TransferStatus.PENDING) == []


def test_approval_without_warehouse_stock_changes_nothing(gateway: LocalGateway) -> None:
    (request,) = gateway.submit_requests([make_request("Cement Bag", 100)])
    manager = warehouse_manager()
    outcome = approve(manager, request, 10)
    assert outcome.movement is not None

    with pytest.raises(NotFoundError):
        gateway.approve(request, outcome.movement, actor=manager)

    stored = gateway.get_request(request.id)
    assert stored.status is TransferStatus.PENDING
    assert gateway.fetch_snapshot(SITE) == []


def test_rejection_is_persisted(gateway: LocalGateway) -> None:
    (request,) = gateway.submit_requests([make_request()])
    manager = warehouse_manager()
    reject(manager, request, "Out of stock")

    gateway.reject(request, actor=manager)

    stored = gateway.get_request(request.id)
    assert stored.status is TransferStatus.REJECTED
    assert stored.reason == "Out of stock"
    with pytest.raises(NotFoundError):
        gateway.get_request(request.id, warehouse_id=OTHER_WAREHOUSE_ID)
