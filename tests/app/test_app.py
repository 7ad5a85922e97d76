from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from sitestock import app
from sitestock.adapters.backend import BackendGateway
from sitestock.adapters.sqlalchemy import LocalGateway
from sitestock.config import ImportSettings
from sitestock.domain.approvals import RequestLine
from sitestock.domain.errors import (
    AuthorizationError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from sitestock.domain.model import PlanAction, PricingStatus, TransferStatus
from tests.helpers.inventory import (
    SITE,
    SITE_ID,
    WAREHOUSE,
    WAREHOUSE_ID,
    admin,
    make_entry,
    supervisor,
    warehouse_manager,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sitestock.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


@pytest.fixture
def gateway(sqlite_unit_of_work: UnitOfWorkFactory) -> LocalGateway:
    return LocalGateway(unit_of_work_factory=sqlite_unit_of_work)


def test_site_import_from_file_round_trip(gateway: LocalGateway, tmp_path: Path) -> None:
    gateway.add_entry(make_entry("Cement Bags", 20, unit="bags"))
    path = tmp_path / "site.csv"
    path.write_text(
        "Item Name,Quantity,Unit\n"
        "Tomato,5,kg\n"
        "Tomatoes,3,kg\n"
        "cement bag,10,bags\n"
        ",1,pcs\n",
        encoding="utf-8",
    )

    preview = app.preview_import(path, SITE, gateway=gateway, settings=ImportSettings())

    assert [item.action for item in preview] == [PlanAction.CREATE, PlanAction.UPDATE]
    assert preview.duplicates_merged == 1
    assert [error.row for error in preview.invalid_rows] == [5]

    summary = app.commit_import(preview, SITE, actor=supervisor(), gateway=gateway)

    assert summary.message == (
        "Import completed: 1 created, 1 updated, 1 duplicates merged, 0 errors"
    )
    supplies = app.list_supplies(supervisor(), SITE, gateway=gateway)
    assert [(entry.display_name, entry.quantity) for entry in supplies] == [
        ("Cement Bags", Decimal(30)),
        ("Tomato", Decimal(8)),
    ]


def test_warehouse_import_uses_default_currency(gateway: LocalGateway) -> None:
    rows = [{"Item": "Steel Rod", "Qty": 10, "Unit": "pcs", "Price": 85}]
    settings = ImportSettings(default_currency="$")

    preview = app.preview_import(rows, WAREHOUSE, gateway=gateway, settings=settings)
    summary = app.commit_import(
        preview,
        WAREHOUSE,
        actor=warehouse_manager(),
        gateway=gateway,
        settings=settings,
    )

    assert summary.ok
    (steel,) = gateway.fetch_snapshot(WAREHOUSE)
    assert steel.currency == "$"
    assert steel.status is PricingStatus.PRICED


def test_commit_rejects_empty_previews_and_foreign_actors(gateway: LocalGateway) -> None:
    preview = app.preview_import(
        [{"Item": "", "Qty": 1, "Unit": "pcs"}],
        SITE,
        gateway=gateway,
        settings=ImportSettings(),
    )

    with pytest.raises(ValidationError, match="No valid items to import"):
        app.commit_import(preview, SITE, actor=supervisor(), gateway=gateway)
    with pytest.raises(AuthorizationError):
        app.commit_import(preview, SITE, actor=warehouse_manager(), gateway=gateway)


def test_admin_prices_pending_site_supply(gateway: LocalGateway) -> None:
    priced = app.add_supply(admin(), SITE, name="Sand", quantity=5, price="40", gateway=gateway)
    pending = app.add_supply(supervisor(), SITE, name="Cement Bags", quantity=20, gateway=gateway)

    ordered = app.list_supplies(admin(), SITE, gateway=gateway)
    assert [entry.id for entry in ordered] == [pending.id, priced.id]

    change = app.set_supply_price(admin(), SITE, pending.id, "350", currency="₹", gateway=gateway)

    assert change.was_pending
    assert change.entry.status is PricingStatus.PRICED
    assert change.entry.current_price == Decimal(350)
    with pytest.raises(AuthorizationError):
        app.set_supply_price(supervisor(), SITE, pending.id, "360", gateway=gateway)


def test_supervisor_edits_details(gateway: LocalGateway) -> None:
    entry = app.add_supply(supervisor(), SITE, name="Cement", quantity=20, gateway=gateway)

    edited = app.edit_supply_details(
        supervisor(),
        SITE,
        entry.id,
        name="Cement Bags",
        unit="bags",
        gateway=gateway,
    )

    assert edited.display_name == "Cement Bags"
    assert edited.unit == "bags"
    with pytest.raises(NotFoundError):
        app.edit_supply_details(supervisor(), WAREHOUSE, entry.id, name="x", gateway=gateway)


def test_request_approve_and_reject_flow(gateway: LocalGateway) -> None:
    app.add_supply(
        warehouse_manager(),
        WAREHOUSE,
        name="Cement Bags",
        quantity=500,
        unit="bags",
        price="350",
        gateway=gateway,
    )
    cement, sand = app.request_supplies(
        supervisor(),
        site_id=SITE_ID,
        warehouse_id=WAREHOUSE_ID,
        lines=[
            RequestLine(item_name="Cement Bag", quantity=100, unit="bags"),
            RequestLine(item_name="Sand", quantity=5, unit="kg"),
        ],
        gateway=gateway,
    )
    manager = warehouse_manager()

    pending = app.list_supply_requests(
        warehouse_id=WAREHOUSE_ID,
        status=TransferStatus.PENDING,
        gateway=gateway,
    )
    assert [request.id for request in pending] == [cement.id, sand.id]

    outcome = app.approve_supply_request(manager, cement.id, 60, gateway=gateway)
    assert outcome.request.status is TransferStatus.APPROVED
    again = app.approve_supply_request(manager, cement.id, 60, gateway=gateway)
    assert again.already_resolved

    with pytest.raises(NotFoundError, match="not found in warehouse inventory"):
        app.approve_supply_request(manager, sand.id, 5, gateway=gateway)
    rejected = app.reject_supply_request(manager, sand.id, gateway=gateway)

    assert rejected.request.reason == "No reason provided"
    (warehouse_entry,) = gateway.fetch_snapshot(WAREHOUSE)
    (site_entry,) = gateway.fetch_snapshot(SITE)
    assert warehouse_entry.quantity == Decimal(440)
    assert site_entry.quantity == Decimal(60)


def test_approval_is_capped_by_warehouse_stock(gateway: LocalGateway) -> None:
    app.add_supply(
        warehouse_manager(),
        WAREHOUSE,
        name="Steel Rod",
        quantity=30,
        price="85",
        gateway=gateway,
    )
    (request,) = app.request_supplies(
        supervisor(),
        site_id=SITE_ID,
        warehouse_id=WAREHOUSE_ID,
        lines=[RequestLine(item_name="Steel Rods", quantity=50)],
        gateway=gateway,
    )

    with pytest.raises(InsufficientStockError, match="Available: 30"):
        app.approve_supply_request(warehouse_manager(), request.id, 40, gateway=gateway)


def test_build_gateway_prefers_configured_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITESTOCK_API_URL", "http://backend.test/api")

    assert isinstance(app.build_gateway(), BackendGateway)


def test_build_gateway_falls_back_to_local_store(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    del sqlite_unit_of_work
    monkeypatch.delenv("SITESTOCK_API_URL", raising=False)

    assert isinstance(app.build_gateway(), LocalGateway)
