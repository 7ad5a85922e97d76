"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from os import PathLike
from typing import TYPE_CHECKING

from sitestock.adapters.backend import BackendGateway
from sitestock.adapters.sqlalchemy import LocalGateway
from sitestock.adapters.sqlalchemy.unit_of_work import is_started, startup
from sitestock.adapters.tabular import decode_file
from sitestock.config import (
    backend_configured,
    get_backend_config,
    get_import_settings,
)
from sitestock.domain.approvals import (
    TransferOutcome,
    approve,
    can_create_supply,
    create_request_batch,
    create_supply,
    edit_details,
    ensure,
    find_stock,
    order_for,
    reject,
    set_price,
)
from sitestock.domain.errors import NotFoundError, ValidationError
from sitestock.domain.model import DEFAULT_UNIT, Location, LocationKind, TransferStatus
from sitestock.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal
    from pathlib import Path
    from uuid import UUID

    from sitestock.config import ImportSettings
    from sitestock.domain.approvals import PriceChange, RequestLine
    from sitestock.domain.model import Actor, InventoryEntry, SupplyRequest
    from sitestock.domain.ports import StockGateway
    from sitestock.domain.reconciliation import CommitSummary, ImportPreview, RawImportRow


log = getLogger(__name__)


def build_gateway() -> StockGateway:
    """REST backend when ``SITESTOCK_API_URL`` is set, else the local database."""

    if backend_configured():
        config = get_backend_config()
        log.info("Using inventory backend at %s", config.base_url)
        return BackendGateway(config=config)
    if not is_started():
        startup()
    log.info("Using local inventory store")
    return LocalGateway()


# imports


def preview_import(
    source: str | Path | Sequence[RawImportRow],
    location: Location,
    *,
    gateway: StockGateway | None = None,
    settings: ImportSettings | None = None,
) -> ImportPreview:
    """Decode ``source`` and reconcile it against the current stock of ``location``.

    ``source`` is a spreadsheet path or rows that were already decoded.
    Nothing is written.
    """

    effective_gateway = gateway or build_gateway()
    effective_settings = settings or get_import_settings()
    rows = decode_file(source) if isinstance(source, str | PathLike) else list(source)
    snapshot = effective_gateway.fetch_snapshot(location)
    engine = ReconciliationEngine(max_rows=effective_settings.max_rows)
    return engine.preview(rows, snapshot, require_price=location.requires_price)


def commit_import(
    preview: ImportPreview,
    location: Location,
    *,
    actor: Actor,
    currency: str | None = None,
    gateway: StockGateway | None = None,
    settings: ImportSettings | None = None,
) -> CommitSummary:
    """Send a reviewed preview to the gateway; items succeed or fail one by one."""

    ensure(can_create_supply(actor, location), actor, f"import supplies to {location}")
    if preview.is_empty:
        raise ValidationError("No valid items to import")
    effective_gateway = gateway or build_gateway()
    if currency is None and location.requires_price:
        currency = (settings or get_import_settings()).default_currency

    log.info(
        "Committing import to %s: %s new, %s updates",
        location,
        len(preview.creates),
        len(preview.updates),
    )
    summary = effective_gateway.bulk_upsert(
        location,
        preview.bulk_payload(),
        actor=actor,
        currency=currency,
    )
    # the payload is already deduplicated, so merges are only known to the preview
    if not summary.duplicates_merged:
        summary.duplicates_merged = preview.duplicates_merged
    log.info(summary.message)
    return summary


# supplies


def list_supplies(
    actor: Actor,
    location: Location,
    *,
    gateway: StockGateway | None = None,
) -> list[InventoryEntry]:
    effective_gateway = gateway or build_gateway()
    return order_for(actor, effective_gateway.fetch_snapshot(location))


def add_supply(
    actor: Actor,
    location: Location,
    *,
    name: str,
    quantity: Decimal | int | str,
    unit: str = DEFAULT_UNIT,
    price: Decimal | int | str | None = None,
    currency: str | None = None,
    gateway: StockGateway | None = None,
) -> InventoryEntry:
    entry = create_supply(
        actor,
        location,
        name=name,
        quantity=quantity,
        unit=unit,
        price=price,
        currency=currency,
    )
    return (gateway or build_gateway()).add_entry(entry)


def set_supply_price(
    actor: Actor,
    location: Location,
    entry_id: UUID,
    price: Decimal | int | str,
    *,
    currency: str | None = None,
    gateway: StockGateway | None = None,
) -> PriceChange:
    effective_gateway = gateway or build_gateway()
    entry = effective_gateway.get_entry(location, entry_id)
    change = set_price(actor, entry, price, currency=currency)
    saved = effective_gateway.save_price(change.entry)
    return replace(change, entry=saved)


def edit_supply_details(
    actor: Actor,
    location: Location,
    entry_id: UUID,
    *,
    name: str | None = None,
    quantity: Decimal | int | str | None = None,
    unit: str | None = None,
    gateway: StockGateway | None = None,
) -> InventoryEntry:
    effective_gateway = gateway or build_gateway()
    entry = effective_gateway.get_entry(location, entry_id)
    edit_details(actor, entry, name=name, quantity=quantity, unit=unit)
    return effective_gateway.save_details(entry)


# transfers


def request_supplies(
    actor: Actor,
    *,
    site_id: UUID,
    warehouse_id: UUID,
    lines: Sequence[RequestLine],
    gateway: StockGateway | None = None,
) -> list[SupplyRequest]:
    requests = create_request_batch(
        actor,
        site_id=site_id,
        warehouse_id=warehouse_id,
        lines=lines,
    )
    return (gateway or build_gateway()).submit_requests(requests)


def list_supply_requests(
    *,
    warehouse_id: UUID | None = None,
    status: TransferStatus | None = None,
    gateway: StockGateway | None = None,
) -> list[SupplyRequest]:
    effective_gateway = gateway or build_gateway()
    return effective_gateway.list_requests(status=status, warehouse_id=warehouse_id)


def approve_supply_request(
    actor: Actor,
    request_id: UUID,
    transfer_quantity: Decimal | int | str,
    *,
    warehouse_id: UUID | None = None,
    gateway: StockGateway | None = None,
) -> TransferOutcome:
    """Approve a pending request and move the stock from the warehouse."""

    effective_gateway = gateway or build_gateway()
    request = effective_gateway.get_request(
        request_id, warehouse_id=warehouse_id or actor.warehouse_id
    )
    available: Decimal | None = None
    if request.status is TransferStatus.PENDING:
        warehouse = Location(LocationKind.WAREHOUSE, request.warehouse_id)
        stock = find_stock(effective_gateway.fetch_snapshot(warehouse), request.item_name)
        if stock is None:
            raise NotFoundError(f"Item {request.item_name!r} not found in warehouse inventory")
        available = stock.quantity

    outcome = approve(actor, request, transfer_quantity, available=available)
    if outcome.movement is None:
        return outcome
    stored = effective_gateway.approve(outcome.request, outcome.movement, actor=actor)
    return TransferOutcome(request=stored, movement=outcome.movement)


def reject_supply_request(
    actor: Actor,
    request_id: UUID,
    reason: str | None = None,
    *,
    warehouse_id: UUID | None = None,
    gateway: StockGateway | None = None,
) -> TransferOutcome:
    effective_gateway = gateway or build_gateway()
    request = effective_gateway.get_request(
        request_id, warehouse_id=warehouse_id or actor.warehouse_id
    )
    outcome = reject(actor, request, reason)
    if outcome.already_resolved:
        return outcome
    stored = effective_gateway.reject(outcome.request, actor=actor)
    return TransferOutcome(request=stored)
