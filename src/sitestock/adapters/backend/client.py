"""HTTP gateway to the inventory REST backend."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from sitestock.adapters.http_resilience import ResilientClient
from sitestock.domain.errors import NotFoundError
from sitestock.domain.model import LocationKind
from sitestock.domain.reconciliation import CommitSummary

from .schema import (
    BulkImportResponse,
    ErrorResponse,
    LocationResponse,
    SuppliesResponse,
    SupplyRequestListResponse,
)
from .translator import (
    bulk_import_body,
    parse_entry,
    parse_import_results,
    parse_request,
    price_body,
    supply_body,
    to_remote_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    import httpx
    from pydantic import BaseModel

    from sitestock.config.backend import BackendConfig
    from sitestock.config.http_resilience import ResilienceConfig
    from sitestock.domain.model import (
        Actor,
        InventoryEntry,
        Location,
        StockMovement,
        SupplyRequest,
        TransferStatus,
    )
    from sitestock.domain.ports import InventoryGateway, TransferGateway
    from sitestock.domain.reconciliation import BulkUpsertItem

log = getLogger(__name__)


class BackendAPIError(RuntimeError):
    """Raised when the backend rejects a call or answers with an unexpected payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendGateway:
    """Inventory and transfer gateway backed by the REST API.

    Each public call runs its own event loop and client session; calls are
    independent round-trips.
    """

    def __init__(
        self,
        *,
        config: BackendConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = _with_auth(config)
        self._client_factory = client_factory or ResilientClient

    # inventory

    def fetch_snapshot(self, location: Location) -> list[InventoryEntry]:
        response = asyncio.run(self._call("GET", _location_path(location)))
        payload = _parse(LocationResponse, response)
        return [parse_entry(supply, location) for supply in payload.data.supplies]

    def bulk_upsert(
        self,
        location: Location,
        items: Sequence[BulkUpsertItem],
        *,
        actor: Actor,
        currency: str | None = None,
    ) -> CommitSummary:
        if not items:
            return CommitSummary()
        response = asyncio.run(
            self._call(
                "POST",
                f"{_location_path(location)}/supplies/bulk-import",
                json=bulk_import_body(items, location, currency=currency),
            )
        )
        summary = parse_import_results(_parse(BulkImportResponse, response).import_results)
        log.info(
            "%s committed %s items to %s: %s",
            actor.name,
            len(items),
            location,
            summary.message,
        )
        return summary

    def get_entry(self, location: Location, entry_id: UUID) -> InventoryEntry:
        for entry in self.fetch_snapshot(location):
            if entry.id == entry_id:
                return entry
        raise NotFoundError(f"Supply {entry_id} not found at {location}")

    def add_entry(self, entry: InventoryEntry) -> InventoryEntry:
        location = entry.location
        response = asyncio.run(
            self._call("POST", f"{_location_path(location)}/supplies", json=supply_body(entry))
        )
        supplies = _parse(SuppliesResponse, response).all_supplies()
        if not supplies:
            raise BackendAPIError("Backend did not return the created supply")
        # the backend appends new supplies
        return parse_entry(supplies[-1], location)

    def save_price(self, entry: InventoryEntry) -> InventoryEntry:
        suffix = "pricing" if entry.location_kind is LocationKind.SITE else "price"
        return asyncio.run(self._update_entry_async(entry, suffix=suffix, body=price_body(entry)))

    def save_details(self, entry: InventoryEntry) -> InventoryEntry:
        return asyncio.run(self._update_entry_async(entry, suffix=None, body=supply_body(entry)))

    # transfers

    def get_request(self, request_id: UUID, *, warehouse_id: UUID | None = None) -> SupplyRequest:
        for request in self.list_requests(warehouse_id=warehouse_id):
            if request.id == request_id:
                return request
        raise NotFoundError(f"Supply request {request_id} not found")

    def submit_requests(self, requests: Sequence[SupplyRequest]) -> list[SupplyRequest]:
        if not requests:
            return []
        first = requests[0]
        if any(
            request.site_id != first.site_id or request.warehouse_id != first.warehouse_id
            for request in requests
        ):
            raise ValueError("A request batch must target one site and one warehouse")
        body = {
            "warehouseId": to_remote_id(first.warehouse_id),
            "items": [
                {
                    "itemName": request.item_name,
                    "quantity": float(request.requested_quantity),
                    "unit": request.unit,
                }
                for request in requests
            ],
        }
        path = f"sites/{to_remote_id(first.site_id)}/supply-requests/bulk"
        response = asyncio.run(self._call("POST", path, json=body))
        payload = _parse(SupplyRequestListResponse, response)
        return [parse_request(item) for item in payload.data]

    def list_requests(
        self,
        *,
        status: TransferStatus | None = None,
        warehouse_id: UUID | None = None,
    ) -> list[SupplyRequest]:
        if warehouse_id is None:
            raise ValueError("The backend lists supply requests per warehouse")
        response = asyncio.run(
            self._call(
                "GET",
                "warehouses/supply-requests",
                params={"warehouseId": to_remote_id(warehouse_id)},
            )
        )
        payload = _parse(SupplyRequestListResponse, response)
        requests = [parse_request(item) for item in payload.data]
        if status is None:
            return requests
        return [request for request in requests if request.status is status]

    def approve(
        self,
        request: SupplyRequest,
        movement: StockMovement,
        *,
        actor: Actor,
    ) -> SupplyRequest:
        asyncio.run(
            self._call(
                "POST",
                f"warehouses/supply-requests/{to_remote_id(request.id)}/approve",
                json={"transferQuantity": float(movement.quantity)},
            )
        )
        log.info("%s approved supply request %s via backend", actor.name, request.id)
        return request

    def reject(self, request: SupplyRequest, *, actor: Actor) -> SupplyRequest:
        asyncio.run(
            self._call(
                "POST",
                f"warehouses/supply-requests/{to_remote_id(request.id)}/reject",
                json={"reason": request.reason},
            )
        )
        log.info("%s rejected supply request %s via backend", actor.name, request.id)
        return request

    # async internals

    async def _update_entry_async(
        self,
        entry: InventoryEntry,
        *,
        suffix: str | None,
        body: dict[str, object],
    ) -> InventoryEntry:
        location = entry.location
        path = f"{_location_path(location)}/supplies/{to_remote_id(entry.id)}"
        if suffix:
            path = f"{path}/{suffix}"
        async with self._client_factory(self._resilience) as client:
            await self._send(client, "PUT", path, json=body)
            refreshed = await self._send(client, "GET", _location_path(location))
        for supply in _parse(LocationResponse, refreshed).data.supplies:
            updated = parse_entry(supply, location)
            if updated.id == entry.id:
                return updated
        raise NotFoundError(f"Supply {entry.id} not found at {location}")

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: object = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        async with self._client_factory(self._resilience) as client:
            return await self._send(client, method, path, json=json, params=params)

    async def _send(
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        json: object = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        response = await client.request(method, path, json=json, params=params)
        _raise_for_error(response)
        return response


def _location_path(location: Location) -> str:
    collection = "sites" if location.kind is LocationKind.SITE else "warehouses"
    return f"{collection}/{to_remote_id(location.id)}"


def _with_auth(config: BackendConfig) -> ResilienceConfig:
    headers = dict(config.resilience.default_headers or {})
    headers.setdefault("Accept", "application/json")
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return replace(config.resilience, default_headers=headers)


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        detail = ErrorResponse.model_validate(response.json()).detail
    except ValueError:
        detail = response.text or response.reason_phrase
    log.error("Backend error %s on %s: %s", response.status_code, response.request.url, detail)
    if response.status_code == 404:  # noqa: PLR2004
        raise NotFoundError(detail)
    raise BackendAPIError(detail, status_code=response.status_code)


def _parse[TModel: BaseModel](model: type[TModel], response: httpx.Response) -> TModel:
    try:
        return model.model_validate(response.json())
    except ValueError as exc:
        raise BackendAPIError(
            f"Unexpected backend response payload for {response.request.url}",
            status_code=response.status_code,
        ) from exc


if TYPE_CHECKING:

    def _gateway_check(gateway: BackendGateway) -> tuple[InventoryGateway, TransferGateway]:
        return gateway, gateway
