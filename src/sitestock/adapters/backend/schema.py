"""Pydantic models describing the inventory backend payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _reference_id(value: object) -> object:
    """Populated references arrive as ``{"_id": ..., "siteName": ...}``."""

    if isinstance(value, Mapping):
        mapping_value = cast(Mapping[str, object], value)
        return mapping_value.get("_id", mapping_value.get("id"))
    return value


class BackendBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SupplyPayload(BackendBaseModel):
    id: str = Field(alias="_id")
    item_name: str = Field(alias="itemName")
    quantity: Decimal
    unit: str = "pcs"
    cost: Decimal | None = None
    entry_price: Decimal | None = Field(default=None, alias="entryPrice")
    current_price: Decimal | None = Field(default=None, alias="currentPrice")
    currency: str | None = None
    status: str | None = None
    added_by_name: str | None = Field(default=None, alias="addedByName")
    priced_by_name: str | None = Field(default=None, alias="pricedByName")
    priced_at: datetime | None = Field(default=None, alias="pricedAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    _normalize_currency = field_validator("currency", "status", mode="before")(_blank_to_none)


class LocationPayload(BackendBaseModel):
    id: str = Field(alias="_id")
    supplies: list[SupplyPayload] = Field(default_factory=list["SupplyPayload"])


class LocationResponse(BackendBaseModel):
    success: bool = True
    message: str | None = None
    data: LocationPayload


class SuppliesResponse(BackendBaseModel):
    """Supply mutations answer with the full list or the full location."""

    success: bool = True
    message: str | None = None
    supplies: list[SupplyPayload] | None = None
    data: LocationPayload | None = None

    def all_supplies(self) -> list[SupplyPayload]:
        if self.supplies is not None:
            return self.supplies
        if self.data is not None:
            return self.data.supplies
        return []


class ImportedItemPayload(BackendBaseModel):
    item_name: str = Field(alias="itemName")
    quantity: Decimal | None = None
    unit: str | None = None
    old_quantity: Decimal | None = Field(default=None, alias="oldQuantity")
    added_quantity: Decimal | None = Field(default=None, alias="addedQuantity")
    new_quantity: Decimal | None = Field(default=None, alias="newQuantity")
    entry_price: Decimal | None = Field(default=None, alias="entryPrice")
    current_price: Decimal | None = Field(default=None, alias="currentPrice")
    price: Decimal | None = None
    new_price: Decimal | None = Field(default=None, alias="newPrice")
    imported_name: str | None = Field(default=None, alias="importedName")


class ImportErrorPayload(BackendBaseModel):
    row: int | None = None
    item_name: str = Field(default="Unknown", alias="itemName")
    error: str = "Unknown error"


class ImportResultsPayload(BackendBaseModel):
    created: list[ImportedItemPayload] = Field(default_factory=list["ImportedItemPayload"])
    updated: list[ImportedItemPayload] = Field(default_factory=list["ImportedItemPayload"])
    errors: list[ImportErrorPayload] = Field(default_factory=list["ImportErrorPayload"])
    duplicates_in_file: int = Field(default=0, alias="duplicatesInFile")
    needs_pricing: int = Field(default=0, alias="needsPricing")


class BulkImportResponse(BackendBaseModel):
    success: bool = True
    message: str | None = None
    import_results: ImportResultsPayload = Field(alias="importResults")


class SupplyRequestPayload(BackendBaseModel):
    id: str = Field(alias="_id")
    site_id: str = Field(alias="siteId")
    warehouse_id: str = Field(alias="warehouseId")
    item_name: str = Field(alias="itemName")
    requested_quantity: Decimal = Field(alias="requestedQuantity")
    unit: str = "pcs"
    status: str = "pending"
    transferred_quantity: Decimal = Field(default=Decimal(0), alias="transferredQuantity")
    requested_by_name: str | None = Field(default=None, alias="requestedByName")
    batch_id: str | None = Field(default=None, alias="batchId")
    handled_by_name: str | None = Field(default=None, alias="handledByName")
    handled_at: datetime | None = Field(default=None, alias="handledAt")
    reason: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")

    _unwrap_references = field_validator("site_id", "warehouse_id", mode="before")(_reference_id)


class SupplyRequestListResponse(BackendBaseModel):
    success: bool = True
    message: str | None = None
    data: list[SupplyRequestPayload] = Field(default_factory=list["SupplyRequestPayload"])
    batch_id: str | None = Field(default=None, alias="batchId")


class ErrorResponse(BackendBaseModel):
    success: bool = False
    message: str | None = None
    error: str | None = None

    @property
    def detail(self) -> str:
        if self.message and self.error:
            return f"{self.message}: {self.error}"
        return self.message or self.error or "Unknown backend error"
