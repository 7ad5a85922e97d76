"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    WAREHOUSE_MANAGER = "warehouse_manager"
    STAFF = "staff"


class LocationKind(StrEnum):
    """Owner of an inventory: a construction site or a warehouse."""

    SITE = "site"
    WAREHOUSE = "warehouse"


class PricingStatus(StrEnum):
    PENDING_PRICING = "pending_pricing"
    PRICED = "priced"


class TransferStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PlanAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
