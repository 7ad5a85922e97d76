"""Approval state machines: supply pricing and warehouse-to-site transfers."""

from __future__ import annotations

from .authorization import (
    can_create_supply,
    can_edit_details,
    can_request_supplies,
    can_resolve_transfer,
    can_set_price,
    ensure,
    manages_warehouse,
)
from .pricing import (
    PriceChange,
    create_supply,
    edit_details,
    order_for,
    pending_pricing_count,
    set_price,
)
from .transfers import (
    DEFAULT_REJECTION_REASON,
    RequestLine,
    TransferOutcome,
    apply_stock_movement,
    approve,
    create_request,
    create_request_batch,
    find_stock,
    reject,
)

__all__ = [
    "DEFAULT_REJECTION_REASON",
    "PriceChange",
    "RequestLine",
    "TransferOutcome",
    "apply_stock_movement",
    "approve",
    "can_create_supply",
    "can_edit_details",
    "can_request_supplies",
    "can_resolve_transfer",
    "can_set_price",
    "create_request",
    "create_request_batch",
    "create_supply",
    "edit_details",
    "ensure",
    "find_stock",
    "manages_warehouse",
    "order_for",
    "pending_pricing_count",
    "reject",
    "set_price",
]
