"""Shared value checks for approval transitions."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from sitestock.domain.errors import InvalidPriceError, InvalidQuantityError


def to_decimal(value: Decimal | int | str) -> Decimal | None:
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def require_positive_quantity(value: Decimal | int | str, *, label: str = "quantity") -> Decimal:
    quantity = to_decimal(value)
    if quantity is None or quantity <= 0:
        raise InvalidQuantityError(f"Valid {label} is required (must be greater than 0)")
    return quantity


def require_price(value: Decimal | int | str) -> Decimal:
    price = to_decimal(value)
    if price is None or price <= 0:
        raise InvalidPriceError("Valid cost is required (must be greater than 0)")
    return price
