"""Role predicates for inventory mutations.

The transition functions in ``pricing`` and ``transfers`` evaluate these
predicates themselves, so no caller can skip a role check by going around a
presentation layer.

Site inventory follows the pricing workflow: supervisors describe stock,
administrators price it. Warehouse inventory is run by its managers, who
may also price their own stock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitestock.domain.errors import AuthorizationError
from sitestock.domain.model import LocationKind, Role

if TYPE_CHECKING:
    from uuid import UUID

    from sitestock.domain.model import Actor, Location, SupplyRequest


def manages_warehouse(actor: Actor, warehouse_id: UUID) -> bool:
    """A warehouse manager without a warehouse scope manages every warehouse."""

    if actor.role is not Role.WAREHOUSE_MANAGER:
        return False
    return actor.warehouse_id is None or actor.warehouse_id == warehouse_id


def can_set_price(actor: Actor, location: Location | None = None) -> bool:
    """Only administrators price site stock."""

    if actor.role is Role.ADMIN:
        return True
    if location is None or location.kind is LocationKind.SITE:
        return False
    return manages_warehouse(actor, location.id)


def can_edit_details(actor: Actor, location: Location | None = None) -> bool:
    """Only supervisors edit name, quantity and unit of site stock."""

    if location is None or location.kind is LocationKind.SITE:
        return actor.role is Role.SUPERVISOR
    return actor.role is Role.ADMIN or manages_warehouse(actor, location.id)


def can_create_supply(actor: Actor, location: Location | None = None) -> bool:
    if location is None or location.kind is LocationKind.SITE:
        return actor.role in {Role.SUPERVISOR, Role.ADMIN}
    return actor.role is Role.ADMIN or manages_warehouse(actor, location.id)


def can_request_supplies(actor: Actor) -> bool:
    return actor.role is Role.SUPERVISOR


def can_resolve_transfer(actor: Actor, request: SupplyRequest) -> bool:
    """Warehouse managers resolve requests addressed to their warehouse."""

    return manages_warehouse(actor, request.warehouse_id)


def ensure(allowed: bool, actor: Actor, action: str) -> None:  # noqa: FBT001
    """Raise ``AuthorizationError`` unless ``allowed``."""

    if not allowed:
        raise AuthorizationError(f"{actor.role} {actor.name!r} may not {action}")