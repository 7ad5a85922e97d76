"""People acting on inventories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sitestock.domain.model.entity import new_id
from sitestock.domain.model.enums import Role

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class Actor:
    """Authenticated user as seen by the domain.

    ``warehouse_id`` scopes a warehouse manager to one warehouse. ``None`` means
    the manager is not bound to a specific warehouse.
    """

    name: str
    role: Role
    id: UUID = field(default_factory=new_id)
    warehouse_id: UUID | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
