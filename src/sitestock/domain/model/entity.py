"""Identity shared by stock entries and supply requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Ids are assigned on construction, before anything is stored."""

    id: UUID = field(default_factory=new_id)
