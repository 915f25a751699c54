from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from retreat_portal.domain.entities.group import GroupWithMembers


@dataclass(frozen=True)
class CreateGroupInput:
    name: str
    description: str | None = None
    max_members: int | None = None


@dataclass(frozen=True)
class UpdateGroupInput:
    group_id: int
    changes: dict[str, Any]


@dataclass(frozen=True)
class ListGroupsOutput:
    items: list[GroupWithMembers]
    total: int
    limit: int
    offset: int
