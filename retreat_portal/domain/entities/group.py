from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Group:
    id: int
    name: str
    description: str | None
    max_members: int | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class GroupMemberRef:
    name: str
    ref_number: str


@dataclass(frozen=True)
class GroupWithMembers:
    group: Group
    members: list[GroupMemberRef]
