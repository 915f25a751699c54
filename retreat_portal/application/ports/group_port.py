from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from retreat_portal.domain.entities.group import Group, GroupWithMembers


class GroupPort(Protocol):
    def count_groups(self) -> int:
        ...

    def list_groups(self, *, limit: int, offset: int) -> list[GroupWithMembers]:
        ...

    def get_group(self, *, group_id: int) -> Group | None:
        ...

    def get_group_with_members(self, *, group_id: int) -> GroupWithMembers | None:
        ...

    def group_name_exists(self, *, name: str, exclude_id: int | None = None) -> bool:
        ...

    def create_group(
        self,
        *,
        name: str,
        description: str | None,
        max_members: int | None,
        created_at: datetime,
    ) -> int:
        ...

    def update_group(self, *, group_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        ...

    def count_members(self, *, group_id: int) -> int:
        ...

    def delete_group(self, *, group_id: int) -> None:
        ...
