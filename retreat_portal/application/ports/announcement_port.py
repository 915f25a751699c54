from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from retreat_portal.domain.entities.announcement import Announcement


class AnnouncementPort(Protocol):
    def count_announcements(self) -> int:
        ...

    def list_announcements(self, *, limit: int, offset: int) -> list[Announcement]:
        ...

    def list_active_announcements(self) -> list[Announcement]:
        ...

    def get_announcement(self, *, announcement_id: int) -> Announcement | None:
        ...

    def create_announcement(
        self,
        *,
        title: str,
        content: str,
        type: str,
        priority: int,
        is_active: bool,
        target_audience: str,
        target_groups: list[int] | None,
        author_name: str,
        starts_at: datetime | None,
        expires_at: datetime | None,
        created_at: datetime,
    ) -> int:
        ...

    def update_announcement(self, *, announcement_id: int, fields: dict[str, Any], updated_at: datetime) -> None:
        ...

    def delete_announcement(self, *, announcement_id: int) -> None:
        ...
