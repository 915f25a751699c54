from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from retreat_portal.domain.entities.announcement import Announcement


@dataclass(frozen=True)
class CreateAnnouncementInput:
    title: str
    content: str
    author_name: str
    type: str = "general"
    priority: int = 1
    is_active: bool = True
    target_audience: str = "all"
    target_groups: list[int] | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class UpdateAnnouncementInput:
    announcement_id: int
    changes: dict[str, Any]


@dataclass(frozen=True)
class ListAnnouncementsOutput:
    items: list[Announcement]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class AttendeeAnnouncementOutput:
    announcement: Announcement
    is_new: bool


@dataclass(frozen=True)
class AttendeeAnnouncementsOutput:
    announcements: list[AttendeeAnnouncementOutput]
    user_group: str | None
