from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AnnouncementType = Literal["general", "urgent", "event", "reminder"]
TargetAudience = Literal["all", "vip", "groups"]


@dataclass(frozen=True)
class Announcement:
    id: int
    title: str
    content: str
    type: AnnouncementType
    priority: int
    is_active: bool
    target_audience: TargetAudience
    target_groups: list[int] | None
    author_name: str
    starts_at: datetime | None
    expires_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
