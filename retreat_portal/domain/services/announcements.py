from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from retreat_portal.domain.entities.announcement import Announcement


VIP_GROUP_NAME = "VIP Group"
NEW_ANNOUNCEMENT_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class Badge:
    text: str
    css_class: str
    icon: str


_TYPE_BADGES = {
    "general": Badge("General", "badge-secondary", "fas fa-info-circle"),
    "urgent": Badge("Urgent", "badge-warning", "fas fa-exclamation-triangle"),
    "event": Badge("Event", "badge-primary", "fas fa-calendar"),
    "reminder": Badge("Reminder", "badge-success", "fas fa-clock"),
}


def is_live(announcement: Announcement, *, now: datetime) -> bool:
    if not announcement.is_active:
        return False
    if announcement.starts_at is not None and announcement.starts_at > now:
        return False
    if announcement.expires_at is not None and announcement.expires_at <= now:
        return False
    return True


def is_visible_to(
    announcement: Announcement,
    *,
    group_id: int | None,
    group_name: str | None,
) -> bool:
    audience = announcement.target_audience
    if audience == "all":
        return True
    if audience == "vip":
        return group_name == VIP_GROUP_NAME
    if audience == "groups":
        if group_id is None or not announcement.target_groups:
            return False
        return group_id in announcement.target_groups
    return False


def is_new(created_at: datetime | None, *, now: datetime) -> bool:
    if created_at is None:
        return False
    return now - created_at <= NEW_ANNOUNCEMENT_WINDOW


def type_badge(announcement_type: str) -> Badge:
    return _TYPE_BADGES.get(announcement_type, _TYPE_BADGES["general"])


def priority_badge(priority: int) -> Badge:
    if priority >= 4:
        return Badge("High Priority", "badge-warning", "fas fa-exclamation")
    if priority >= 3:
        return Badge("Normal", "badge-secondary", "fas fa-info")
    return Badge("Low Priority", "badge-secondary", "fas fa-info")


def select_for_attendee(
    announcements: list[Announcement],
    *,
    group_id: int | None,
    group_name: str | None,
    now: datetime,
) -> list[Announcement]:
    """Live announcements the attendee may see, highest priority first, newest first within a priority."""
    visible = [
        item
        for item in announcements
        if is_live(item, now=now) and is_visible_to(item, group_id=group_id, group_name=group_name)
    ]
    epoch = datetime.min.replace(tzinfo=now.tzinfo)
    return sorted(
        visible,
        key=lambda item: (item.priority, item.created_at or epoch),
        reverse=True,
    )
