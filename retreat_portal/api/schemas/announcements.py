from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from retreat_portal.api.schemas.common import PaginationMetaResponse


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    type: str
    priority: int
    is_active: bool
    target_audience: str
    target_groups: list[int] | None
    author_name: str
    starts_at: datetime | None
    expires_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None


class AnnouncementListResponse(BaseModel):
    data: list[AnnouncementResponse]
    pagination: PaginationMetaResponse


class AttendeeAnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    type: str
    priority: int
    author_name: str
    created_at: datetime | None
    starts_at: datetime | None
    expires_at: datetime | None
    is_new: bool


class AttendeeAnnouncementsResponse(BaseModel):
    announcements: list[AttendeeAnnouncementResponse]
    user_group: str | None
    total_count: int
