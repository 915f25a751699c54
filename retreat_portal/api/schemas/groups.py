from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from retreat_portal.api.schemas.common import PaginationMetaResponse


class GroupMemberRefResponse(BaseModel):
    name: str
    ref_number: str


class GroupResponse(BaseModel):
    id: int
    name: str
    description: str | None
    max_members: int | None
    created_at: datetime | None
    updated_at: datetime | None
    member_count: int
    members: list[GroupMemberRefResponse]


class GroupListResponse(BaseModel):
    data: list[GroupResponse]
    pagination: PaginationMetaResponse
