from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from retreat_portal.api.schemas.common import PaginationMetaResponse


class LoginHistoryResponse(BaseModel):
    id: int
    user_type: str
    user_id: str
    login_time: datetime


class LoginHistoryListResponse(BaseModel):
    data: list[LoginHistoryResponse]
    pagination: PaginationMetaResponse


class HealthResponse(BaseModel):
    status: str
    environment: str
