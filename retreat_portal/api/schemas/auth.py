from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    session_id: str
    name: str | None = None
    role: str | None = None


class LogoutResponse(BaseModel):
    success: bool


class ActiveSessionResponse(BaseModel):
    session_id: str
    created_at: datetime
    expires_at: datetime
    last_activity: datetime
    ip_address: str | None
    user_agent: str | None
    is_current: bool


class ActiveSessionsResponse(BaseModel):
    sessions: list[ActiveSessionResponse]
    total_count: int
