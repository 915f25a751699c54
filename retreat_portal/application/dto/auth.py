from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from retreat_portal.domain.entities.auth import UserType


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class LoginAttendeeInput:
    ref: str
    password: str
    user_agent: str | None
    ip: str | None


@dataclass(frozen=True)
class LoginAdminInput:
    user: str
    password: str
    user_agent: str | None
    ip: str | None


@dataclass(frozen=True)
class LoginOutput:
    token: str
    expires_at: datetime
    session_id: str
    user_type: UserType
    subject: str
    name: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class AdminCredentials:
    user: str
    password: str
    password_hash: str | None


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    remaining_attempts: int
    reset_time: datetime


@dataclass(frozen=True)
class SessionStatus:
    has_conflict: bool
    active_sessions: int
