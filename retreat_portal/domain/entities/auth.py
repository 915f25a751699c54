from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


UserType = Literal["admin", "attendee"]


@dataclass(frozen=True)
class AdminPrincipal:
    user: str
    role: str
    session_id: str | None


@dataclass(frozen=True)
class AttendeePrincipal:
    ref: str
    session_id: str | None


@dataclass(frozen=True)
class ActiveSession:
    session_id: str
    user_type: UserType
    user_ref: str
    created_at: datetime
    expires_at: datetime
    last_activity: datetime
    ip_address: str | None
    user_agent: str | None


@dataclass(frozen=True)
class FailedAttemptSummary:
    count: int
    oldest_attempt_at: datetime | None


@dataclass(frozen=True)
class LoginHistoryEntry:
    id: int
    user_type: UserType
    user_id: str
    login_time: datetime
