from __future__ import annotations

from datetime import datetime
from typing import Protocol

from retreat_portal.domain.entities.auth import ActiveSession, UserType


class SessionPort(Protocol):
    def create_session(self, *, session: ActiveSession) -> None:
        ...

    def list_active_sessions(self, *, user_type: UserType, user_ref: str, now: datetime) -> list[ActiveSession]:
        """Unexpired sessions, most recent ``last_activity`` first."""
        ...

    def touch_session(self, *, session_id: str, last_activity: datetime) -> None:
        ...

    def delete_session(self, *, session_id: str) -> None:
        ...

    def delete_expired_sessions(self, *, now: datetime) -> int:
        ...
