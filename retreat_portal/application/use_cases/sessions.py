from __future__ import annotations

from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.entities.auth import ActiveSession, UserType


class LogoutUseCase:
    """Drops the session row. The token itself stays valid until it expires."""

    def __init__(self, *, session_tracker: SessionTracker):
        self._session_tracker = session_tracker

    def execute(self, session_id: str | None) -> None:
        self._session_tracker.close_session(session_id=session_id)


class ListActiveSessionsUseCase:
    def __init__(self, *, session_tracker: SessionTracker):
        self._session_tracker = session_tracker

    def execute(self, *, user_type: UserType, user_ref: str) -> list[ActiveSession]:
        return self._session_tracker.list_active_sessions(user_type=user_type, user_ref=user_ref)
