from __future__ import annotations

import logging
from datetime import datetime, timedelta
from uuid import uuid4

from retreat_portal.application.dto.auth import SessionStatus
from retreat_portal.application.ports.session_port import SessionPort
from retreat_portal.application.use_cases.common import utcnow
from retreat_portal.domain.entities.auth import ActiveSession, UserType
from retreat_portal.domain.exceptions import StorageUnavailableError


logger = logging.getLogger(__name__)


class SessionTracker:
    """Advisory bookkeeping of logged-in sessions.

    Authentication never depends on these rows. A user with more than one live
    session gets a conflict flag on every request made from a session that is
    not the most recently active one.
    """

    def __init__(self, *, session_port: SessionPort, ttl: timedelta):
        self._session_port = session_port
        self._ttl = ttl

    def open_session(
        self,
        *,
        user_type: UserType,
        user_ref: str,
        now: datetime | None = None,
        ip: str | None = None,
        user_agent: str | None = None,
    ) -> str:
        current = now or utcnow()
        session_id = str(uuid4())
        try:
            removed = self._session_port.delete_expired_sessions(now=current)
            if removed:
                logger.debug("session_tracker: removed expired sessions count=%s", removed)
            self._session_port.create_session(
                session=ActiveSession(
                    session_id=session_id,
                    user_type=user_type,
                    user_ref=user_ref,
                    created_at=current,
                    expires_at=current + self._ttl,
                    last_activity=current,
                    ip_address=ip,
                    user_agent=user_agent,
                )
            )
        except StorageUnavailableError as exc:
            logger.warning("session_tracker: session not stored user=%s error=%s", user_ref, exc)
        return session_id

    def touch(
        self,
        *,
        session_id: str | None,
        user_type: UserType,
        user_ref: str,
        now: datetime | None = None,
    ) -> SessionStatus:
        """Conflict status as seen before this request, then record its activity."""
        if not session_id:
            return SessionStatus(has_conflict=False, active_sessions=0)
        current = now or utcnow()
        try:
            sessions = self._session_port.list_active_sessions(
                user_type=user_type,
                user_ref=user_ref,
                now=current,
            )
            has_conflict = len(sessions) > 1 and sessions[0].session_id != session_id
            self._session_port.touch_session(session_id=session_id, last_activity=current)
        except StorageUnavailableError as exc:
            logger.warning("session_tracker: conflict check skipped user=%s error=%s", user_ref, exc)
            return SessionStatus(has_conflict=False, active_sessions=0)
        if has_conflict:
            logger.info(
                "session_tracker: concurrent sessions user_type=%s user=%s count=%s",
                user_type,
                user_ref,
                len(sessions),
            )
        return SessionStatus(has_conflict=has_conflict, active_sessions=len(sessions))

    def list_active_sessions(
        self,
        *,
        user_type: UserType,
        user_ref: str,
        now: datetime | None = None,
    ) -> list[ActiveSession]:
        try:
            return self._session_port.list_active_sessions(
                user_type=user_type,
                user_ref=user_ref,
                now=now or utcnow(),
            )
        except StorageUnavailableError as exc:
            logger.warning("session_tracker: listing failed user=%s error=%s", user_ref, exc)
            return []

    def close_session(self, *, session_id: str | None) -> None:
        if not session_id:
            return
        try:
            self._session_port.delete_session(session_id=session_id)
        except StorageUnavailableError as exc:
            logger.warning("session_tracker: close skipped session=%s error=%s", session_id, exc)
