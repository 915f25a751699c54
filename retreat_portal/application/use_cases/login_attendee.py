from __future__ import annotations

import logging

from retreat_portal.application.dto.auth import LoginAttendeeInput, LoginOutput
from retreat_portal.application.ports.attendee_port import AttendeePort
from retreat_portal.application.ports.login_history_port import LoginHistoryPort
from retreat_portal.application.ports.password_hasher_port import PasswordHasherPort
from retreat_portal.application.ports.token_port import TokenPort
from retreat_portal.application.services.rate_limiter import LoginRateLimiter
from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.exceptions import InvalidCredentialsError

from .auth_common import complete_login, enforce_rate_limit
from .common import utcnow


logger = logging.getLogger(__name__)


class LoginAttendeeUseCase:
    def __init__(
        self,
        *,
        attendee_port: AttendeePort,
        login_history_port: LoginHistoryPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        rate_limiter: LoginRateLimiter,
        session_tracker: SessionTracker,
    ):
        self._attendee_port = attendee_port
        self._login_history_port = login_history_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._rate_limiter = rate_limiter
        self._session_tracker = session_tracker

    def execute(self, command: LoginAttendeeInput) -> LoginOutput:
        ref = command.ref.strip()
        now = utcnow()
        enforce_rate_limit(self._rate_limiter, identifier=ref, user_type="attendee", now=now)

        attendee = self._attendee_port.get_attendee_by_ref(ref_number=ref)
        if attendee is None:
            ok, replacement = self._password_hasher.dummy_verify(), None
        else:
            ok, replacement = self._password_hasher.verify_and_update(command.password, attendee.password_hash)

        if not ok:
            self._rate_limiter.record_attempt(ref, "attendee", False, now=now)
            logger.info("login_attendee: rejected ref=%s ip=%s", ref, command.ip)
            raise InvalidCredentialsError("Invalid credentials")

        if replacement:
            self._attendee_port.update_password_hash(attendee_id=attendee.id, password_hash=replacement)
            logger.info("login_attendee: password hash upgraded ref=%s", ref)
        self._attendee_port.update_last_login(attendee_id=attendee.id, logged_in_at=now)

        return complete_login(
            user_type="attendee",
            subject=attendee.ref_number,
            claims={"ref": attendee.ref_number},
            now=now,
            rate_limiter=self._rate_limiter,
            login_history_port=self._login_history_port,
            session_tracker=self._session_tracker,
            token_port=self._token_port,
            user_agent=command.user_agent,
            ip=command.ip,
            name=attendee.name,
        )
