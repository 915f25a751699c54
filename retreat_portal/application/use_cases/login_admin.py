from __future__ import annotations

import hmac
import logging

from retreat_portal.application.dto.auth import AdminCredentials, LoginAdminInput, LoginOutput
from retreat_portal.application.ports.login_history_port import LoginHistoryPort
from retreat_portal.application.ports.password_hasher_port import PasswordHasherPort
from retreat_portal.application.ports.token_port import TokenPort
from retreat_portal.application.services.rate_limiter import LoginRateLimiter
from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.exceptions import InvalidCredentialsError

from .auth_common import complete_login, enforce_rate_limit
from .common import utcnow


logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def _same(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


class LoginAdminUseCase:
    """Single configured administrator account.

    A configured password hash takes precedence over the plain password.
    """

    def __init__(
        self,
        *,
        credentials: AdminCredentials,
        login_history_port: LoginHistoryPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        rate_limiter: LoginRateLimiter,
        session_tracker: SessionTracker,
    ):
        self._credentials = credentials
        self._login_history_port = login_history_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._rate_limiter = rate_limiter
        self._session_tracker = session_tracker

    def execute(self, command: LoginAdminInput) -> LoginOutput:
        user = command.user.strip()
        now = utcnow()
        enforce_rate_limit(self._rate_limiter, identifier=user, user_type="admin", now=now)

        user_ok = _same(user, self._credentials.user)
        if self._credentials.password_hash:
            password_ok = self._password_hasher.verify(command.password, self._credentials.password_hash)
        else:
            password_ok = _same(command.password, self._credentials.password)

        if not (user_ok and password_ok):
            self._rate_limiter.record_attempt(user, "admin", False, now=now)
            logger.warning("login_admin: rejected user=%s ip=%s", user, command.ip)
            raise InvalidCredentialsError("Invalid credentials")

        return complete_login(
            user_type="admin",
            subject=user,
            claims={"user": user, "role": ADMIN_ROLE},
            now=now,
            rate_limiter=self._rate_limiter,
            login_history_port=self._login_history_port,
            session_tracker=self._session_tracker,
            token_port=self._token_port,
            user_agent=command.user_agent,
            ip=command.ip,
            role=ADMIN_ROLE,
        )
