from __future__ import annotations

import logging
from datetime import datetime, timedelta

from retreat_portal.application.dto.auth import RateLimitStatus
from retreat_portal.application.ports.login_attempt_port import LoginAttemptPort
from retreat_portal.application.use_cases.common import utcnow
from retreat_portal.domain.entities.auth import UserType
from retreat_portal.domain.exceptions import StorageUnavailableError


logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW = timedelta(minutes=15)
DEFAULT_RETENTION = timedelta(hours=24)


class LoginRateLimiter:
    """Sliding-window limit on failed logins per identifier and user type.

    Only failed attempts count. When the attempt store is unavailable the
    limiter allows the login and logs a warning.
    """

    def __init__(
        self,
        *,
        attempt_port: LoginAttemptPort,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window: timedelta = DEFAULT_WINDOW,
        retention: timedelta = DEFAULT_RETENTION,
    ):
        self._attempt_port = attempt_port
        self._max_attempts = max_attempts
        self._window = window
        self._retention = retention

    def check(self, identifier: str, user_type: UserType, *, now: datetime | None = None) -> RateLimitStatus:
        current = now or utcnow()
        try:
            summary = self._attempt_port.summarize_failed_attempts(
                identifier=identifier,
                user_type=user_type,
                since=current - self._window,
            )
        except StorageUnavailableError as exc:
            logger.warning("rate_limiter: check failed open identifier=%s error=%s", identifier, exc)
            return RateLimitStatus(
                allowed=True,
                remaining_attempts=self._max_attempts,
                reset_time=current + self._window,
            )

        failed = summary.count
        if summary.oldest_attempt_at is not None:
            reset_time = summary.oldest_attempt_at + self._window
        else:
            reset_time = current + self._window
        return RateLimitStatus(
            allowed=failed < self._max_attempts,
            remaining_attempts=max(0, self._max_attempts - failed),
            reset_time=reset_time,
        )

    def record_attempt(
        self,
        identifier: str,
        user_type: UserType,
        success: bool,
        *,
        now: datetime | None = None,
    ) -> None:
        current = now or utcnow()
        try:
            self._attempt_port.record_attempt(
                identifier=identifier,
                user_type=user_type,
                success=success,
                attempted_at=current,
            )
            pruned = self._attempt_port.delete_attempts_before(cutoff=current - self._retention)
        except StorageUnavailableError as exc:
            logger.warning("rate_limiter: record skipped identifier=%s error=%s", identifier, exc)
            return
        if pruned:
            logger.debug("rate_limiter: pruned old attempts count=%s", pruned)

    def clear(self, identifier: str, user_type: UserType) -> None:
        try:
            self._attempt_port.clear_failed_attempts(identifier=identifier, user_type=user_type)
        except StorageUnavailableError as exc:
            logger.warning("rate_limiter: clear skipped identifier=%s error=%s", identifier, exc)
