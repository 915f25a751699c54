from __future__ import annotations

from datetime import datetime
from typing import Protocol

from retreat_portal.domain.entities.auth import FailedAttemptSummary, UserType


class LoginAttemptPort(Protocol):
    """Storage for login attempts.

    Implementations raise ``StorageUnavailableError`` when the backing table
    cannot be reached; callers decide whether to fail open.
    """

    def record_attempt(
        self,
        *,
        identifier: str,
        user_type: UserType,
        success: bool,
        attempted_at: datetime,
    ) -> None:
        ...

    def summarize_failed_attempts(
        self,
        *,
        identifier: str,
        user_type: UserType,
        since: datetime,
    ) -> FailedAttemptSummary:
        ...

    def clear_failed_attempts(self, *, identifier: str, user_type: UserType) -> None:
        ...

    def delete_attempts_before(self, *, cutoff: datetime) -> int:
        ...
