from __future__ import annotations

from datetime import datetime
from typing import Protocol

from retreat_portal.domain.entities.auth import LoginHistoryEntry, UserType


class LoginHistoryPort(Protocol):
    def record_login(self, *, user_type: UserType, user_id: str, login_time: datetime) -> None:
        ...

    def count_logins(self) -> int:
        ...

    def list_logins(self, *, limit: int, offset: int) -> list[LoginHistoryEntry]:
        ...
