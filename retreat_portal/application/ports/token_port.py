from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from retreat_portal.application.dto.auth import IssuedToken
from retreat_portal.domain.entities.auth import UserType


class TokenPort(Protocol):
    def issue(self, *, token_type: UserType, claims: dict[str, Any], now: datetime) -> IssuedToken:
        ...

    def verify(self, *, token: str, token_type: UserType, now: datetime | None = None) -> dict[str, Any] | None:
        ...
