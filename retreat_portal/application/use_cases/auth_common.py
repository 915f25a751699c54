from __future__ import annotations

import math
from datetime import datetime

from retreat_portal.application.dto.auth import LoginOutput
from retreat_portal.application.ports.login_history_port import LoginHistoryPort
from retreat_portal.application.ports.token_port import TokenPort
from retreat_portal.application.services.rate_limiter import LoginRateLimiter
from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.domain.entities.auth import UserType
from retreat_portal.domain.exceptions import LoginRateLimitedError


def enforce_rate_limit(
    rate_limiter: LoginRateLimiter,
    *,
    identifier: str,
    user_type: UserType,
    now: datetime,
) -> None:
    status = rate_limiter.check(identifier, user_type, now=now)
    if status.allowed:
        return
    retry_after = max(1, math.ceil((status.reset_time - now).total_seconds()))
    raise LoginRateLimitedError(
        "Too many failed login attempts. Please try again later.",
        retry_after_seconds=retry_after,
    )


def complete_login(
    *,
    user_type: UserType,
    subject: str,
    claims: dict,
    now: datetime,
    rate_limiter: LoginRateLimiter,
    login_history_port: LoginHistoryPort,
    session_tracker: SessionTracker,
    token_port: TokenPort,
    user_agent: str | None,
    ip: str | None,
    name: str | None = None,
    role: str | None = None,
) -> LoginOutput:
    """Bookkeeping shared by every successful login, ending with a signed token."""
    rate_limiter.record_attempt(subject, user_type, True, now=now)
    rate_limiter.clear(subject, user_type)
    login_history_port.record_login(user_type=user_type, user_id=subject, login_time=now)
    session_id = session_tracker.open_session(
        user_type=user_type,
        user_ref=subject,
        now=now,
        ip=ip,
        user_agent=user_agent,
    )
    issued = token_port.issue(token_type=user_type, claims={**claims, "sid": session_id}, now=now)
    return LoginOutput(
        token=issued.token,
        expires_at=issued.expires_at,
        session_id=session_id,
        user_type=user_type,
        subject=subject,
        name=name,
        role=role,
    )
