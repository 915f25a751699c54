from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header

from retreat_portal.api import errors
from retreat_portal.api.deps import (
    get_any_session_id,
    get_client_ip,
    get_json_body,
    get_login_admin_use_case,
    get_login_attendee_use_case,
    get_logout_use_case,
)
from retreat_portal.api.schemas.auth import LoginResponse, LogoutResponse
from retreat_portal.application.dto.auth import LoginAdminInput, LoginAttendeeInput, LoginOutput
from retreat_portal.application.use_cases.login_admin import LoginAdminUseCase
from retreat_portal.application.use_cases.login_attendee import LoginAttendeeUseCase
from retreat_portal.application.use_cases.sessions import LogoutUseCase
from retreat_portal.application.validation import admin_login_schema, login_schema, validate
from retreat_portal.domain.exceptions import InvalidCredentialsError, LoginRateLimitedError


router = APIRouter()
logger = logging.getLogger(__name__)


def _login_response(output: LoginOutput) -> LoginResponse:
    return LoginResponse(
        token=output.token,
        expires_at=output.expires_at,
        session_id=output.session_id,
        name=output.name,
        role=output.role,
    )


@router.post("/api/login", response_model=LoginResponse)
def login_attendee(
    body: dict = Depends(get_json_body),
    user_agent: str | None = Header(default=None),
    client_ip: str | None = Depends(get_client_ip),
    use_case: LoginAttendeeUseCase = Depends(get_login_attendee_use_case),
):
    errors.ensure_valid(validate(body, login_schema))
    try:
        output = use_case.execute(
            LoginAttendeeInput(
                ref=str(body["ref"]),
                password=str(body["password"]),
                user_agent=user_agent,
                ip=client_ip,
            )
        )
    except (InvalidCredentialsError, LoginRateLimitedError) as exc:
        logger.info("auth_router: attendee login rejected ip=%s reason=%s", client_ip, type(exc).__name__)
        raise errors.from_domain_error(exc) from exc
    return _login_response(output)


@router.post("/api/admin/login", response_model=LoginResponse)
def login_admin(
    body: dict = Depends(get_json_body),
    user_agent: str | None = Header(default=None),
    client_ip: str | None = Depends(get_client_ip),
    use_case: LoginAdminUseCase = Depends(get_login_admin_use_case),
):
    errors.ensure_valid(validate(body, admin_login_schema))
    try:
        output = use_case.execute(
            LoginAdminInput(
                user=str(body["user"]),
                password=str(body["pass"]),
                user_agent=user_agent,
                ip=client_ip,
            )
        )
    except (InvalidCredentialsError, LoginRateLimitedError) as exc:
        logger.warning("auth_router: admin login rejected ip=%s reason=%s", client_ip, type(exc).__name__)
        raise errors.from_domain_error(exc) from exc
    return _login_response(output)


@router.post("/api/logout", response_model=LogoutResponse)
def logout(
    session_id: str | None = Depends(get_any_session_id),
    use_case: LogoutUseCase = Depends(get_logout_use_case),
):
    use_case.execute(session_id)
    return LogoutResponse(success=True)
