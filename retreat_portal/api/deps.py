from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, Header, Request, Response

from retreat_portal.api import errors
from retreat_portal.application.dto.auth import AdminCredentials
from retreat_portal.application.services.rate_limiter import LoginRateLimiter
from retreat_portal.application.services.session_tracker import SessionTracker
from retreat_portal.application.use_cases.announcements import (
    CreateAnnouncementUseCase,
    DeleteAnnouncementUseCase,
    GetAnnouncementUseCase,
    ListAnnouncementsUseCase,
    ListAttendeeAnnouncementsUseCase,
    UpdateAnnouncementUseCase,
)
from retreat_portal.application.use_cases.attendees import (
    CreateAttendeeUseCase,
    DeleteAttendeeUseCase,
    GetAttendeeUseCase,
    ListAttendeesUseCase,
    UpdateAttendeeUseCase,
)
from retreat_portal.application.use_cases.get_me import GetMeUseCase
from retreat_portal.application.use_cases.groups import (
    CreateGroupUseCase,
    DeleteGroupUseCase,
    GetGroupUseCase,
    ListGroupsUseCase,
    UpdateGroupUseCase,
)
from retreat_portal.application.use_cases.list_login_history import ListLoginHistoryUseCase
from retreat_portal.application.use_cases.login_admin import LoginAdminUseCase
from retreat_portal.application.use_cases.login_attendee import LoginAttendeeUseCase
from retreat_portal.application.use_cases.rooms import (
    CreateRoomUseCase,
    DeleteRoomUseCase,
    GetRoomUseCase,
    ListRoomsUseCase,
    UpdateRoomUseCase,
)
from retreat_portal.application.use_cases.sessions import ListActiveSessionsUseCase, LogoutUseCase
from retreat_portal.domain.entities.auth import AdminPrincipal, AttendeePrincipal
from retreat_portal.infrastructure.db.engine import get_engine
from retreat_portal.infrastructure.db.repositories.announcements_repository import SqlAnnouncementsRepository
from retreat_portal.infrastructure.db.repositories.attendees_repository import SqlAttendeesRepository
from retreat_portal.infrastructure.db.repositories.groups_repository import SqlGroupsRepository
from retreat_portal.infrastructure.db.repositories.login_attempts_repository import SqlLoginAttemptsRepository
from retreat_portal.infrastructure.db.repositories.login_history_repository import SqlLoginHistoryRepository
from retreat_portal.infrastructure.db.repositories.rooms_repository import SqlRoomsRepository
from retreat_portal.infrastructure.db.repositories.sessions_repository import SqlSessionsRepository
from retreat_portal.infrastructure.security.password_hasher import PasswordHasher
from retreat_portal.infrastructure.security.token_service import HmacTokenService
from retreat_portal.shared.config import DEV_TOKEN_SECRET, get_settings
from retreat_portal.shared.pagination import PaginationParams, parse_pagination_params


logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"
SESSION_CONFLICT_HEADER = "X-Session-Conflict"


def _get_db_engine():
    return get_engine(get_settings().database_url)


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _build_token_service(admin_secret: str, attendee_secret: str, ttl_seconds: int) -> HmacTokenService:
    return HmacTokenService(admin_secret=admin_secret, attendee_secret=attendee_secret, ttl_seconds=ttl_seconds)


def get_token_service() -> HmacTokenService:
    settings = get_settings()
    admin_secret = settings.token_secret_for("admin")
    attendee_secret = settings.token_secret_for("attendee")
    if not admin_secret or not attendee_secret:
        logger.error("deps: token secret missing environment=%s", settings.environment)
        raise errors.internal("Server configuration error")
    if DEV_TOKEN_SECRET in (admin_secret, attendee_secret):
        logger.warning("deps: using the development token secret; set JWT_SECRET")
    return _build_token_service(admin_secret, attendee_secret, settings.token_ttl_seconds)


def get_rate_limiter() -> LoginRateLimiter:
    settings = get_settings()
    return LoginRateLimiter(
        attempt_port=SqlLoginAttemptsRepository(_get_db_engine()),
        max_attempts=settings.login_max_failed_attempts,
        window=timedelta(minutes=settings.login_window_minutes),
        retention=timedelta(hours=settings.login_attempt_retention_hours),
    )


def get_session_tracker() -> SessionTracker:
    settings = get_settings()
    return SessionTracker(
        session_port=SqlSessionsRepository(_get_db_engine()),
        ttl=timedelta(seconds=settings.session_ttl_seconds),
    )


def get_pagination(request: Request) -> PaginationParams:
    return parse_pagination_params(request.query_params)


def get_json_body(payload: Any = Body(default=None)) -> dict:
    if not isinstance(payload, dict):
        raise errors.validation({"body": "Request body must be a JSON object"})
    return payload


def get_client_ip(request: Request, x_forwarded_for: str | None = Header(default=None)) -> str | None:
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip() or None
    return request.client.host if request.client else None


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise errors.unauthorized(INVALID_TOKEN_MESSAGE)
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise errors.unauthorized(INVALID_TOKEN_MESSAGE)
    return token


def _flag_conflict(response: Response, has_conflict: bool) -> None:
    if has_conflict:
        response.headers[SESSION_CONFLICT_HEADER] = "true"


def get_current_admin(
    response: Response,
    authorization: str | None = Header(default=None),
    token_service: HmacTokenService = Depends(get_token_service),
    session_tracker: SessionTracker = Depends(get_session_tracker),
) -> AdminPrincipal:
    payload = token_service.verify(token=_bearer_token(authorization), token_type="admin")
    if payload is None or not isinstance(payload.get("user"), str):
        raise errors.unauthorized(INVALID_TOKEN_MESSAGE)
    session_id = payload.get("sid")
    status = session_tracker.touch(session_id=session_id, user_type="admin", user_ref=payload["user"])
    _flag_conflict(response, status.has_conflict)
    return AdminPrincipal(user=payload["user"], role=payload.get("role") or "admin", session_id=session_id)


def get_current_attendee(
    response: Response,
    authorization: str | None = Header(default=None),
    token_service: HmacTokenService = Depends(get_token_service),
    session_tracker: SessionTracker = Depends(get_session_tracker),
) -> AttendeePrincipal:
    payload = token_service.verify(token=_bearer_token(authorization), token_type="attendee")
    if payload is None or not isinstance(payload.get("ref"), str):
        raise errors.unauthorized(INVALID_TOKEN_MESSAGE)
    session_id = payload.get("sid")
    status = session_tracker.touch(session_id=session_id, user_type="attendee", user_ref=payload["ref"])
    _flag_conflict(response, status.has_conflict)
    return AttendeePrincipal(ref=payload["ref"], session_id=session_id)


def get_any_session_id(
    authorization: str | None = Header(default=None),
    token_service: HmacTokenService = Depends(get_token_service),
) -> str | None:
    """Session id of a valid admin or attendee token."""
    token = _bearer_token(authorization)
    payload = token_service.verify(token=token, token_type="admin") or token_service.verify(
        token=token,
        token_type="attendee",
    )
    if payload is None:
        raise errors.unauthorized(INVALID_TOKEN_MESSAGE)
    return payload.get("sid")


def get_login_attendee_use_case(
    token_service: HmacTokenService = Depends(get_token_service),
    rate_limiter: LoginRateLimiter = Depends(get_rate_limiter),
    session_tracker: SessionTracker = Depends(get_session_tracker),
) -> LoginAttendeeUseCase:
    engine = _get_db_engine()
    return LoginAttendeeUseCase(
        attendee_port=SqlAttendeesRepository(engine),
        login_history_port=SqlLoginHistoryRepository(engine),
        password_hasher=_get_password_hasher(),
        token_port=token_service,
        rate_limiter=rate_limiter,
        session_tracker=session_tracker,
    )


def get_login_admin_use_case(
    token_service: HmacTokenService = Depends(get_token_service),
    rate_limiter: LoginRateLimiter = Depends(get_rate_limiter),
    session_tracker: SessionTracker = Depends(get_session_tracker),
) -> LoginAdminUseCase:
    settings = get_settings()
    return LoginAdminUseCase(
        credentials=AdminCredentials(
            user=settings.admin_user,
            password=settings.admin_pass,
            password_hash=settings.admin_password_hash or None,
        ),
        login_history_port=SqlLoginHistoryRepository(_get_db_engine()),
        password_hasher=_get_password_hasher(),
        token_port=token_service,
        rate_limiter=rate_limiter,
        session_tracker=session_tracker,
    )


def get_logout_use_case(session_tracker: SessionTracker = Depends(get_session_tracker)) -> LogoutUseCase:
    return LogoutUseCase(session_tracker=session_tracker)


def get_list_active_sessions_use_case(
    session_tracker: SessionTracker = Depends(get_session_tracker),
) -> ListActiveSessionsUseCase:
    return ListActiveSessionsUseCase(session_tracker=session_tracker)


def get_get_me_use_case() -> GetMeUseCase:
    engine = _get_db_engine()
    return GetMeUseCase(
        attendee_port=SqlAttendeesRepository(engine),
        announcement_port=SqlAnnouncementsRepository(engine),
    )


def get_list_attendee_announcements_use_case() -> ListAttendeeAnnouncementsUseCase:
    engine = _get_db_engine()
    return ListAttendeeAnnouncementsUseCase(
        attendee_port=SqlAttendeesRepository(engine),
        announcement_port=SqlAnnouncementsRepository(engine),
    )


def get_list_attendees_use_case() -> ListAttendeesUseCase:
    return ListAttendeesUseCase(attendee_port=SqlAttendeesRepository(_get_db_engine()))


def get_get_attendee_use_case() -> GetAttendeeUseCase:
    return GetAttendeeUseCase(attendee_port=SqlAttendeesRepository(_get_db_engine()))


def get_create_attendee_use_case() -> CreateAttendeeUseCase:
    return CreateAttendeeUseCase(
        attendee_port=SqlAttendeesRepository(_get_db_engine()),
        password_hasher=_get_password_hasher(),
    )


def get_update_attendee_use_case() -> UpdateAttendeeUseCase:
    return UpdateAttendeeUseCase(
        attendee_port=SqlAttendeesRepository(_get_db_engine()),
        password_hasher=_get_password_hasher(),
    )


def get_delete_attendee_use_case() -> DeleteAttendeeUseCase:
    return DeleteAttendeeUseCase(attendee_port=SqlAttendeesRepository(_get_db_engine()))


def get_list_rooms_use_case() -> ListRoomsUseCase:
    return ListRoomsUseCase(room_port=SqlRoomsRepository(_get_db_engine()))


def get_get_room_use_case() -> GetRoomUseCase:
    return GetRoomUseCase(room_port=SqlRoomsRepository(_get_db_engine()))


def get_create_room_use_case() -> CreateRoomUseCase:
    return CreateRoomUseCase(room_port=SqlRoomsRepository(_get_db_engine()))


def get_update_room_use_case() -> UpdateRoomUseCase:
    return UpdateRoomUseCase(room_port=SqlRoomsRepository(_get_db_engine()))


def get_delete_room_use_case() -> DeleteRoomUseCase:
    return DeleteRoomUseCase(room_port=SqlRoomsRepository(_get_db_engine()))


def get_list_groups_use_case() -> ListGroupsUseCase:
    return ListGroupsUseCase(group_port=SqlGroupsRepository(_get_db_engine()))


def get_get_group_use_case() -> GetGroupUseCase:
    return GetGroupUseCase(group_port=SqlGroupsRepository(_get_db_engine()))


def get_create_group_use_case() -> CreateGroupUseCase:
    return CreateGroupUseCase(group_port=SqlGroupsRepository(_get_db_engine()))


def get_update_group_use_case() -> UpdateGroupUseCase:
    return UpdateGroupUseCase(group_port=SqlGroupsRepository(_get_db_engine()))


def get_delete_group_use_case() -> DeleteGroupUseCase:
    return DeleteGroupUseCase(group_port=SqlGroupsRepository(_get_db_engine()))


def get_list_announcements_use_case() -> ListAnnouncementsUseCase:
    return ListAnnouncementsUseCase(announcement_port=SqlAnnouncementsRepository(_get_db_engine()))


def get_get_announcement_use_case() -> GetAnnouncementUseCase:
    return GetAnnouncementUseCase(announcement_port=SqlAnnouncementsRepository(_get_db_engine()))


def get_create_announcement_use_case() -> CreateAnnouncementUseCase:
    return CreateAnnouncementUseCase(announcement_port=SqlAnnouncementsRepository(_get_db_engine()))


def get_update_announcement_use_case() -> UpdateAnnouncementUseCase:
    return UpdateAnnouncementUseCase(announcement_port=SqlAnnouncementsRepository(_get_db_engine()))


def get_delete_announcement_use_case() -> DeleteAnnouncementUseCase:
    return DeleteAnnouncementUseCase(announcement_port=SqlAnnouncementsRepository(_get_db_engine()))


def get_list_login_history_use_case() -> ListLoginHistoryUseCase:
    return ListLoginHistoryUseCase(login_history_port=SqlLoginHistoryRepository(_get_db_engine()))
