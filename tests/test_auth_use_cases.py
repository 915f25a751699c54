from __future__ import annotations

import hashlib

import pytest

from retreat_portal.application.dto.auth import AdminCredentials, LoginAdminInput, LoginAttendeeInput
from retreat_portal.application.use_cases.login_admin import LoginAdminUseCase
from retreat_portal.application.use_cases.login_attendee import LoginAttendeeUseCase
from retreat_portal.application.use_cases.sessions import LogoutUseCase
from retreat_portal.domain.exceptions import InvalidCredentialsError, LoginRateLimitedError
from retreat_portal.infrastructure.security.password_hasher import LEGACY_SALT


def _attendee_use_case(attendee_port, login_history_port, password_hasher, token_service, rate_limiter, session_tracker):
    return LoginAttendeeUseCase(
        attendee_port=attendee_port,
        login_history_port=login_history_port,
        password_hasher=password_hasher,
        token_port=token_service,
        rate_limiter=rate_limiter,
        session_tracker=session_tracker,
    )


def _admin_use_case(credentials, login_history_port, password_hasher, token_service, rate_limiter, session_tracker):
    return LoginAdminUseCase(
        credentials=credentials,
        login_history_port=login_history_port,
        password_hasher=password_hasher,
        token_port=token_service,
        rate_limiter=rate_limiter,
        session_tracker=session_tracker,
    )


def _login(ref: str, password: str) -> LoginAttendeeInput:
    return LoginAttendeeInput(ref=ref, password=password, user_agent="pytest", ip="10.0.0.1")


@pytest.fixture
def attendee_login(attendee_port, login_history_port, password_hasher, token_service, rate_limiter, session_tracker):
    return _attendee_use_case(
        attendee_port, login_history_port, password_hasher, token_service, rate_limiter, session_tracker
    )


def test_attendee_login_issues_token_bound_to_session(
    attendee_login, attendee_port, password_hasher, token_service, login_history_port, session_port
):
    attendee_port.add(ref_number="R100", name="Ana", password_hash=password_hasher.hash("secret"))

    result = attendee_login.execute(_login("R100", "secret"))

    claims = token_service.verify(token=result.token, token_type="attendee")
    assert claims["ref"] == "R100"
    assert claims["sid"] == result.session_id
    assert claims["type"] == "attendee"
    assert result.name == "Ana"
    assert result.session_id in session_port.sessions
    assert [entry.user_id for entry in login_history_port.entries] == ["R100"]
    assert attendee_port.get_attendee_by_ref(ref_number="R100").last_login is not None


def test_attendee_token_is_rejected_by_admin_verification(attendee_login, attendee_port, password_hasher, token_service):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))

    result = attendee_login.execute(_login("R100", "secret"))

    assert token_service.verify(token=result.token, token_type="admin") is None


def test_attendee_login_trims_reference(attendee_login, attendee_port, password_hasher):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))

    result = attendee_login.execute(_login("  R100 ", "secret"))

    assert result.subject == "R100"


@pytest.mark.parametrize("ref,password", [("UNKNOWN", "secret"), ("R100", "wrong")])
def test_attendee_login_failures_share_one_message(attendee_login, attendee_port, password_hasher, attempt_port, ref, password):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))

    with pytest.raises(InvalidCredentialsError) as exc_info:
        attendee_login.execute(_login(ref, password))

    assert str(exc_info.value) == "Invalid credentials"
    assert [(item.identifier, item.success) for item in attempt_port.attempts] == [(ref, False)]


def test_legacy_hash_is_upgraded_on_successful_login(attendee_login, attendee_port, password_hasher):
    legacy_digest = hashlib.sha256(("secret" + LEGACY_SALT).encode("utf-8")).hexdigest()
    attendee_port.add(ref_number="R100", password_hash=f"$retreat${legacy_digest}")

    attendee_login.execute(_login("R100", "secret"))

    upgraded = attendee_port.get_attendee_by_ref(ref_number="R100").password_hash
    assert upgraded.startswith("$pbkdf2$")
    assert password_hasher.verify("secret", upgraded)


def test_current_hash_is_left_alone(attendee_login, attendee_port, password_hasher):
    stored = password_hasher.hash("secret")
    attendee_port.add(ref_number="R100", password_hash=stored)

    attendee_login.execute(_login("R100", "secret"))

    assert attendee_port.get_attendee_by_ref(ref_number="R100").password_hash == stored


def test_sixth_attempt_is_rate_limited_even_with_correct_password(attendee_login, attendee_port, password_hasher):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))
    for _ in range(5):
        with pytest.raises(InvalidCredentialsError):
            attendee_login.execute(_login("R100", "wrong"))

    with pytest.raises(LoginRateLimitedError) as exc_info:
        attendee_login.execute(_login("R100", "secret"))

    assert exc_info.value.retry_after_seconds > 0
    assert exc_info.value.retry_after_seconds <= 15 * 60


def test_successful_login_clears_failed_attempts(attendee_login, attendee_port, password_hasher, attempt_port):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))
    for _ in range(4):
        with pytest.raises(InvalidCredentialsError):
            attendee_login.execute(_login("R100", "wrong"))

    attendee_login.execute(_login("R100", "secret"))

    assert [item.success for item in attempt_port.attempts] == [True]


def test_second_login_makes_earlier_session_conflicted(attendee_login, attendee_port, password_hasher, session_tracker):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))
    first = attendee_login.execute(_login("R100", "secret"))
    second = attendee_login.execute(_login("R100", "secret"))

    status_second = session_tracker.touch(session_id=second.session_id, user_type="attendee", user_ref="R100")
    status_first = session_tracker.touch(session_id=first.session_id, user_type="attendee", user_ref="R100")

    assert status_second.has_conflict is False
    assert status_first.has_conflict is True
    assert status_first.active_sessions == 2


def _admin_login(user: str, password: str) -> LoginAdminInput:
    return LoginAdminInput(user=user, password=password, user_agent="pytest", ip="10.0.0.2")


def test_admin_login_with_plain_password(login_history_port, password_hasher, token_service, rate_limiter, session_tracker):
    use_case = _admin_use_case(
        AdminCredentials(user="admin", password="letmein", password_hash=None),
        login_history_port,
        password_hasher,
        token_service,
        rate_limiter,
        session_tracker,
    )

    result = use_case.execute(_admin_login("admin", "letmein"))

    claims = token_service.verify(token=result.token, token_type="admin")
    assert claims["user"] == "admin"
    assert claims["role"] == "admin"
    assert claims["sid"] == result.session_id
    assert result.role == "admin"
    assert login_history_port.entries[0].user_type == "admin"


def test_admin_password_hash_takes_precedence(login_history_port, password_hasher, token_service, rate_limiter, session_tracker):
    use_case = _admin_use_case(
        AdminCredentials(user="admin", password="plain", password_hash=password_hasher.hash("hashed")),
        login_history_port,
        password_hasher,
        token_service,
        rate_limiter,
        session_tracker,
    )

    with pytest.raises(InvalidCredentialsError):
        use_case.execute(_admin_login("admin", "plain"))
    assert use_case.execute(_admin_login("admin", "hashed")).subject == "admin"


@pytest.mark.parametrize("user,password", [("root", "letmein"), ("admin", "nope")])
def test_admin_login_rejects_bad_credentials(
    login_history_port, password_hasher, token_service, rate_limiter, session_tracker, attempt_port, user, password
):
    use_case = _admin_use_case(
        AdminCredentials(user="admin", password="letmein", password_hash=None),
        login_history_port,
        password_hasher,
        token_service,
        rate_limiter,
        session_tracker,
    )

    with pytest.raises(InvalidCredentialsError, match="Invalid credentials"):
        use_case.execute(_admin_login(user, password))

    assert attempt_port.attempts[0].user_type == "admin"
    assert login_history_port.entries == []


def test_logout_closes_session(attendee_login, attendee_port, password_hasher, session_tracker, session_port):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))
    result = attendee_login.execute(_login("R100", "secret"))

    LogoutUseCase(session_tracker=session_tracker).execute(session_id=result.session_id)

    assert session_port.sessions == {}


class RecordingHasher:
    def __init__(self, inner):
        self._inner = inner
        self.calls: list[str] = []

    def hash(self, plain_password):
        return self._inner.hash(plain_password)

    def verify(self, plain_password, password_hash):
        self.calls.append("verify")
        return self._inner.verify(plain_password, password_hash)

    def needs_upgrade(self, password_hash):
        return self._inner.needs_upgrade(password_hash)

    def verify_and_update(self, plain_password, password_hash):
        self.calls.append("verify_and_update")
        return self._inner.verify_and_update(plain_password, password_hash)

    def dummy_verify(self):
        self.calls.append("dummy_verify")
        return self._inner.dummy_verify()


@pytest.mark.parametrize("ref,expected_call", [("R100", "verify_and_update"), ("R404", "dummy_verify")])
def test_unknown_reference_still_pays_for_a_hash_check(
    attendee_port, login_history_port, password_hasher, token_service, rate_limiter, session_tracker, ref, expected_call
):
    attendee_port.add(ref_number="R100", password_hash=password_hasher.hash("secret"))
    hasher = RecordingHasher(password_hasher)
    use_case = _attendee_use_case(
        attendee_port, login_history_port, hasher, token_service, rate_limiter, session_tracker
    )

    with pytest.raises(InvalidCredentialsError, match="Invalid credentials"):
        use_case.execute(_login(ref, "wrong"))

    assert hasher.calls == [expected_call]
