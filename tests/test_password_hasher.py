from __future__ import annotations

import hashlib

from retreat_portal.infrastructure.security.password_hasher import (
    LEGACY_SALT,
    PasswordHasher,
    constant_time_equals,
)


def _hasher(iterations: int = 1_000) -> PasswordHasher:
    return PasswordHasher(iterations=iterations)


def _legacy_hash(password: str) -> str:
    return "$retreat$" + hashlib.sha256((password + LEGACY_SALT).encode("utf-8")).hexdigest()


def test_hash_then_verify_round_trip():
    hasher = _hasher()
    credential = hasher.hash("correct horse")

    assert hasher.verify("correct horse", credential) is True
    assert hasher.verify("wrong horse", credential) is False


def test_hash_uses_tagged_pbkdf2_format():
    credential = _hasher().hash("secret")

    _, tag, iterations, salt_hex, digest_hex = credential.split("$")
    assert tag == "pbkdf2"
    assert iterations == "1000"
    assert len(salt_hex) == 32
    assert len(digest_hex) == 64


def test_same_password_hashes_differently_and_both_verify():
    hasher = _hasher()
    first = hasher.hash("secret")
    second = hasher.hash("secret")

    assert first != second
    assert hasher.verify("secret", first)
    assert hasher.verify("secret", second)


def test_default_iterations_match_current_format():
    credential = PasswordHasher().hash("secret")

    assert credential.startswith("$pbkdf2$100000$")


def test_legacy_credential_verifies_and_is_upgraded():
    hasher = _hasher()
    legacy = _legacy_hash("secret")

    assert hasher.verify("secret", legacy) is True
    assert hasher.verify("other", legacy) is False
    assert hasher.needs_upgrade(legacy) is True

    ok, replacement = hasher.verify_and_update("secret", legacy)
    assert ok is True
    assert replacement is not None
    assert replacement.startswith("$pbkdf2$1000$")
    assert hasher.verify("secret", replacement)


def test_verify_and_update_keeps_current_credential():
    hasher = _hasher()
    credential = hasher.hash("secret")

    assert hasher.verify_and_update("secret", credential) == (True, None)
    assert hasher.verify_and_update("wrong", credential) == (False, None)


def test_lower_iteration_count_needs_upgrade():
    old = _hasher(iterations=500).hash("secret")

    assert _hasher(iterations=1_000).needs_upgrade(old) is True
    assert _hasher(iterations=500).needs_upgrade(old) is False


def test_malformed_credentials_are_rejected_without_raising():
    hasher = _hasher()
    for credential in ("", "plain", "$unknown$abc", "$pbkdf2$abc$zz$yy", "$pbkdf2$1000$$", "$retreat$", "pbkdf2$1$aa$bb"):
        assert hasher.verify("secret", credential) is False


def test_constant_time_equals():
    assert constant_time_equals("abc", "abc") is True
    assert constant_time_equals("abc", "abd") is False
    assert constant_time_equals("abc", "abcd") is False


def test_unrecognised_credentials_need_upgrade():
    hasher = _hasher()

    assert hasher.needs_upgrade("plain") is True
    assert hasher.needs_upgrade("") is True


def test_dummy_verify_never_succeeds():
    hasher = _hasher()

    assert hasher.dummy_verify() is False
    assert hasher.dummy_verify() is False


def test_hex_digest_case_is_ignored_for_legacy_credentials():
    hasher = _hasher()
    legacy = _legacy_hash("secret")

    assert hasher.verify("secret", "$retreat$" + legacy[len("$retreat$"):].upper()) is True
