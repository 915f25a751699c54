from __future__ import annotations

import hashlib

from passlib import exc
from passlib.context import CryptContext
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq
import passlib.utils.handlers as uh

from retreat_portal.application.ports.password_hasher_port import PasswordHasherPort


PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16
KEY_BYTES = 32
LEGACY_SALT = "retreat_portal_salt_2024"


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two digests without leaking the position of the first mismatch."""
    return consteq(left.encode("utf-8"), right.encode("utf-8"))


class pbkdf2_hex(uh.HasRounds, uh.HasRawSalt, uh.HasRawChecksum, uh.GenericHandler):
    """``$pbkdf2$<iterations>$<salt-hex>$<hash-hex>``, PBKDF2-HMAC-SHA256."""

    name = "pbkdf2_hex"
    ident = "$pbkdf2$"
    setting_kwds = ("salt", "salt_size", "rounds")

    checksum_size = KEY_BYTES

    default_salt_size = SALT_BYTES
    min_salt_size = 1
    max_salt_size = 1024

    default_rounds = PBKDF2_ITERATIONS
    min_rounds = 1
    max_rounds = 0xFFFFFFFF
    rounds_cost = "linear"

    @classmethod
    def from_string(cls, hash):
        rounds, salt, chk = uh.parse_mc3(hash, cls.ident, handler=cls)
        try:
            salt = bytes.fromhex(salt)
            chk = bytes.fromhex(chk) if chk else None
        except ValueError:
            raise exc.MalformedHashError(cls, "salt and digest must be hex")
        return cls(rounds=rounds, salt=salt, checksum=chk)

    def to_string(self):
        chk = self.checksum.hex() if self.checksum else None
        return uh.render_mc3(self.ident, self.rounds, self.salt.hex(), chk)

    def _calc_checksum(self, secret):
        return pbkdf2_hmac("sha256", secret, self.salt, self.rounds, self.checksum_size)


class retreat_legacy(uh.GenericHandler):
    """``$retreat$<sha256-hex>`` over ``password + LEGACY_SALT``. Verify only."""

    name = "retreat_legacy"
    ident = "$retreat$"
    setting_kwds = ()
    checksum_chars = uh.HEX_CHARS
    checksum_size = 64

    @classmethod
    def from_string(cls, hash):
        if isinstance(hash, bytes):
            hash = hash.decode("ascii")
        if not hash.startswith(cls.ident):
            raise exc.InvalidHashError(cls)
        return cls(checksum=hash[len(cls.ident):].lower())

    def to_string(self):
        return self.ident + self.checksum

    def _calc_checksum(self, secret):
        if isinstance(secret, bytes):
            secret = secret.decode("utf-8")
        return hashlib.sha256((secret + LEGACY_SALT).encode("utf-8")).hexdigest()


class PasswordHasher(PasswordHasherPort):
    """Current credentials are ``pbkdf2_hex``; legacy ``$retreat$`` ones still verify
    and are reported for upgrade, as are hashes below the configured iteration count.
    """

    def __init__(self, *, iterations: int = PBKDF2_ITERATIONS):
        self._ctx = CryptContext(
            schemes=[pbkdf2_hex, retreat_legacy],
            default="pbkdf2_hex",
            deprecated=["retreat_legacy"],
            pbkdf2_hex__default_rounds=iterations,
            pbkdf2_hex__min_rounds=iterations,
        )

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        try:
            return self._ctx.verify(plain_password, password_hash)
        except (ValueError, TypeError):
            return False

    def needs_upgrade(self, password_hash: str) -> bool:
        try:
            return self._ctx.needs_update(password_hash)
        except (ValueError, TypeError):
            return True

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        try:
            verified, replacement_hash = self._ctx.verify_and_update(plain_password, password_hash)
            return bool(verified), replacement_hash
        except (ValueError, TypeError):
            return False, None

    def dummy_verify(self) -> bool:
        return self._ctx.dummy_verify()
