from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    def hash(self, plain_password: str) -> str:
        ...

    def verify(self, plain_password: str, password_hash: str) -> bool:
        ...

    def needs_upgrade(self, password_hash: str) -> bool:
        """True for legacy formats and for hashes below the current cost."""
        ...

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        ...

    def dummy_verify(self) -> bool:
        """Spend the time of one verification when there is no credential to check. Always False."""
        ...
