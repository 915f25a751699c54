from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base for domain errors."""


class InvalidCredentialsError(DomainError):
    """Login rejected. Never says whether the account exists."""


class LoginRateLimitedError(DomainError):
    """Too many failed login attempts inside the window."""

    def __init__(self, message: str, *, retry_after_seconds: int):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class ResourceNotFoundError(DomainError):
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class DuplicateResourceError(DomainError):
    """A natural key (ref number, room number, group name) is already taken."""


class ResourceInUseError(DomainError):
    """Delete refused while other rows still point at the resource."""


class NoFieldsToUpdateError(DomainError):
    """Update payload had nothing the resource accepts."""


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"
    CHECK = "check"


class ConstraintViolationError(DomainError):
    """Storage rejected a write because of an integrity constraint."""

    def __init__(self, kind: ConstraintKind, message: str = ""):
        super().__init__(message or f"{kind.value} constraint violated")
        self.kind = kind


class StorageUnavailableError(DomainError):
    """Storage could not be reached or the table is missing."""
