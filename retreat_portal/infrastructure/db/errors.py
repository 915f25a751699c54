from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from retreat_portal.domain.exceptions import (
    ConstraintKind,
    ConstraintViolationError,
    StorageUnavailableError,
)


logger = logging.getLogger(__name__)

_PG_CODES = {
    "23505": ConstraintKind.UNIQUE,
    "23503": ConstraintKind.FOREIGN_KEY,
    "23502": ConstraintKind.NOT_NULL,
    "23514": ConstraintKind.CHECK,
}

_MESSAGE_MARKERS = (
    ("unique", ConstraintKind.UNIQUE),
    ("duplicate key", ConstraintKind.UNIQUE),
    ("foreign key", ConstraintKind.FOREIGN_KEY),
    ("not null", ConstraintKind.NOT_NULL),
    ("not-null", ConstraintKind.NOT_NULL),
    ("check constraint", ConstraintKind.CHECK),
)


def constraint_kind(exc: IntegrityError) -> ConstraintKind:
    original = exc.orig
    code = getattr(original, "pgcode", None) or getattr(original, "sqlstate", None)
    if code in _PG_CODES:
        return _PG_CODES[code]
    message = str(original).lower()
    for marker, kind in _MESSAGE_MARKERS:
        if marker in message:
            return kind
    return ConstraintKind.CHECK


@contextmanager
def translate_db_errors():
    """Re-raise driver errors as domain errors. Also usable as a decorator."""
    try:
        yield
    except IntegrityError as exc:
        kind = constraint_kind(exc)
        logger.info("db: constraint violated kind=%s error=%s", kind.value, exc.orig)
        raise ConstraintViolationError(kind, str(exc.orig)) from exc
    except (OperationalError, ProgrammingError) as exc:
        logger.warning("db: storage unavailable error=%s", exc.orig)
        raise StorageUnavailableError(str(exc.orig)) from exc
    except OverflowError as exc:
        # integer binds wider than the column
        logger.info("db: value out of range error=%s", exc)
        raise ConstraintViolationError(ConstraintKind.CHECK, str(exc)) from exc
