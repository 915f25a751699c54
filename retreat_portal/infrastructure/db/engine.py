from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)

_MEMORY_DSNS = {"sqlite://", "sqlite:///:memory:"}


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(dsn: str) -> Engine:
    if not dsn.startswith("sqlite"):
        return create_engine(dsn, future=True, pool_pre_ping=True)

    options: dict = {"connect_args": {"check_same_thread": False}}
    if dsn in _MEMORY_DSNS:
        # one shared connection, otherwise every checkout sees an empty database
        options["poolclass"] = StaticPool
    engine = create_engine(dsn, future=True, **options)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@lru_cache(maxsize=4)
def get_engine(dsn: str) -> Engine:
    return build_engine(dsn)


def init_db(engine: Engine) -> None:
    """Create any missing table. Existing tables are left untouched."""
    from retreat_portal.infrastructure.db.models import portal  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("db: schema ready dialect=%s", engine.dialect.name)
