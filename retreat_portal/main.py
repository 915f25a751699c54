from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from retreat_portal.api.errors import register_exception_handlers
from retreat_portal.api.middleware import register_middleware
from retreat_portal.api.routers import (
    admin_announcements,
    admin_attendees,
    admin_groups,
    admin_rooms,
    announcements,
    auth,
    health,
    me,
    reports,
)
from retreat_portal.infrastructure.db.engine import get_engine, init_db
from retreat_portal.shared.config import get_settings


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    init_db(get_engine(settings.database_url))
    logger.info("main: started environment=%s", settings.environment)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="Retreat Portal API", lifespan=lifespan)
    register_middleware(app)
    register_exception_handlers(app)
    for module in (
        health,
        auth,
        me,
        announcements,
        admin_attendees,
        admin_rooms,
        admin_groups,
        admin_announcements,
        reports,
    ):
        app.include_router(module.router)
    return app


app = create_app()
