from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response

from retreat_portal.api.errors import CORS_HEADERS, generate_request_id, unhandled_error_response


logger = logging.getLogger(__name__)

PREFLIGHT_MAX_AGE_SECONDS = 86400


def register_middleware(app: FastAPI) -> None:
    """Request ids and permissive CORS on every response, preflight included."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = generate_request_id()
        request.state.request_id = request_id

        if request.method == "OPTIONS":
            response = Response(status_code=204)
            response.headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE_SECONDS)
        else:
            try:
                response = await call_next(request)
            except Exception as exc:  # noqa: BLE001
                response = unhandled_error_response(exc, request_id, request.url.path)

        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "api: %s %s status=%s request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            request_id,
        )
        return response
