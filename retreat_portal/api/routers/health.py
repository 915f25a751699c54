from __future__ import annotations

from fastapi import APIRouter

from retreat_portal.api.schemas.reports import HealthResponse
from retreat_portal.shared.config import get_settings


router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", environment=get_settings().environment)
