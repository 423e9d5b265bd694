"""
VidShare API - Healthcheck route.
"""
from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request

from vidshare.core.database import Database, get_database
from vidshare.core.errors import ServiceUnavailable
from vidshare.schemas.schemas import ApiResponse, HealthStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/healthcheck", tags=["Healthcheck"])


@router.get("", response_model=ApiResponse)
async def healthcheck(request: Request, database: Database = Depends(get_database)):
    """Ping the store and report version and uptime."""
    try:
        await database.ping()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise ServiceUnavailable("Service Unavailable - Database connection failed") from e

    started = getattr(request.app.state, "started_at", time.monotonic())
    return ApiResponse(
        status_code=200,
        data=HealthStatus(version=request.app.version, uptime=round(time.monotonic() - started, 3)),
        message="OK - Database connected",
    )
