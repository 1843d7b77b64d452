"""
api.routers.health - Health check endpoints.

Provides endpoints for monitoring service health and status.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_context
from api.models import ConfigResponse, HealthResponse
from epitome import __version__
from epitome.map_markers import MapBounds

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    ctx: "IAppContext" = Depends(get_app_context),
) -> HealthResponse:
    """
    Check API health status.

    Returns the overall health of the service including database
    connectivity and whether Discord sign-in is configured.
    """
    services: dict[str, str] = {}

    db_status = "disconnected"
    schema_version = None
    try:
        schema_version = ctx.db.get_schema_version()
        db_status = "connected"
    except sqlite3.Error as e:
        logger.warning(f"Database health check failed: {e}")
        db_status = f"error: {str(e)[:50]}"

    services["database"] = db_status
    services["discord_oauth"] = "configured" if ctx.config.discord_configured else "disabled"

    overall_status = "healthy" if db_status == "connected" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        database=db_status,
        schema_version=schema_version,
        services=services,
    )


@router.get("/health/ready")
async def readiness_check(
    ctx: "IAppContext" = Depends(get_app_context),
) -> dict[str, str]:
    """
    Kubernetes-style readiness probe.

    Returns 200 if the service is ready to accept traffic.
    """
    try:
        ctx.db.get_schema_version()
        return {"status": "ready"}
    except sqlite3.Error as e:
        raise HTTPException(status_code=503, detail=f"Not ready: {e}")


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Kubernetes-style liveness probe.

    Returns 200 if the service is alive (even if not fully ready).
    """
    return {"status": "alive"}


@router.get("/api/v1/config", response_model=ConfigResponse)
async def get_config(
    ctx: "IAppContext" = Depends(get_app_context),
) -> ConfigResponse:
    """Non-sensitive configuration the web client needs."""
    config = ctx.config
    width, height = config.map_size
    return ConfigResponse(
        version=__version__,
        discord_login_enabled=config.discord_configured,
        map=MapBounds(width, height).to_dict(),
        max_page_size=config.max_page_size,
    )
