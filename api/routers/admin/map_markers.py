"""
api.routers.admin.map_markers - Map marker management.

Coordinates must fall inside the configured map bounds, and a linked
mob must exist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import (
    AdminMapMarkersListResponse,
    MapMarkerCreate,
    MapMarkerUpdate,
    SuccessResponse,
)
from epitome.map_markers import MapBounds

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/map-markers")


def _check_marker(ctx: "IAppContext", x: float, y: float, mob_id: Optional[int]) -> None:
    width, height = ctx.config.map_size
    bounds = MapBounds(width, height)
    if not bounds.contains(x, y):
        raise HTTPException(
            status_code=400,
            detail=f"Coordinates ({x}, {y}) outside map bounds {width}x{height}",
        )
    if mob_id is not None and ctx.db.mobs.get(mob_id) is None:
        raise HTTPException(status_code=400, detail=f"Mob {mob_id} does not exist")


@router.get("", response_model=AdminMapMarkersListResponse)
async def list_markers(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None),
    marker_type: Optional[str] = Query(None, alias="type"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> AdminMapMarkersListResponse:
    limit = clamp_limit(limit, ctx)
    markers, total = ctx.db.map_markers.list_admin(
        search=search,
        marker_type=marker_type if marker_type != "all" else None,
        limit=limit,
        offset=offset,
    )
    return AdminMapMarkersListResponse(
        markers=markers,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(markers) < total,
    )


@router.get("/{marker_id}")
async def get_marker(
    marker_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    marker = ctx.db.map_markers.get(marker_id)
    if marker is None:
        raise HTTPException(status_code=404, detail="Marker not found")
    return marker


@router.post("", status_code=201)
async def create_marker(
    body: MapMarkerCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    _check_marker(ctx, body.x, body.y, body.mob_id)
    fields = body.model_dump(exclude_none=True)
    fields.setdefault("is_active", True)
    marker_id = ctx.db.map_markers.create(**fields)
    return ctx.db.map_markers.get(marker_id)


@router.put("/{marker_id}")
async def update_marker(
    marker_id: int,
    body: MapMarkerUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    current = ctx.db.map_markers.get(marker_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Marker not found")

    fields = body.model_dump(exclude_unset=True)
    _check_marker(
        ctx,
        fields["x"] if fields.get("x") is not None else current["x"],
        fields["y"] if fields.get("y") is not None else current["y"],
        fields.get("mob_id"),
    )
    ctx.db.map_markers.update(marker_id, **fields)
    return ctx.db.map_markers.get(marker_id)


@router.delete("/{marker_id}", response_model=SuccessResponse)
async def delete_marker(
    marker_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.map_markers.delete(marker_id):
        raise HTTPException(status_code=404, detail="Marker not found")
    return SuccessResponse()
