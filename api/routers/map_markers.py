"""
api.routers.map_markers - Interactive map markers.

Markers are filtered by type in SQL and by level in Python, since the
level can come from the linked mob or from marker metadata.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_app_context
from api.models import MapMarkersResponse
from epitome.map_markers import MapBounds, filter_markers_by_level, parse_type_filter

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/map-markers")


@router.get("", response_model=MapMarkersResponse)
async def list_map_markers(
    ctx: "IAppContext" = Depends(get_app_context),
    types: Optional[str] = Query(None, description="Comma-separated marker types"),
    categories: Optional[str] = Query(
        None, description="Comma-separated categories: spawns, poi, npcs"
    ),
    min_level: Optional[int] = Query(None, ge=0),
    max_level: Optional[int] = Query(None, ge=0),
) -> MapMarkersResponse:
    """Active markers, with the map bounds the coordinates refer to."""
    selected = parse_type_filter(types, categories)
    markers = ctx.db.map_markers.list_active(selected)
    markers = filter_markers_by_level(markers, min_level, max_level)

    width, height = ctx.config.map_size
    return MapMarkersResponse(markers=markers, map=MapBounds(width, height).to_dict())
