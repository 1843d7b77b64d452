"""
api.routers.mobs - Bestiary endpoints.

Only active mobs are visible here; inactive ones are managed through
the admin API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import MobsListResponse

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mobs")


@router.get("", response_model=MobsListResponse)
async def list_mobs(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None, description="Search mob names"),
    category: Optional[str] = Query(None),
    mob_type: Optional[str] = Query(None),
    biome: Optional[str] = Query(None),
    min_level: Optional[int] = Query(None, ge=0),
    max_level: Optional[int] = Query(None, ge=0),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> MobsListResponse:
    """List active mobs, lowest level first."""
    limit = clamp_limit(limit, ctx)
    mobs, total = ctx.db.mobs.list_mobs(
        search=search,
        category=category,
        mob_type=mob_type,
        biome=biome,
        min_level=min_level,
        max_level=max_level,
        active_only=True,
        limit=limit,
        offset=offset,
    )
    return MobsListResponse(
        mobs=mobs,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(mobs) < total,
    )


@router.get("/{slug}")
async def get_mob(
    slug: str,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    mob = ctx.db.mobs.get_by_slug(slug, active_only=True)
    if mob is None:
        raise HTTPException(status_code=404, detail="Mob not found")
    return mob
