"""
api.routers.admin.mobs - Bestiary management, including inactive mobs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import MobCreate, MobsListResponse, MobUpdate, SuccessResponse
from epitome.text_utils import slugify

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/mobs")


@router.get("", response_model=MobsListResponse)
async def list_mobs(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    mob_type: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> MobsListResponse:
    limit = clamp_limit(limit, ctx)
    mobs, total = ctx.db.mobs.list_mobs(
        search=search,
        category=category,
        mob_type=mob_type,
        active_only=False,
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


@router.get("/{mob_id}")
async def get_mob(
    mob_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    mob = ctx.db.mobs.get(mob_id)
    if mob is None:
        raise HTTPException(status_code=404, detail="Mob not found")
    return mob


@router.post("", status_code=201)
async def create_mob(
    body: MobCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    fields = body.model_dump(exclude_none=True)
    fields["slug"] = body.slug or slugify(body.name)
    if not fields["slug"]:
        raise HTTPException(status_code=400, detail="Slug cannot be empty")
    if fields.get("mob_type"):
        fields["mob_type"] = fields["mob_type"].upper()
    mob_id = ctx.db.mobs.create(**fields)
    return ctx.db.mobs.get(mob_id)


@router.put("/{mob_id}")
async def update_mob(
    mob_id: int,
    body: MobUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if ctx.db.mobs.get(mob_id) is None:
        raise HTTPException(status_code=404, detail="Mob not found")
    fields = body.model_dump(exclude_unset=True)
    if fields.get("mob_type"):
        fields["mob_type"] = fields["mob_type"].upper()
    ctx.db.mobs.update(mob_id, **fields)
    return ctx.db.mobs.get(mob_id)


@router.delete("/{mob_id}", response_model=SuccessResponse)
async def delete_mob(
    mob_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    """Map markers pointing at the mob keep existing without it."""
    if not ctx.db.mobs.delete(mob_id):
        raise HTTPException(status_code=404, detail="Mob not found")
    return SuccessResponse()
