"""
api.routers.admin.taxonomy - Gear stat and mob type vocabularies.

Gear stat names are stored lower-case, mob type names upper-case; both
are unique.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_context
from api.models import SuccessResponse, TaxonomyEntryCreate, TaxonomyEntryUpdate

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter()


@router.get("/gear-stats")
async def list_gear_stats(
    ctx: "IAppContext" = Depends(get_app_context),
) -> List[Dict[str, Any]]:
    return ctx.db.taxonomy.list_gear_stats()


@router.post("/gear-stats", status_code=201)
async def create_gear_stat(
    body: TaxonomyEntryCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    return ctx.db.taxonomy.create_gear_stat(body.name.strip(), body.display_name.strip())


@router.delete("/gear-stats/{stat_id}", response_model=SuccessResponse)
async def delete_gear_stat(
    stat_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.taxonomy.delete_gear_stat(stat_id):
        raise HTTPException(status_code=404, detail="Gear stat not found")
    return SuccessResponse()


@router.get("/mob-types")
async def list_mob_types(
    ctx: "IAppContext" = Depends(get_app_context),
) -> List[Dict[str, Any]]:
    return ctx.db.taxonomy.list_mob_types()


@router.post("/mob-types", status_code=201)
async def create_mob_type(
    body: TaxonomyEntryCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    return ctx.db.taxonomy.create_mob_type(body.name.strip(), body.display_name.strip())


@router.put("/mob-types/{type_id}")
async def update_mob_type(
    type_id: int,
    body: TaxonomyEntryUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if not ctx.db.taxonomy.update_mob_type(type_id, body.name, body.display_name):
        raise HTTPException(status_code=404, detail="Mob type not found")
    return ctx.db.taxonomy.get_mob_type(type_id)


@router.delete("/mob-types/{type_id}", response_model=SuccessResponse)
async def delete_mob_type(
    type_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.taxonomy.delete_mob_type(type_id):
        raise HTTPException(status_code=404, detail="Mob type not found")
    return SuccessResponse()
