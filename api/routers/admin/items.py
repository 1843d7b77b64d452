"""
api.routers.admin.items - Item catalogue management.

Enhancement tables are validated and normalized before storage; a
malformed table is rejected with 400.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import AdminItemsListResponse, ItemCreate, ItemUpdate, RarityName, SuccessResponse
from epitome.enhancement import normalize_enhancement_bonuses, normalize_enhancement_materials
from epitome.game_data import is_gear_type
from epitome.text_utils import slugify

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/items")


def _storage_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize enhancement tables in a create/update payload."""
    if "enhancement_bonuses" in fields:
        fields["enhancement_bonuses"] = normalize_enhancement_bonuses(fields["enhancement_bonuses"])
    if "enhancement_materials" in fields:
        fields["enhancement_materials"] = normalize_enhancement_materials(
            fields["enhancement_materials"]
        )
    return fields


@router.get("", response_model=AdminItemsListResponse)
async def list_items(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None),
    item_type: Optional[str] = Query(
        None, alias="type", description="Item type, or gear / other / all"
    ),
    rarity: Optional[RarityName] = Query(None),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> AdminItemsListResponse:
    limit = clamp_limit(limit, ctx)
    items, total = ctx.db.items.list_admin(
        search=search,
        type_filter=item_type,
        rarity=rarity.value if rarity else None,
        limit=limit,
        offset=offset,
    )
    return AdminItemsListResponse(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(items) < total,
    )


@router.get("/{item_id}")
async def get_item(
    item_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    item = ctx.db.items.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.post("", status_code=201)
async def create_item(
    body: ItemCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """
    Create an item.

    The slug defaults to the slugified name and the gear flag defaults
    to whether the type is equippable.
    """
    fields = body.model_dump(mode="json", exclude_none=True)
    fields["slug"] = body.slug or slugify(body.name)
    if not fields["slug"]:
        raise HTTPException(status_code=400, detail="Slug cannot be empty")
    if body.is_gear is None:
        fields["is_gear"] = is_gear_type(body.type.value)
    fields.setdefault("stats", {})
    fields.setdefault("level", 1)

    item_id = ctx.db.items.create(**_storage_fields(fields))
    return ctx.db.items.get(item_id)


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    body: ItemUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if ctx.db.items.get(item_id) is None:
        raise HTTPException(status_code=404, detail="Item not found")
    fields = body.model_dump(mode="json", exclude_unset=True)
    ctx.db.items.update(item_id, **_storage_fields(fields))
    return ctx.db.items.get(item_id)


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item(
    item_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.items.delete(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return SuccessResponse()
