"""
api.routers.admin.enchantments - Enchantment definitions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import (
    AdminEnchantmentsListResponse,
    EnchantmentCreate,
    EnchantmentUpdate,
    ItemTypeName,
    SuccessResponse,
)

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/enchantments")


def _check_range(min_value: int, max_value: int) -> None:
    if min_value > max_value:
        raise HTTPException(
            status_code=400, detail="min_value cannot be greater than max_value"
        )


@router.get("", response_model=AdminEnchantmentsListResponse)
async def list_enchantments(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None),
    equipment_type: Optional[ItemTypeName] = Query(None, alias="type"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> AdminEnchantmentsListResponse:
    limit = clamp_limit(limit, ctx)
    enchantments, total = ctx.db.enchantments.list_admin(
        search=search,
        equipment_type=equipment_type.value if equipment_type else None,
        limit=limit,
        offset=offset,
    )
    return AdminEnchantmentsListResponse(
        enchantments=enchantments,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(enchantments) < total,
    )


@router.get("/{enchantment_id}")
async def get_enchantment(
    enchantment_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    enchantment = ctx.db.enchantments.get(enchantment_id)
    if enchantment is None:
        raise HTTPException(status_code=404, detail="Enchantment not found")
    return enchantment


@router.post("", status_code=201)
async def create_enchantment(
    body: EnchantmentCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    _check_range(body.min_value, body.max_value)
    fields = body.model_dump(mode="json", exclude_none=True)
    fields.setdefault("equipment_types", [])
    enchantment_id = ctx.db.enchantments.create(**fields)
    return ctx.db.enchantments.get(enchantment_id)


@router.put("/{enchantment_id}")
async def update_enchantment(
    enchantment_id: int,
    body: EnchantmentUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    current = ctx.db.enchantments.get(enchantment_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Enchantment not found")

    fields = body.model_dump(mode="json", exclude_unset=True)
    _check_range(
        fields.get("min_value", current["min_value"]),
        fields.get("max_value", current["max_value"]),
    )
    ctx.db.enchantments.update(enchantment_id, **fields)
    return ctx.db.enchantments.get(enchantment_id)


@router.delete("/{enchantment_id}", response_model=SuccessResponse)
async def delete_enchantment(
    enchantment_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.enchantments.delete(enchantment_id):
        raise HTTPException(status_code=404, detail="Enchantment not found")
    return SuccessResponse()
