"""
api.routers.admin.classes - Class info pages, including inactive ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_context
from api.models import ClassesListResponse, ClassInfoCreate, ClassInfoUpdate, SuccessResponse

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/classes")


@router.get("", response_model=ClassesListResponse)
async def list_classes(
    ctx: "IAppContext" = Depends(get_app_context),
) -> ClassesListResponse:
    return ClassesListResponse(classes=ctx.db.classes.list_classes(active_only=False))


@router.post("", status_code=201)
async def create_class(
    body: ClassInfoCreate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Create a class page; the key is stored upper-case and must be unique."""
    class_id = ctx.db.classes.create(**body.model_dump(exclude_none=True))
    return ctx.db.classes.get(class_id)


@router.get("/{class_id}")
async def get_class(
    class_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    info = ctx.db.classes.get(class_id)
    if info is None:
        raise HTTPException(status_code=404, detail="Class not found")
    return info


@router.put("/{class_id}")
async def update_class(
    class_id: int,
    body: ClassInfoUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if ctx.db.classes.get(class_id) is None:
        raise HTTPException(status_code=404, detail="Class not found")
    ctx.db.classes.update(class_id, **body.model_dump(exclude_unset=True))
    return ctx.db.classes.get(class_id)


@router.delete("/{class_id}", response_model=SuccessResponse)
async def delete_class(
    class_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    if not ctx.db.classes.delete(class_id):
        raise HTTPException(status_code=404, detail="Class not found")
    return SuccessResponse()
