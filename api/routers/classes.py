"""
api.routers.classes - Class info pages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_context
from api.models import ClassesListResponse

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/classes")


@router.get("", response_model=ClassesListResponse)
async def list_classes(
    ctx: "IAppContext" = Depends(get_app_context),
) -> ClassesListResponse:
    """Active classes in display order."""
    return ClassesListResponse(classes=ctx.db.classes.list_classes(active_only=True))


@router.get("/{class_key}")
async def get_class(
    class_key: str,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Class detail; the key is matched case-insensitively."""
    info = ctx.db.classes.get_by_key(class_key)
    if info is None or not info["is_active"]:
        raise HTTPException(status_code=404, detail="Class not found")
    return info
