"""
api.routers.admin.builds - Build moderation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import AdminBuildUpdate, BuildsListResponse, CharacterClassName, SuccessResponse

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/builds")

_STATUS_FILTER = {"published": True, "draft": False, "all": None}


@router.get("", response_model=BuildsListResponse)
async def list_builds(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None),
    status: str = Query("all", pattern="^(published|draft|all)$"),
    character_class: Optional[CharacterClassName] = Query(None, alias="class"),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> BuildsListResponse:
    limit = clamp_limit(limit, ctx)
    builds, total = ctx.db.builds.list_builds(
        character_class=character_class.value if character_class else None,
        search=search,
        published=_STATUS_FILTER[status],
        limit=limit,
        offset=offset,
    )
    return BuildsListResponse(
        builds=builds,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(builds) < total,
    )


@router.put("/{build_id}")
async def update_build(
    build_id: int,
    body: AdminBuildUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Publish/unpublish or retitle a build."""
    if ctx.db.builds.get(build_id) is None:
        raise HTTPException(status_code=404, detail="Build not found")
    ctx.db.builds.update(build_id, **body.model_dump(exclude_unset=True))
    return ctx.db.builds.get(build_id)


@router.delete("/{build_id}", response_model=SuccessResponse)
async def delete_build(
    build_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    """Delete a build together with its votes."""
    if not ctx.db.builds.delete(build_id):
        raise HTTPException(status_code=404, detail="Build not found")
    return SuccessResponse()
