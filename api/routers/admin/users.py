"""
api.routers.admin.users - User management.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context, require_admin
from api.models import RoleName, RoleUpdate, SuccessResponse, UsersListResponse

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users")


@router.get("", response_model=UsersListResponse)
async def list_users(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None, description="Search username, email or name"),
    role: Optional[RoleName] = Query(None),
    sort_by: str = Query("newest", pattern="^(newest|oldest|most-builds)$"),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> UsersListResponse:
    """Users with their build counts, plus role statistics."""
    limit = clamp_limit(limit, ctx)
    users, total = ctx.db.users.list_users(
        search=search,
        role=role.value if role else None,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return UsersListResponse(
        users=users,
        stats=ctx.db.users.role_stats(),
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(users) < total,
    )


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    user = ctx.db.users.get_with_counts(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/{user_id}")
async def update_user_role(
    user_id: int,
    body: RoleUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if ctx.db.users.get_by_id(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    ctx.db.users.update_role(user_id, body.role.value)
    logger.info(f"Admin {admin['id']} set role of user {user_id} to {body.role.value}")
    return ctx.db.users.get_by_id(user_id)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: int,
    admin: Dict[str, Any] = Depends(require_admin),
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    """Delete a user and everything they own. Admins cannot be deleted."""
    user = ctx.db.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user["role"] == RoleName.ADMIN.value:
        raise HTTPException(status_code=403, detail="Cannot delete admin users")
    ctx.db.users.delete(user_id)
    logger.info(f"Admin {admin['id']} deleted user {user_id}")
    return SuccessResponse()
