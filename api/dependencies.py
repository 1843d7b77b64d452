"""
api.dependencies - FastAPI dependency injection providers.

Provides access to core services and the signed-in user through FastAPI's
dependency injection system.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import Depends, Request

from epitome.auth import AuthError, is_admin, is_moderator

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)

User = Dict[str, Any]


def get_app_context() -> "IAppContext":
    """
    Get the global application context.

    This is the main dependency for accessing all services.
    Must be called after app startup (lifespan context).
    """
    from api.main import get_app_context as _get_ctx

    return _get_ctx()


def session_token(request: Request, ctx: "IAppContext") -> Optional[str]:
    """Session token from `Authorization: Bearer` or the session cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(ctx.config.session_cookie_name)


def get_current_user(
    request: Request,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Optional[User]:
    """The signed-in user, or None for anonymous requests."""
    user_id = ctx.sessions.verify(session_token(request, ctx))
    if user_id is None:
        return None
    user = ctx.db.users.get_by_id(user_id)
    if user is None:
        logger.info(f"Session refers to missing user {user_id}")
    return user


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthError("Unauthorized", status_code=401)
    return user


def require_moderator(
    user: Optional[User] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> User:
    if user is None:
        raise AuthError("Unauthorized", status_code=401)
    if not is_moderator(user, ctx.config.admin_discord_ids):
        raise AuthError("Forbidden", status_code=403)
    return user


def require_admin(
    user: Optional[User] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> User:
    """
    Admin gate for the back-office.

    401 when nobody is signed in, 403 when the user is neither an ADMIN
    nor listed in the configured admin Discord ids.
    """
    if user is None:
        raise AuthError("Unauthorized", status_code=401)
    if not is_admin(user, ctx.config.admin_discord_ids):
        raise AuthError("Forbidden", status_code=403)
    return user


def clamp_limit(limit: int, ctx: "IAppContext") -> int:
    """Cap a requested page size at the configured maximum."""
    return max(1, min(limit, ctx.config.max_page_size))
