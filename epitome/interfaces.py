"""
Service interfaces for dependency injection.

Routers type their dependencies against these Protocols instead of the
concrete AppContext, so api modules never import the wiring code.

Usage:
    from epitome.interfaces import IAppContext

    async def handler(ctx: IAppContext = Depends(get_app_context)):
        ctx.db.items.get(1)
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ISessionManager(Protocol):
    """Issues and verifies session tokens."""

    def issue(self, user_id: int) -> str:
        ...

    def verify(self, token: Optional[str]) -> Optional[int]:
        ...


@runtime_checkable
class IOAuthClient(Protocol):
    """Third-party sign-in provider (Discord)."""

    def authorization_url(self, state: str) -> str:
        ...

    def exchange_code(self, code: str) -> str:
        ...

    def fetch_profile(self, access_token: str) -> Any:
        ...


@runtime_checkable
class IAppContext(Protocol):
    """
    Interface for the application context.

    Attributes:
        config: Application configuration
        db: Database facade with one repository per entity
        sessions: Session token manager
        oauth_states: Single-use OAuth state store
        discord: Discord OAuth client
    """

    config: Any
    db: Any
    sessions: ISessionManager
    oauth_states: Any
    discord: IOAuthClient

    def close(self) -> None:
        ...
