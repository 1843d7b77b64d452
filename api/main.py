"""
api.main - FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload
    python -m api.main
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import setup_error_handlers
from api.routers import (
    admin_router,
    auth_router,
    builds_router,
    classes_router,
    enchantments_router,
    guides_router,
    health_router,
    items_router,
    map_markers_router,
    market_router,
    mobs_router,
    tools_router,
)
from epitome import __version__
from epitome.config import Config

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)

# Global app context (initialized at startup)
_app_context: "IAppContext | None" = None


def get_app_context() -> "IAppContext":
    """Get the global app context. Must be called after app startup."""
    if _app_context is None:
        raise RuntimeError("App context not initialized. Server not started?")
    return _app_context


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    global _app_context

    # Tests install their own context before the client starts
    owns_context = _app_context is None
    if owns_context:
        logger.info("Starting Epitome API...")
        from epitome.app_context import create_app_context

        _app_context = create_app_context()
        logger.info("App context initialized successfully")

    yield

    if owns_context and _app_context is not None:
        logger.info("Shutting down Epitome API...")
        _app_context.close()
        _app_context = None
        logger.info("Shutdown complete")


def create_app(config: Config | None = None) -> FastAPI:
    """Build the FastAPI application with middleware and routers."""
    cors_origins = config.cors_origins if config is not None else Config().cors_origins

    application = FastAPI(
        title="Epitome API",
        description="Items, mobs, classes, builds, guides, trade market and map for Epitome",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handlers(application)

    application.include_router(health_router, tags=["Health"])
    application.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
    application.include_router(builds_router, prefix="/api/v1", tags=["Builds"])
    application.include_router(items_router, prefix="/api/v1", tags=["Items"])
    application.include_router(enchantments_router, prefix="/api/v1", tags=["Enchantments"])
    application.include_router(mobs_router, prefix="/api/v1", tags=["Mobs"])
    application.include_router(classes_router, prefix="/api/v1", tags=["Classes"])
    application.include_router(guides_router, prefix="/api/v1", tags=["Guides"])
    application.include_router(market_router, prefix="/api/v1", tags=["Market"])
    application.include_router(map_markers_router, prefix="/api/v1", tags=["Map"])
    application.include_router(tools_router, prefix="/api/v1", tags=["Tools"])
    application.include_router(admin_router, prefix="/api/v1/admin", tags=["Admin"])

    @application.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - points at the docs."""
        return {
            "message": "Epitome API",
            "docs": "/docs",
            "health": "/health",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info",
    )
