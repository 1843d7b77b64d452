"""
api.middleware.error_handling - Global error handling for API.

Provides consistent error responses across all endpoints.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from epitome.auth import AuthError
from epitome.enhancement import EnhancementDataError
from epitome.loadout import LoadoutError

logger = logging.getLogger(__name__)


def _error_response(request: Request, status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "status_code": status_code,
            "message": message,
            "path": str(request.url.path),
        },
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Register global error handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions with consistent format."""
        return _error_response(request, exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors with detailed feedback."""
        errors: list[dict[str, Any]] = []
        for error in exc.errors():
            errors.append({
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })

        return JSONResponse(
            status_code=422,
            content={
                "error": True,
                "status_code": 422,
                "message": "Validation error",
                "details": errors,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(AuthError)
    async def auth_exception_handler(request: Request, exc: AuthError) -> JSONResponse:
        return _error_response(request, exc.status_code, exc.message)

    @app.exception_handler(LoadoutError)
    @app.exception_handler(EnhancementDataError)
    async def domain_validation_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Invalid build loadouts and enhancement tables are client errors."""
        return _error_response(request, 400, str(exc))

    @app.exception_handler(sqlite3.IntegrityError)
    async def integrity_error_handler(
        request: Request, exc: sqlite3.IntegrityError
    ) -> JSONResponse:
        # Unique slug / name collisions and dangling references
        logger.info(f"Integrity error on {request.url.path}: {exc}")
        message = "Already exists" if "UNIQUE" in str(exc) else "Invalid reference"
        return _error_response(request, 400, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error on {request.url.path}: {exc}")

        # Don't expose internal details in production
        return _error_response(request, 500, "Internal server error")
