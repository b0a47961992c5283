"""
Global middleware and exception handlers.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from auth.errors import (
    IncorrectPassword,
    LoginFailed,
    RequestValidationFailed,
    StoreError,
    UserListingFailed,
    UserNotRegistered,
)

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Map user-service failures to their HTTP responses."""

    @app.exception_handler(RequestValidationFailed)
    async def on_validation_failed(request: Request, exc: RequestValidationFailed):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"errors": [e.to_dict() for e in exc.errors]},
        )

    @app.exception_handler(UserNotRegistered)
    async def on_not_registered(request: Request, exc: UserNotRegistered):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"errors": [exc.error.to_dict()]},
        )

    @app.exception_handler(IncorrectPassword)
    async def on_incorrect_password(request: Request, exc: IncorrectPassword):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"errors": [exc.error.to_dict()]},
        )

    @app.exception_handler(StoreError)
    async def on_store_error(request: Request, exc: StoreError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())

    @app.exception_handler(UserListingFailed)
    async def on_listing_failed(request: Request, exc: UserListingFailed):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error fetching the user list", "error": str(exc.cause)},
        )

    @app.exception_handler(LoginFailed)
    async def on_login_failed(request: Request, exc: LoginFailed):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Login failed", "error": str(exc.cause)},
        )
