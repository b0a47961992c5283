"""
FastAPI dependencies for authentication and the user service.

Provides ``get_user_repository``, ``get_user_service`` and the
``get_current_user_id`` gate used by protected routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import Settings, get_settings
from core.user_service import UserService
from database.repository import UserRepository
from database.session import get_db_session

logger = logging.getLogger(__name__)


async def get_user_repository(
    session: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    """Repository bound to the request-scoped DB session."""
    return UserRepository(session)


async def get_user_service(
    repository: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(repository, settings)


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
    access_token: Optional[str] = Header(None, alias="access-token"),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Extract and verify the token from ``Authorization: Bearer <token>``
    (or the ``access-token`` header), returning the authenticated user id.
    """
    from auth.jwt import user_id_from_token

    token = access_token
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            token = credentials.strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing access token",
        )
    try:
        return user_id_from_token(token, settings)
    except JWTError as exc:
        logger.debug("Rejected token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
