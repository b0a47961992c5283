"""
User routes — register, list, login.

Route prefix: /api/usuarios
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, status

from auth.dependencies import get_current_user_id, get_user_service
from core.user_service import UserService

router = APIRouter(tags=["usuarios"])


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    JSON object body, or ``{}`` when the body is missing, malformed or not
    an object, so every absent field is reported by the validator.
    """
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("", status_code=status.HTTP_201_CREATED)
async def register(
    payload: Dict[str, Any] = Depends(read_payload),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Register a new user: {nome, email, senha, ativo?, tipo?, avatar?}."""
    result = await service.register(payload)
    return result.to_dict()


@router.get("")
async def list_users(
    service: UserService = Depends(get_user_service),
    _auth_user_id: str = Depends(get_current_user_id),
) -> List[Dict[str, Any]]:
    """All users sorted by name (no password field)."""
    return await service.list_users()


@router.post("/login")
async def login(
    payload: Dict[str, Any] = Depends(read_payload),
    service: UserService = Depends(get_user_service),
) -> Dict[str, str]:
    """Login with {email, senha} and receive a JWT."""
    token = await service.login(payload)
    return {"access_token": token}
