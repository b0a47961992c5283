"""
JWT creation and verification.

Tokens are standard HS256 JWTs (python-jose) carrying the user id under
``usuario.id``. Secret and lifetime come from ``Settings.secret_key`` and
``Settings.expires_in`` (env: ``SECRET_KEY`` / ``EXPIRES_IN``).
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from auth.errors import TokenSigningError
from config.settings import Settings

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_expiry(value: str | int) -> timedelta:
    """``3600`` / ``"3600"`` / ``"60m"`` / ``"1h"`` / ``"7d"`` → timedelta."""
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"invalid token lifetime: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit.lower()])


def create_token(user_id: str, settings: Settings) -> str:
    """Create a signed token containing ``user_id`` and expiry."""
    now = datetime.now(timezone.utc)
    payload = {
        "usuario": {"id": user_id},
        "iat": now,
        "exp": now + parse_expiry(settings.expires_in),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


async def issue_token(user_id: str, settings: Settings) -> str:
    """
    Sign a token off the event loop.

    Raises ``TokenSigningError`` when the secret or lifetime is unusable.
    """
    try:
        return await asyncio.to_thread(create_token, user_id, settings)
    except (JWTError, ValueError, TypeError) as exc:
        raise TokenSigningError(str(exc)) from exc


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Verify signature and expiry; raises ``JWTError`` on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def user_id_from_token(token: str, settings: Settings) -> str:
    """Return the ``usuario.id`` claim or raise ``JWTError``."""
    payload = decode_token(token, settings)
    usuario = payload.get("usuario")
    if not isinstance(usuario, dict) or not usuario.get("id"):
        raise JWTError("token carries no user id")
    return str(usuario["id"])
