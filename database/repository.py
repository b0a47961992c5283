"""
User repository — the only code that talks to the ``usuarios`` table.

Instances wrap one ``AsyncSession`` and are handed to the services that
need them, so nothing here reaches for a global connection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from database.models import PUBLIC_COLUMNS, Base, User

logger = logging.getLogger(__name__)


@dataclass
class InsertResult:
    acknowledged: bool
    inserted_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"acknowledged": self.acknowledged, "insertedId": self.inserted_id}


def _to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "nome": user.nome,
        "email": user.email,
        "senha": user.senha,
        "ativo": user.ativo,
        "tipo": user.tipo,
        "avatar": user.avatar,
    }


class UserRepository:
    """Insert / lookup / listing accessors for user records."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def insert(self, document: Dict[str, Any]) -> InsertResult:
        user = User(**document)
        self._session.add(user)
        await self._session.flush()
        await self._session.commit()
        logger.debug("Inserted user %s", user.id)
        return InsertResult(acknowledged=True, inserted_id=user.id)

    async def find_by_email(
        self, email: str, limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(User).where(User.email == email)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [_to_dict(u) for u in result.scalars().all()]

    async def list_all(self) -> List[Dict[str, Any]]:
        """All users ordered by name, password hash excluded."""
        result = await self._session.execute(
            select(*PUBLIC_COLUMNS).order_by(User.nome.asc(), User.id.asc())
        )
        return [dict(row._mapping) for row in result.all()]


async def create_schema(engine: AsyncEngine) -> None:
    """Create the tables (and the unique email index) if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
