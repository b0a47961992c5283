"""
Tests for the SQLAlchemy-backed UserRepository (session mocked).
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from database.models import User
from database.repository import UserRepository


def _session_returning(result) -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    return session


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_insert_flushes_and_commits(self):
        session = _session_returning(None)

        def assign_id(user):
            user.id = "abc"

        session.add.side_effect = assign_id
        repo = UserRepository(session)

        result = await repo.insert({"nome": "ANA", "email": "a@x.com", "senha": "h"})

        added = session.add.call_args.args[0]
        assert isinstance(added, User)
        assert added.email == "a@x.com"
        session.flush.assert_awaited_once()
        session.commit.assert_awaited_once()
        assert result.to_dict() == {"acknowledged": True, "insertedId": "abc"}

    @pytest.mark.asyncio
    async def test_find_by_email_applies_limit(self):
        user = User(id="1", nome="ANA", email="a@x.com", senha="h", ativo=True, tipo="Client")
        result = MagicMock()
        result.scalars.return_value.all.return_value = [user]
        session = _session_returning(result)

        found = await UserRepository(session).find_by_email("a@x.com", limit=1)

        stmt = session.execute.call_args.args[0]
        assert "LIMIT" in str(stmt)
        assert found[0]["email"] == "a@x.com"
        assert found[0]["senha"] == "h"

    @pytest.mark.asyncio
    async def test_list_all_projects_out_password(self):
        row = MagicMock()
        row._mapping = {"id": "1", "nome": "ANA"}
        result = MagicMock()
        result.all.return_value = [row]
        session = _session_returning(result)

        users = await UserRepository(session).list_all()

        sql = str(session.execute.call_args.args[0])
        assert "senha" not in sql
        assert "ORDER BY usuarios.nome ASC" in sql
        assert users == [{"id": "1", "nome": "ANA"}]
