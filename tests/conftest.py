"""
Shared fixtures: an in-memory repository and a TestClient wired to it.
"""

import uuid
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from auth.dependencies import get_user_repository
from config.settings import Settings, get_settings
from database.repository import InsertResult
from main import app


class FakeUserRepository:
    """Dict-backed stand-in for ``UserRepository``."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []

    async def insert(self, document: Dict[str, Any]) -> InsertResult:
        doc = dict(document, id=str(uuid.uuid4()))
        self.docs.append(doc)
        return InsertResult(acknowledged=True, inserted_id=doc["id"])

    async def find_by_email(self, email: str, limit: Optional[int] = None):
        found = [dict(d) for d in self.docs if d["email"] == email]
        return found[:limit] if limit is not None else found

    async def list_all(self):
        ordered = sorted(self.docs, key=lambda d: (d["nome"], d["id"]))
        return [{k: v for k, v in d.items() if k != "senha"} for d in ordered]


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key="test-secret", expires_in="1h", bcrypt_rounds=4)


@pytest.fixture
def repository() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def client(repository, settings):
    app.dependency_overrides[get_user_repository] = lambda: repository
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
