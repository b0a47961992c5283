"""
UserService — registration, listing and login for the ``/usuarios`` API.

The service is built per request with the repository it should use and
the active settings; it never reaches for a module-level database
handle. Failures are raised as ``auth.errors`` exceptions and mapped to
HTTP responses by ``api.middleware``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

from sqlalchemy.exc import SQLAlchemyError

from auth.errors import (
    IncorrectPassword,
    LoginFailed,
    RequestValidationFailed,
    StoreError,
    UserListingFailed,
    UserNotRegistered,
)
from auth.jwt import issue_token
from auth.password import hash_password, verify_password
from config.settings import Settings
from database.repository import InsertResult
from utils.validation import (
    ValidationContext,
    login_rules,
    registration_rules,
    run_validation,
    to_boolean,
)

logger = logging.getLogger(__name__)

_STORED_FIELDS = ("nome", "email", "senha", "ativo", "tipo", "avatar")


class UserService:
    def __init__(self, repository, settings: Settings):
        self.repository = repository
        self.settings = settings

    def default_avatar(self, name: str) -> str:
        return self.settings.avatar_url_template.format(name=quote_plus(name))

    async def register(
        self,
        payload: Dict[str, Any],
        identifier: Optional[str] = None,
    ) -> InsertResult:
        """Validate, hash the password and insert a new user."""
        context = ValidationContext(repository=self.repository, identifier=identifier)
        errors, data = await run_validation(payload, registration_rules(), context)
        if errors:
            raise RequestValidationFailed(errors)

        document = {key: data.get(key) for key in _STORED_FIELDS}
        document["ativo"] = to_boolean(document["ativo"])
        if not document["avatar"]:
            document["avatar"] = self.default_avatar(document["nome"])
        # bcrypt is CPU-bound; keep it off the event loop.
        document["senha"] = await asyncio.to_thread(
            hash_password, document["senha"], self.settings.bcrypt_rounds,
        )

        try:
            result = await self.repository.insert(document)
        except SQLAlchemyError as exc:
            logger.warning("Insert of %s rejected by the store: %s", document["email"], exc)
            raise StoreError(exc) from exc

        logger.info("Registered user %s (%s)", result.inserted_id, document["email"])
        return result

    async def list_users(self) -> List[Dict[str, Any]]:
        """All users sorted by name, without password hashes."""
        try:
            users = await self.repository.list_all()
        except Exception as exc:
            logger.warning("Listing users failed: %s", exc)
            raise UserListingFailed(exc) from exc
        return [{k: v for k, v in u.items() if k != "senha"} for u in users]

    async def login(self, payload: Dict[str, Any]) -> str:
        """Check the credentials and return a signed access token."""
        errors, data = await run_validation(payload, login_rules())
        if errors:
            raise RequestValidationFailed(errors)

        email, password = data["email"], data["senha"]
        try:
            found = await self.repository.find_by_email(email, limit=1)
            if not found:
                logger.info("Login attempt for unknown email %s", email)
                raise UserNotRegistered(email)

            user = found[0]
            matches = await asyncio.to_thread(verify_password, password, user["senha"])
            if not matches:
                logger.info("Wrong password for %s", email)
                raise IncorrectPassword()

            token = await issue_token(str(user["id"]), self.settings)
        except (UserNotRegistered, IncorrectPassword):
            raise
        except Exception as exc:
            logger.exception("Login for %s failed unexpectedly", email)
            raise LoginFailed(exc) from exc

        logger.info("Login: %s (%s)", email, user["id"])
        return token
