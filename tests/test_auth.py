"""
Tests for password hashing, token issuance and the auth gate.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import JWTError, jwt

from auth.dependencies import get_current_user_id
from auth.errors import TokenSigningError
from auth.jwt import create_token, decode_token, issue_token, parse_expiry, user_id_from_token
from auth.password import hash_password, verify_password
from config.settings import Settings


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("Abc123!@", rounds=4)
        assert hashed != "Abc123!@"
        assert verify_password("Abc123!@", hashed)
        assert not verify_password("wrong1!A", hashed)

    def test_same_password_gets_different_hashes(self):
        assert hash_password("Abc123!@", rounds=4) != hash_password("Abc123!@", rounds=4)

    def test_cost_factor_is_recorded(self):
        assert hash_password("Abc123!@").startswith("$2b$10$")

    def test_garbage_hash_does_not_verify(self):
        assert verify_password("Abc123!@", "not-a-bcrypt-hash") is False

    def test_non_string_password_does_not_verify(self):
        hashed = hash_password("123456", rounds=4)
        assert verify_password(123456, hashed) is False


class TestParseExpiry:
    @pytest.mark.parametrize(
        "value, seconds",
        [(3600, 3600), ("3600", 3600), ("45s", 45), ("30m", 1800), ("1h", 3600), ("7d", 604800)],
    )
    def test_accepted_formats(self, value, seconds):
        assert parse_expiry(value) == timedelta(seconds=seconds)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_expiry("soon")


class TestTokens:
    def test_token_embeds_user_id(self, settings):
        token = create_token("user-1", settings)
        payload = decode_token(token, settings)
        assert payload["usuario"] == {"id": "user-1"}
        assert payload["exp"] - payload["iat"] == 3600
        assert user_id_from_token(token, settings) == "user-1"

    def test_wrong_secret_rejected(self, settings):
        token = create_token("user-1", settings)
        other = Settings(secret_key="another-secret")
        with pytest.raises(JWTError):
            decode_token(token, other)

    def test_expired_token_rejected(self, settings):
        token = jwt.encode({"usuario": {"id": "u"}, "exp": 1}, settings.secret_key, algorithm="HS256")
        with pytest.raises(JWTError):
            user_id_from_token(token, settings)

    def test_token_without_user_rejected(self, settings):
        token = jwt.encode({"sub": "x"}, settings.secret_key, algorithm="HS256")
        with pytest.raises(JWTError):
            user_id_from_token(token, settings)

    @pytest.mark.asyncio
    async def test_issue_token(self, settings):
        token = await issue_token("user-2", settings)
        assert user_id_from_token(token, settings) == "user-2"

    @pytest.mark.asyncio
    async def test_issue_token_signing_failure(self):
        bad = Settings(secret_key="s", expires_in="whenever")
        with pytest.raises(TokenSigningError):
            await issue_token("user-2", bad)


class TestAuthGate:
    @pytest.mark.asyncio
    async def test_bearer_header(self, settings):
        token = create_token("user-3", settings)
        user_id = await get_current_user_id(
            authorization=f"Bearer {token}", access_token=None, settings=settings,
        )
        assert user_id == "user-3"

    @pytest.mark.asyncio
    async def test_access_token_header(self, settings):
        token = create_token("user-4", settings)
        user_id = await get_current_user_id(
            authorization=None, access_token=token, settings=settings,
        )
        assert user_id == "user-4"

    @pytest.mark.asyncio
    async def test_missing_token(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(authorization=None, access_token=None, settings=settings)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(
                authorization="Bearer garbage", access_token=None, settings=settings,
            )
        assert exc_info.value.status_code == 401
