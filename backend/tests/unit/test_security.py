#!/usr/bin/env python3
"""
Unit tests for bearer token validation.
"""

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from upload_server.config import settings
from upload_server.exceptions import UnauthorizedError
from upload_server.security import (
    decode_token,
    decode_token_optional,
    get_current_user,
)


@pytest.mark.unit
@pytest.mark.security
class TestDecodeToken:
    def test_valid_token(self, make_token):
        content = decode_token(make_token(7, "User"))

        assert content.user_id == 7
        assert content.level_name == "User"

    def test_extra_claims_are_ignored(self):
        token = jwt.encode(
            {"user_id": 3, "level_name": "Admin", "email": "a@example.com"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token).level_name == "Admin"

    def test_wrong_secret(self):
        token = jwt.encode(
            {"user_id": 7, "level_name": "User"}, "another-secret", algorithm="HS256"
        )

        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_expired_token(self, make_token):
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(make_token(7, "User", expires_in=-60))

        assert "expired" in exc_info.value.message.lower()

    def test_missing_claims(self):
        token = jwt.encode(
            {"sub": "7"}, settings.jwt_secret, algorithm=settings.jwt_algorithm
        )

        with pytest.raises(UnauthorizedError, match="invalid token"):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(UnauthorizedError):
            decode_token("not.a.jwt")


@pytest.mark.unit
@pytest.mark.security
class TestOptionalDecode:
    def test_bearer_header(self, make_token):
        content = decode_token_optional(f"Bearer {make_token(9)}")
        assert content is not None and content.user_id == 9

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer broken"])
    def test_unusable_headers(self, header):
        assert decode_token_optional(header) is None


@pytest.mark.unit
@pytest.mark.security
class TestCurrentUserDependency:
    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(UnauthorizedError, match="no token provided"):
            await get_current_user(None)

    @pytest.mark.asyncio
    async def test_resolves_identity(self, make_token):
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=make_token(7))

        user = await get_current_user(creds)

        assert user.user_id == 7
