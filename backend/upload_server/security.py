# backend/upload_server/security.py
"""
Bearer token validation.

Tokens are issued by the auth service and signed with the shared secret;
this process only verifies them and reads the claims.
"""

import time
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from .config import settings
from .enums import LogEmoji, LoggerName, LogSource
from .exceptions import UnauthorizedError
from .models import TokenContent
from .services.logger import get_service_logger

logger = get_service_logger(LoggerName.AUTH, LogSource.API, default_emoji=LogEmoji.SECURITY)

http_bearer = HTTPBearer(auto_error=False)


def decode_token(token: str) -> TokenContent:
    """
    Verify a token and return its claims.

    Raises:
        UnauthorizedError: With the decode error as message when the
            signature, expiry or claims are invalid
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        raise UnauthorizedError(str(e)) from e

    try:
        return TokenContent.model_validate(payload)
    except ValidationError as e:
        raise UnauthorizedError("Unauthorized, invalid token") from e


def decode_token_optional(authorization: Optional[str]) -> Optional[TokenContent]:
    """Lenient variant for an ``Authorization`` header value. Never raises."""
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    try:
        return decode_token(token.strip())
    except UnauthorizedError:
        return None


async def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> TokenContent:
    """FastAPI dependency resolving the authenticated identity."""
    if creds is None or not creds.credentials:
        raise UnauthorizedError("Unauthorized, no token provided")

    try:
        return decode_token(creds.credentials)
    except UnauthorizedError as e:
        logger.warning(f"Rejected token: {e.message}")
        raise


def create_access_token(user_id: int, level_name: str, expires_in: Optional[int] = None) -> str:
    """
    Sign a token the way the auth service does.

    Used by tooling and tests; production tokens come from the auth service.
    """
    claims = {"user_id": user_id, "level_name": level_name}
    if expires_in is not None:
        claims["exp"] = int(time.time()) + expires_in
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)
