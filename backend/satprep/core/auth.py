"""
FastAPI authentication dependencies.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from satprep.models import get_db, User
from .security import decode_token
from .error_responses import ErrorMessages, raise_unauthorized

# HTTP Bearer token scheme. auto_error is off so a missing header produces
# the same 401 envelope as an invalid token instead of Starlette's 403.
security = HTTPBearer(auto_error=False)


def _decode_and_validate_token(token: str) -> int:
    """
    Decode and validate a JWT token, returning the user_id.

    Args:
        token: The JWT token string

    Returns:
        The user_id from the token payload

    Raises:
        HTTPException: 401 if token is invalid or missing user_id
    """
    payload = decode_token(token)
    if payload is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise_unauthorized(ErrorMessages.INVALID_TOKEN_PAYLOAD)

    return user_id


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials from request header
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: 401 if token is missing, invalid, or user not found
    """
    if credentials is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    user_id = _decode_and_validate_token(credentials.credentials)
    user = await db.get(User, user_id)
    if user is None:
        raise_unauthorized(ErrorMessages.USER_NOT_FOUND_AUTH)
    return user
