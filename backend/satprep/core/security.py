"""
Security utilities for password hashing and JWT token management.
"""
from datetime import timedelta

from satprep.core.datetime_utils import utc_now
from typing import Optional, Dict, Any
import bcrypt
from jose import JWTError, jwt
from satprep.core.config import settings
from satprep.core.validators import PasswordValidator


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain text password against a hashed password.

    Accounts created through the identity provider have no password hash;
    they never match. Neither does a candidate longer than bcrypt accepts.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to verify against

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    candidate = plain_password.encode("utf-8")
    if len(candidate) > PasswordValidator.MAX_BYTES:
        return False
    return bcrypt.checkpw(candidate, hashed_password.encode("utf-8"))


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    The payload carries only the user identifier plus the standard ``exp``
    and ``iat`` claims. There is no refresh token; clients sign in again
    once the token expires.

    Args:
        data: Dictionary of data to encode in the token (``user_id``)
        expires_delta: Optional custom expiration time delta

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    now = utc_now()
    expire = now + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(
        to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid, None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None
