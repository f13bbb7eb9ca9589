"""
Authentication endpoints: registration, sign-in, Google identity, profile.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from satprep.api.deps import get_identity_client
from satprep.core.auth import get_current_user
from satprep.core.datetime_utils import utc_now
from satprep.core.db_error_handling import handle_db_error
from satprep.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_conflict,
    raise_server_error,
    raise_unauthorized,
)
from satprep.core.security import create_access_token, hash_password, verify_password
from satprep.core.validators import UsernameGenerator
from satprep.models import get_db, User
from satprep.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    GoogleAuthRequest,
    UserEnvelope,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
)
from satprep.schemas.base import MessageResponse
from satprep.services.identity import GoogleIdentityClient, IdentityProviderError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _username_taken(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(User.id).where(User.username == username))
    return result.first() is not None


async def _unique_username(db: AsyncSession, email: Optional[str]) -> str:
    """
    Derive a username from the email local part, suffixing on collision.
    """
    base = UsernameGenerator.base_from_email(email or "user")
    if not await _username_taken(db, base):
        return base
    while True:
        candidate = UsernameGenerator.with_suffix(base, uuid.uuid4().hex)
        if not await _username_taken(db, candidate):
            return candidate


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token({"user_id": user.id})
    return AuthResponse(token=token, user=UserResponse.from_user(user))


@router.post("/register", response_model=AuthResponse)
async def register_user(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """
    Register a new user account.

    Args:
        user_data: User registration data
        db: Database session

    Returns:
        Bearer token and the created user

    Raises:
        HTTPException: 409 if email already exists
    """
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none() is not None:
        raise_conflict(ErrorMessages.EMAIL_ALREADY_REGISTERED)

    async with handle_db_error(db, "create user account"):
        new_user = User(
            name=user_data.name,
            username=await _unique_username(db, user_data.email),
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            last_login_at=utc_now(),
        )
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)

    logger.info(f"Registered user {new_user.id} ({new_user.username})")
    return _auth_response(new_user)


@router.post("/login", response_model=AuthResponse)
async def login_user(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """
    Authenticate with email (or username) and password.

    Raises:
        HTTPException: 401 if credentials are invalid
    """
    identifier = credentials.email.strip()
    result = await db.execute(
        select(User).where(
            or_(
                func.lower(User.email) == identifier.lower(),
                User.username == identifier,
            )
        )
    )
    # An email match wins over a username that happens to look the same
    candidates = list(result.scalars().all())
    user = next(
        (u for u in candidates if (u.email or "").lower() == identifier.lower()),
        candidates[0] if candidates else None,
    )

    if user is None or not verify_password(credentials.password, user.password_hash):
        raise_unauthorized(ErrorMessages.INVALID_CREDENTIALS)

    user.last_login_at = utc_now()  # type: ignore
    await db.commit()
    await db.refresh(user)

    return _auth_response(user)


@router.post("/google", response_model=AuthResponse)
async def google_sign_in(
    request_data: GoogleAuthRequest,
    db: AsyncSession = Depends(get_db),
    identity_client: GoogleIdentityClient = Depends(get_identity_client),
):
    """
    Sign in with a Google access token.

    The account is found by Google subject id, then by email (linking the
    Google identity to it), and is otherwise created.

    Raises:
        HTTPException: 401 if the identity provider rejects the token
    """
    try:
        identity = await identity_client.fetch_identity(request_data.access_token)
    except IdentityProviderError as e:
        logger.warning(f"Google sign-in failed: {e}")
        raise_unauthorized(ErrorMessages.GOOGLE_AUTH_FAILED)

    result = await db.execute(select(User).where(User.google_id == identity.subject))
    user = result.scalar_one_or_none()

    async with handle_db_error(db, "sign in with Google"):
        if user is None and identity.email:
            result = await db.execute(select(User).where(User.email == identity.email))
            user = result.scalar_one_or_none()
            if user is not None:
                user.google_id = identity.subject  # type: ignore
                logger.info(f"Linked Google identity to existing user {user.id}")

        if user is None:
            fallback_name = (identity.email or "").split("@", 1)[0] or "SAT Student"
            user = User(
                name=identity.name or fallback_name,
                username=await _unique_username(db, identity.email),
                email=identity.email,
                google_id=identity.subject,
            )
            db.add(user)

        user.last_login_at = utc_now()  # type: ignore
        await db.commit()
        await db.refresh(user)

    return _auth_response(user)


@router.get("/me", response_model=UserEnvelope)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return UserEnvelope(user=UserResponse.from_user(current_user))


@router.patch("/profile", response_model=UserEnvelope)
async def update_profile(
    profile_update: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the display name."""
    async with handle_db_error(db, "update profile"):
        current_user.name = profile_update.name  # type: ignore
        await db.commit()
        await db.refresh(current_user)
    return UserEnvelope(user=UserResponse.from_user(current_user))


@router.post("/link-google", response_model=UserEnvelope)
async def link_google(
    request_data: GoogleAuthRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    identity_client: GoogleIdentityClient = Depends(get_identity_client),
):
    """
    Attach a Google identity to the signed-in account.

    The account's email is filled from Google only when it has none.

    Raises:
        HTTPException: 409 if the Google identity belongs to another user
    """
    try:
        identity = await identity_client.fetch_identity(request_data.access_token)
    except IdentityProviderError as e:
        logger.error(f"Google link failed for user {current_user.id}: {e}")
        raise_server_error(ErrorMessages.GOOGLE_LINK_FAILED)

    result = await db.execute(
        select(User).where(User.google_id == identity.subject, User.id != current_user.id)
    )
    if result.scalar_one_or_none() is not None:
        raise_conflict(ErrorMessages.GOOGLE_ALREADY_LINKED)

    async with handle_db_error(db, "link Google account"):
        current_user.google_id = identity.subject  # type: ignore
        if current_user.email is None and identity.email:
            taken = await db.execute(select(User.id).where(User.email == identity.email))
            if taken.first() is None:
                current_user.email = identity.email  # type: ignore
        await db.commit()
        await db.refresh(current_user)

    return UserEnvelope(user=UserResponse.from_user(current_user))


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request_data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace the account password.

    Raises:
        HTTPException: 400 for Google-only accounts, 401 if the current
            password is wrong
    """
    if not current_user.password_hash:
        raise_bad_request(ErrorMessages.PASSWORD_NOT_SET)
    if not verify_password(request_data.current_password, current_user.password_hash):
        raise_unauthorized(ErrorMessages.CURRENT_PASSWORD_INCORRECT)

    async with handle_db_error(db, "change password"):
        current_user.password_hash = hash_password(request_data.new_password)  # type: ignore
        await db.commit()

    return MessageResponse(message="Password updated successfully")
