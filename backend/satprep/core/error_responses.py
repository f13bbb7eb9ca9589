"""
Standardized error response messages and builders.

This module provides consistent error messages and HTTPException builders
for the entire API. The application's exception handlers turn every
HTTPException raised through these helpers into the JSON envelope
``{"success": false, "error": <detail>}``.

Error Message Format Guidelines:
- Use sentence case (capitalize first letter only)
- End with a period for complete sentences
- Include relevant IDs in parentheses when helpful for debugging: "(ID: 123)"
- Use "Please try again later." for transient server errors

Usage:
    from satprep.core.error_responses import ErrorMessages, raise_not_found

    if session is None:
        raise_not_found(ErrorMessages.session_not_found(session_id))
"""

from typing import NoReturn, Optional

from fastapi import HTTPException, status


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Authentication Errors (401)
    # ==========================================================================
    INVALID_CREDENTIALS = "Invalid email or password."
    INVALID_TOKEN = "Invalid authentication token."
    INVALID_TOKEN_PAYLOAD = "Invalid token payload."
    USER_NOT_FOUND_AUTH = "User not found."
    GOOGLE_AUTH_FAILED = "Google authentication failed."
    CURRENT_PASSWORD_INCORRECT = "Current password is incorrect."

    # ==========================================================================
    # Conflict Errors (409)
    # ==========================================================================
    EMAIL_ALREADY_REGISTERED = "An account with that email already exists."
    GOOGLE_ALREADY_LINKED = (
        "This Google account is already linked to a different user."
    )
    SESSION_ALREADY_ENDED = "Session has already ended."

    # ==========================================================================
    # Bad Request Errors (400)
    # ==========================================================================
    PASSWORD_NOT_SET = (
        "This account signs in with Google and has no password to change."
    )

    # ==========================================================================
    # Server Errors (500)
    # ==========================================================================
    QUESTION_BANK_NOT_LOADED = (
        "Question bank is not loaded yet. Please try again later."
    )
    GOOGLE_LINK_FAILED = "Failed to link Google account. Please try again later."
    INTERNAL_SERVER_ERROR = "Internal server error"

    # ==========================================================================
    # Template Methods for Dynamic Messages
    # ==========================================================================
    @staticmethod
    def session_not_found(session_id: int) -> str:
        """Message when a specific practice session is not found."""
        return f"Session not found (ID: {session_id})."

    @staticmethod
    def question_not_found(question_id: str) -> str:
        """Message when a specific question is not found."""
        return f"Question not found (ID: {question_id})."

    @staticmethod
    def database_operation_failed(operation: str) -> str:
        """Generic message for database operation failures."""
        return f"Failed to {operation}. Please try again later."


# ==============================================================================
# HTTPException Builder Functions
# ==============================================================================


def raise_bad_request(detail: str) -> NoReturn:
    """Raise a 400 Bad Request exception.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 400 Bad Request
    """
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def raise_unauthorized(
    detail: str,
    include_www_authenticate: bool = True,
) -> NoReturn:
    """Raise a 401 Unauthorized exception.

    Args:
        detail: User-facing error message
        include_www_authenticate: Whether to include WWW-Authenticate header

    Raises:
        HTTPException: 401 Unauthorized
    """
    headers = {"WWW-Authenticate": "Bearer"} if include_www_authenticate else None
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=headers,
    )


def raise_not_found(detail: str) -> NoReturn:
    """Raise a 404 Not Found exception.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 404 Not Found
    """
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def raise_conflict(detail: str) -> NoReturn:
    """Raise a 409 Conflict exception.

    Use when the request conflicts with current state (e.g., duplicate creation).

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 409 Conflict
    """
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


def raise_server_error(
    detail: str,
    error_id: Optional[str] = None,
) -> NoReturn:
    """Raise a 500 Internal Server Error exception.

    Always use user-friendly messages; log technical details separately.

    Args:
        detail: User-facing error message (should be generic and friendly)
        error_id: Optional error tracking ID to include in response

    Raises:
        HTTPException: 500 Internal Server Error
    """
    if error_id:
        detail = f"{detail} (Error ID: {error_id})"

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )
