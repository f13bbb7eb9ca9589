"""
Input validation and sanitization utilities.
"""

import re
from typing import Optional


class PasswordValidator:
    """
    Password length validator for account credentials.

    The minimum counts characters. The maximum is in UTF-8 bytes, the
    bcrypt input limit.
    """

    MIN_LENGTH = 6
    MAX_BYTES = 72

    @classmethod
    def validate(cls, password: str) -> tuple[bool, Optional[str]]:
        """
        Validate password length.

        Args:
            password: Password to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if len(password) < cls.MIN_LENGTH:
            return False, f"Password must be at least {cls.MIN_LENGTH} characters."

        if len(password.encode("utf-8")) > cls.MAX_BYTES:
            return False, f"Password must not exceed {cls.MAX_BYTES} bytes."

        return True, None


class StringSanitizer:
    """
    String sanitization utilities for free-text user input.
    """

    # Control characters to strip (except newlines, tabs, carriage returns)
    CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

    @classmethod
    def sanitize_string(cls, value: str) -> str:
        """
        Strip control characters and surrounding whitespace.

        Args:
            value: String to sanitize

        Returns:
            Sanitized string
        """
        value = cls.CONTROL_CHARS_PATTERN.sub("", value)
        return value.strip()

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """
        Sanitize a display name, collapsing runs of whitespace.

        Args:
            name: Name to sanitize

        Returns:
            Sanitized name (possibly empty)
        """
        name = cls.sanitize_string(name)
        return re.sub(r"\s+", " ", name)


class EmailValidator:
    """
    Email normalization utilities.
    """

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """
        Normalize email address for consistency.

        Args:
            email: Email address to normalize

        Returns:
            Lower-cased email address without surrounding whitespace
        """
        return email.strip().lower()


class UsernameGenerator:
    """
    Derive unique usernames from email addresses.

    The local part of the email is reduced to ``[a-zA-Z0-9_]``, truncated,
    and prefixed with ``user_`` when too short. Collisions are resolved by
    appending a short suffix.
    """

    MAX_BASE_LENGTH = 17
    MIN_LENGTH = 3
    SUFFIX_BASE_LENGTH = 14
    _NON_WORD = re.compile(r"[^a-zA-Z0-9_]")

    @classmethod
    def base_from_email(cls, email: str) -> str:
        """
        Build the candidate username for an email address.

        Args:
            email: Email address (only the local part is used)

        Returns:
            Candidate username
        """
        local_part = email.split("@", 1)[0]
        base = cls._NON_WORD.sub("_", local_part)[: cls.MAX_BASE_LENGTH]
        if len(base) < cls.MIN_LENGTH:
            base = f"user_{base}"
        return base

    @classmethod
    def with_suffix(cls, base: str, suffix: str) -> str:
        """
        Build the fallback username used when the base is already taken.

        Args:
            base: Candidate username that collided
            suffix: Short distinguishing token

        Returns:
            Suffixed username
        """
        return f"{base[: cls.SUFFIX_BASE_LENGTH]}_{suffix[:3]}"

