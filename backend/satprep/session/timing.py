"""
Session time allowances and countdown display helpers.

Quiz mode allows 90 seconds per question. Test mode follows the SAT pace
of 84 seconds (1:24) per question. Study mode is untimed.
"""

QUIZ_SECONDS_PER_QUESTION = 90
TEST_SECONDS_PER_QUESTION = 84
WARNING_THRESHOLD_SECONDS = 60


def quiz_time(question_count: int) -> int:
    """Total quiz allowance in seconds."""
    return question_count * QUIZ_SECONDS_PER_QUESTION


def full_test_time(question_count: int) -> int:
    """Total test allowance in seconds."""
    return question_count * TEST_SECONDS_PER_QUESTION


def format_time_remaining(seconds: int) -> str:
    """
    Format seconds as ``m:ss`` (``0:00`` once time is up).

    >>> format_time_remaining(754)
    '12:34'
    """
    if seconds <= 0:
        return "0:00"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def is_time_warning(seconds: int) -> bool:
    """True during the final minute."""
    return 0 < seconds <= WARNING_THRESHOLD_SECONDS


def is_time_expired(seconds: int) -> bool:
    return seconds <= 0


def parse_time_string(value: str) -> int:
    """
    Parse ``m:ss`` back into seconds.

    Raises:
        ValueError: If the string is not two colon-separated integers or the
            seconds part is outside 0-59
    """
    parts = value.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Expected 'm:ss', got {value!r}")
    minutes, secs = (int(part) for part in parts)
    if minutes < 0 or not 0 <= secs < 60:
        raise ValueError(f"Expected 'm:ss', got {value!r}")
    return minutes * 60 + secs
