"""
Score, grade and feedback calculation for finished sessions.

All functions are pure and deterministic.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

# (minimum percentage, letter, feedback), highest band first
GRADE_BANDS: List[Tuple[float, str, str]] = [
    (90.0, "A", "Excellent work!"),
    (80.0, "B", "Good job! Keep practicing."),
    (70.0, "C", "Nice effort. Review weak areas."),
    (60.0, "D", "Fair attempt. More practice needed."),
]
FAILING_GRADE = ("F", "Review the material and try again.")

FAST_PACE_RATIO = 0.75
SLOW_PACE_RATIO = 1.25


@dataclass(frozen=True)
class Grade:
    """Percentage, letter grade and feedback text."""

    percentage: float
    letter: str
    feedback: str


@dataclass(frozen=True)
class ScoreResult:
    """Full tally of a finished session."""

    total_questions: int
    correct_answers: int
    wrong_answers: int
    percentage: float
    raw_score: int


class Pace(str, Enum):
    """Time spent relative to the recommended allowance."""

    FAST = "fast"
    ON_PACE = "on_pace"
    SLOW = "slow"


def _validate_counts(correct: int, total: int) -> None:
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    if not 0 <= correct <= total:
        raise ValueError(f"correct must be between 0 and {total}, got {correct}")


def score_percentage(correct: int, total: int) -> float:
    """
    ``100 * correct / total``.

    Raises:
        ValueError: If total <= 0 or correct is outside [0, total]
    """
    _validate_counts(correct, total)
    return 100 * correct / total


def letter_grade(percentage: float) -> str:
    for threshold, letter, _ in GRADE_BANDS:
        if percentage >= threshold:
            return letter
    return FAILING_GRADE[0]


def score_feedback(percentage: float) -> str:
    for threshold, _, feedback in GRADE_BANDS:
        if percentage >= threshold:
            return feedback
    return FAILING_GRADE[1]


def grade(correct: int, total: int) -> Grade:
    """
    Grade ``correct`` answers out of ``total``.

    Args:
        correct: Number of correct answers
        total: Number of questions in the session

    Returns:
        Grade with percentage, letter (A-F) and feedback text

    Raises:
        ValueError: If total <= 0 or correct is outside [0, total]
    """
    percentage = score_percentage(correct, total)
    return Grade(
        percentage=percentage,
        letter=letter_grade(percentage),
        feedback=score_feedback(percentage),
    )


def calculate_score(total_questions: int, correct_answers: int) -> ScoreResult:
    """Tally wrong answers and the raw score alongside the percentage."""
    percentage = score_percentage(correct_answers, total_questions)
    return ScoreResult(
        total_questions=total_questions,
        correct_answers=correct_answers,
        wrong_answers=total_questions - correct_answers,
        percentage=percentage,
        raw_score=correct_answers,
    )


def time_pace(time_spent: float, recommended_time: float) -> Tuple[float, Pace]:
    """
    Compare time spent with the recommended time.

    Returns:
        Tuple of (ratio, pace); below 0.75 is fast, above 1.25 is slow

    Raises:
        ValueError: If recommended_time is not positive
    """
    if recommended_time <= 0:
        raise ValueError(f"recommended_time must be positive, got {recommended_time}")
    ratio = time_spent / recommended_time
    if ratio < FAST_PACE_RATIO:
        return ratio, Pace.FAST
    if ratio > SLOW_PACE_RATIO:
        return ratio, Pace.SLOW
    return ratio, Pace.ON_PACE
