"""
Tests for score, grade and pace calculation.
"""
import pytest

from satprep.session.scoring import (
    Pace,
    calculate_score,
    grade,
    letter_grade,
    score_feedback,
    score_percentage,
    time_pace,
)


class TestGrade:
    """Tests for grade()."""

    def test_percentage_is_exact(self):
        """Test that the percentage is 100 * correct / total for every count."""
        for total in (1, 3, 7, 10, 44):
            for correct in range(total + 1):
                assert grade(correct, total).percentage == 100 * correct / total

    def test_letter_is_monotonic(self):
        """Test that fewer correct answers never give a better letter."""
        order = "ABCDF"
        for total in (5, 10, 27):
            letters = [grade(correct, total).letter for correct in range(total, -1, -1)]
            ranks = [order.index(letter) for letter in letters]
            assert ranks == sorted(ranks)

    @pytest.mark.parametrize(
        "percentage,letter",
        [
            (100, "A"),
            (90, "A"),
            (89.99, "B"),
            (80, "B"),
            (79.9, "C"),
            (70, "C"),
            (60, "D"),
            (59.9, "F"),
            (0, "F"),
        ],
    )
    def test_thresholds(self, percentage, letter):
        assert letter_grade(percentage) == letter

    def test_five_distinct_feedback_strings(self):
        messages = {score_feedback(p) for p in (95, 85, 75, 65, 10)}
        assert len(messages) == 5

    def test_grade_bundles_feedback(self):
        result = grade(9, 10)
        assert result.letter == "A"
        assert result.feedback == "Excellent work!"

    @pytest.mark.parametrize("correct,total", [(0, 0), (1, 0), (-1, 5), (6, 5)])
    def test_invalid_counts(self, correct, total):
        """Test that impossible tallies raise ValueError."""
        with pytest.raises(ValueError):
            grade(correct, total)


class TestCalculateScore:
    def test_tally(self):
        result = calculate_score(total_questions=8, correct_answers=6)
        assert result.wrong_answers == 2
        assert result.raw_score == 6
        assert result.percentage == 75.0

    def test_zero_total(self):
        with pytest.raises(ValueError):
            score_percentage(0, 0)


class TestTimePace:
    @pytest.mark.parametrize(
        "spent,expected",
        [(30, Pace.FAST), (67.5, Pace.ON_PACE), (90, Pace.ON_PACE), (112.5, Pace.ON_PACE), (120, Pace.SLOW)],
    )
    def test_pace(self, spent, expected):
        ratio, pace = time_pace(spent, 90)
        assert ratio == spent / 90
        assert pace == expected

    def test_recommended_must_be_positive(self):
        with pytest.raises(ValueError):
            time_pace(10, 0)
