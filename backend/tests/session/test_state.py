"""
Tests for AssessmentState and ProgressState.
"""
import itertools

import pytest

from satprep.session.questions import ParsedQuestion
from satprep.session.state import AssessmentState, Mode, ProgressState, ResponseEntry


def _questions(n):
    return [
        ParsedQuestion(
            id=f"q{i}",
            domain="Algebra",
            difficulty="Easy",
            section="math",
            question=f"Question {i}",
            choices={"A": "1", "B": "2", "C": "3", "D": "4"},
            correct_answer="B",
        )
        for i in range(n)
    ]


@pytest.fixture
def state():
    s = AssessmentState()
    s.initialize(user_id=1, mode=Mode.QUIZ)
    s.set_questions(_questions(3))
    return s


class TestLifecycle:
    def test_initialize_clears_everything(self, state):
        """Test that initialize starts a fresh context without questions."""
        state.set_session_id(9)
        state.advance()
        state.record_response(ResponseEntry("q0", "B", True))
        state.update_time_remaining(30)

        state.initialize(user_id=2, mode="test")

        assert state.mode is Mode.TEST
        assert state.user_id == 2
        assert state.session_id is None
        assert state.questions == ()
        assert state.responses == ()
        assert state.current_index == 0
        assert state.time_remaining == 0

    def test_set_questions_resets_position(self, state):
        state.advance()
        state.set_questions(_questions(5))
        assert state.current_index == 0
        assert state.question_count == 5

    def test_reset(self, state):
        state.set_session_id(3)
        state.record_response(ResponseEntry("q0", "B", True))
        state.reset()
        assert state.mode is None
        assert state.session_id is None
        assert state.current_question() is None
        assert state.correct_count() == 0


class TestNavigation:
    def test_advance_clamps_at_last(self, state):
        """Test that advance at the last index leaves the position unchanged."""
        state.advance()
        state.advance()
        assert state.current_index == 2
        assert state.is_last_question
        state.advance()
        assert state.current_index == 2

    def test_advance_without_questions(self):
        empty = AssessmentState()
        empty.advance()
        assert empty.current_index == 0
        assert empty.current_question() is None
        assert empty.progress() == (1, 0)

    def test_jump_to(self, state):
        state.jump_to(2)
        assert state.current_question().id == "q2"
        state.jump_to(3)
        state.jump_to(-1)
        assert state.current_index == 2

    def test_progress(self, state):
        assert state.progress() == (1, 3)
        state.advance()
        assert state.progress() == (2, 3)


class TestResponses:
    def test_correct_count_for_any_interleaving(self, state):
        """Test that correct_count equals the number of correct entries."""
        for flags in itertools.product([True, False], repeat=4):
            state.initialize(1, Mode.QUIZ)
            for i, flag in enumerate(flags):
                state.record_response(ResponseEntry(f"q{i}", "A", flag))
            assert state.correct_count() == sum(flags)

    def test_duplicates_accumulate(self, state):
        """Test that recording a question twice keeps both entries."""
        state.record_response(ResponseEntry("q0", "B", True))
        state.record_response(ResponseEntry("q0", "B", True))
        assert len(state.responses) == 2
        assert state.correct_count() == 2

    def test_response_for_returns_latest(self, state):
        state.record_response(ResponseEntry("q0", "A", False))
        state.record_response(ResponseEntry("q0", "B", True))
        assert state.response_for("q0").user_answer == "B"
        assert state.response_for("q1") is None

    def test_entry_for_question(self, state):
        question = state.current_question()
        entry = ResponseEntry.for_question(question, "B", time_spent_seconds=12)
        assert entry.is_correct is True
        assert entry.correct_answer == "B"
        assert entry.domain == "Algebra"
        assert entry.section == "math"
        assert ResponseEntry.for_question(question, None).is_correct is False

    def test_time_remaining_floor(self, state):
        state.update_time_remaining(-5)
        assert state.time_remaining == 0


class TestProgressState:
    def test_add_session_prepends(self):
        progress = ProgressState(user_id=1)
        progress.add_session({"id": 1})
        progress.add_session({"id": 2})
        assert [s["id"] for s in progress.recent_sessions] == [2, 1]

    def test_reset(self):
        progress = ProgressState(user_id=1, is_loading=True, error="boom")
        progress.add_session({"id": 1})
        progress.reset()
        assert progress == ProgressState()
