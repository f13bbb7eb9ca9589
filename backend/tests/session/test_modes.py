"""
Tests for the Study, Quiz and Test controllers.
"""
import pytest

from satprep.session.modes import (
    ControllerStatus,
    QuizController,
    StudyController,
    TestController,
)
from satprep.session.questions import ParsedQuestion
from satprep.session.state import AssessmentState, Mode


def _questions(n, correct="B"):
    return [
        ParsedQuestion(
            id=f"q{i}",
            domain="Algebra" if i % 2 else "Craft and Structure",
            difficulty="Medium",
            section="math" if i % 2 else "english",
            question=f"Question {i}",
            choices={"A": "w", "B": "x", "C": "y", "D": "z"},
            correct_answer=correct,
        )
        for i in range(n)
    ]


class Results:
    def __init__(self):
        self.items = []

    def __call__(self, result):
        self.items.append(result)


@pytest.fixture
def results():
    return Results()


def _expire(controller):
    while controller.timer.is_running:
        controller.timer.tick()


class TestStudyController:
    """Untimed check-then-reveal flow."""

    def test_begin(self, results):
        controller = StudyController(AssessmentState(), _questions(2), on_complete=results)
        assert controller.status is ControllerStatus.NOT_STARTED
        controller.begin()
        assert controller.status is ControllerStatus.ACTIVE
        assert controller.timer is None
        assert controller.state.mode is Mode.STUDY
        assert controller.current_question().id == "q0"

    def test_check_then_next(self, results):
        """Test answering both questions and finishing."""
        state = AssessmentState()
        controller = StudyController(state, _questions(2), on_complete=results)
        controller.begin()

        assert controller.next() is False  # nothing revealed yet
        controller.select("B")
        assert controller.check_answer() is True
        assert controller.is_revealed
        assert controller.next() is True

        controller.select("A")
        assert controller.check_answer() is False
        assert state.correct_count() == 1
        assert state.progress() == (2, 2)

        assert controller.next() is True
        assert controller.is_finished
        assert len(results.items) == 1
        result = results.items[0]
        assert (result.correct, result.total, result.score) == (1, 2, 50.0)
        assert result.grade.letter == "F"

    def test_check_without_selection(self, results):
        controller = StudyController(AssessmentState(), _questions(2), on_complete=results)
        controller.begin()
        assert controller.check_answer() is None
        assert controller.state.responses == ()

    def test_selection_locked_after_reveal(self, results):
        controller = StudyController(AssessmentState(), _questions(2))
        controller.begin()
        controller.select("A")
        controller.check_answer()
        controller.select("B")
        assert controller.selected == "A"

    def test_previous_clears_selection(self, results):
        controller = StudyController(AssessmentState(), _questions(3))
        controller.begin()
        assert controller.previous() is False
        controller.select("B")
        controller.check_answer()
        controller.next()
        controller.select("C")

        assert controller.previous() is True
        assert controller.state.current_index == 0
        assert controller.selected is None
        assert controller.is_revealed is False

    def test_question_recorded_once_when_revisited(self, results):
        """Test that checking a revisited question does not double count."""
        state = AssessmentState()
        controller = StudyController(state, _questions(2), on_complete=results)
        controller.begin()
        controller.select("B")
        controller.check_answer()
        controller.next()
        controller.previous()
        controller.select("B")
        controller.check_answer()

        assert len(state.responses) == 1
        assert state.correct_count() == 1

    def test_previous_refused_after_final_reveal(self, results):
        controller = StudyController(AssessmentState(), _questions(2))
        controller.begin()
        controller.select("B")
        controller.check_answer()
        controller.next()
        controller.select("B")
        controller.check_answer()
        assert controller.previous() is False
        assert controller.state.current_index == 1

    def test_unknown_choice(self):
        controller = StudyController(AssessmentState(), _questions(1))
        controller.begin()
        with pytest.raises(ValueError):
            controller.select("E")

    def test_cannot_restart(self, results):
        controller = StudyController(AssessmentState(), _questions(1), on_complete=results)
        controller.begin()
        controller.select("B")
        controller.check_answer()
        controller.next()
        assert controller.is_finished
        with pytest.raises(RuntimeError):
            controller.begin()
        assert len(results.items) == 1

    def test_no_questions(self):
        with pytest.raises(ValueError):
            StudyController(AssessmentState(), []).begin()

    def test_keeps_existing_session_context(self):
        """Test that begin keeps a session id set up by the caller."""
        state = AssessmentState()
        state.initialize(user_id=5, mode=Mode.STUDY)
        state.set_session_id(77)
        StudyController(state, _questions(1)).begin()
        assert state.session_id == 77
        assert state.user_id == 5


class TestQuizController:
    """Timed quiz with deferred feedback."""

    def test_timer_sized_per_question(self):
        """Test that 10 questions get 900 seconds."""
        controller = QuizController(AssessmentState(), _questions(10))
        controller.begin()
        assert controller.timer.remaining == 900
        assert controller.state.time_remaining == 900
        assert controller.timer.is_running

    def test_next_requires_selection(self):
        controller = QuizController(AssessmentState(), _questions(3))
        controller.begin()
        assert controller.next() is False
        assert controller.state.current_index == 0
        assert controller.state.responses == ()

    def test_answer_all_and_finish(self, results):
        """Test that answering every question yields 100 * correct / 10."""
        controller = QuizController(AssessmentState(), _questions(10), on_complete=results)
        controller.begin()
        for i in range(10):
            controller.select("B" if i < 7 else "A")
            assert controller.next() is True

        assert controller.is_finished
        assert controller.timer.is_running is False
        assert len(results.items) == 1
        result = results.items[0]
        assert result.score == 70.0
        assert result.total == 10
        assert result.correct == 7
        assert result.timed_out is False
        assert controller.next() is False
        assert len(results.items) == 1

    def test_expiry_force_advances(self, results):
        """Test that expiry with 3 answered skips the other 7 and finishes."""
        state = AssessmentState()
        controller = QuizController(state, _questions(10), on_complete=results)
        controller.begin()
        for _ in range(3):
            controller.select("B")
            controller.next()
        controller.select("B")  # pending selection is discarded at expiry

        _expire(controller)

        assert controller.is_finished
        assert state.current_index == 9
        assert len(state.responses) == 3
        assert len(results.items) == 1
        result = results.items[0]
        assert result.total == 10
        assert result.correct == 3
        assert result.score == 30.0
        assert result.timed_out is True

    def test_ticks_update_state(self):
        ticks = []
        controller = QuizController(AssessmentState(), _questions(1), on_tick=ticks.append)
        controller.begin()
        controller.timer.tick()
        assert controller.state.time_remaining == 89
        assert controller.time_remaining == 89
        assert ticks == [89]

    def test_pause_and_resume(self):
        controller = QuizController(AssessmentState(), _questions(2))
        controller.begin()
        controller.timer.tick()
        controller.pause()
        controller.timer.tick()
        assert controller.timer.remaining == 179
        controller.resume()
        controller.timer.tick()
        assert controller.timer.remaining == 178

    def test_resume_after_finish_is_noop(self, results):
        controller = QuizController(AssessmentState(), _questions(1), on_complete=results)
        controller.begin()
        controller.select("B")
        controller.next()
        controller.resume()
        assert controller.timer.is_running is False

    def test_time_spent_recorded(self):
        now = [100.0]
        state = AssessmentState()
        controller = QuizController(state, _questions(2), clock=lambda: now[0])
        controller.begin()
        now[0] = 112.4
        controller.select("B")
        controller.next()
        assert state.responses[0].time_spent_seconds == 12


class TestTestController:
    """Timed test with review before submission."""

    def test_timer_sized_per_question(self):
        controller = TestController(AssessmentState(), _questions(10))
        controller.begin()
        assert controller.timer.remaining == 840

    def test_last_next_enters_review(self, results):
        """Test that reaching the end enters review without finishing."""
        state = AssessmentState()
        controller = TestController(state, _questions(3), on_complete=results)
        controller.begin()
        controller.select("B")
        controller.next()
        controller.next()  # skipped, nothing recorded
        controller.select("B")
        controller.next()

        assert controller.in_review
        assert controller.is_active
        assert results.items == []
        assert len(state.responses) == 2
        assert controller.next() is False

        controller.finish()
        assert controller.is_finished
        assert len(results.items) == 1
        assert results.items[0].correct == 2
        assert results.items[0].total == 3
        assert controller.timer.is_running is False

    def test_finish_is_reported_once(self, results):
        controller = TestController(AssessmentState(), _questions(1), on_complete=results)
        controller.begin()
        controller.finish()
        controller.finish()
        _expire(controller)
        assert len(results.items) == 1

    def test_expiry_finishes_immediately(self, results):
        """Test that expiry submits even in the middle of the test."""
        state = AssessmentState()
        controller = TestController(state, _questions(5), on_complete=results)
        controller.begin()
        controller.select("B")
        controller.next()

        _expire(controller)

        assert controller.is_finished
        assert controller.in_review is False
        assert state.current_index == 1
        result = results.items[0]
        assert result.timed_out is True
        assert (result.correct, result.total) == (1, 5)

    def test_no_previous_or_pause(self):
        controller = TestController(AssessmentState(), _questions(2))
        assert not hasattr(controller, "previous")
        assert not hasattr(controller, "pause")

    def test_selection_locked_in_review(self):
        controller = TestController(AssessmentState(), _questions(1))
        controller.begin()
        controller.next()
        controller.select("C")
        assert controller.selected is None

    def test_close_stops_timer(self):
        controller = TestController(AssessmentState(), _questions(2))
        controller.begin()
        controller.close()
        assert controller.timer.is_running is False
        assert controller.is_active
