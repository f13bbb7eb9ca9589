"""
Study, Quiz and Test session controllers.

Each controller drives one attempt over an AssessmentState:

    not_started --begin()--> active --(questions consumed | expiry)--> finished

``finished`` is terminal. A new attempt needs a new controller. The final
SessionResult is delivered to ``on_complete`` exactly once.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from satprep.session.questions import CHOICE_LABELS, ParsedQuestion
from satprep.session.scoring import Grade, grade
from satprep.session.state import AssessmentState, Mode, ResponseEntry
from satprep.session.timer import CountdownTimer
from satprep.session.timing import full_test_time, quiz_time

logger = logging.getLogger(__name__)


class ControllerStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True)
class SessionResult:
    """Outcome reported when an attempt finishes."""

    mode: Mode
    score: float
    total: int
    correct: int
    grade: Grade
    responses: Tuple[ResponseEntry, ...]
    timed_out: bool = False


CompleteCallback = Callable[[SessionResult], None]
TickCallback = Callable[[int], None]


class SessionController:
    """Shared lifecycle for the three practice modes."""

    mode: Mode

    def __init__(
        self,
        state: AssessmentState,
        questions: Sequence[ParsedQuestion],
        on_complete: Optional[CompleteCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state
        self._questions = list(questions)
        self._on_complete = on_complete
        self._clock = clock
        self._status = ControllerStatus.NOT_STARTED
        self._selected: Optional[str] = None
        self._question_started_at = 0.0
        self._result: Optional[SessionResult] = None
        self.timer: Optional[CountdownTimer] = None

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status == ControllerStatus.ACTIVE

    @property
    def is_finished(self) -> bool:
        return self._status == ControllerStatus.FINISHED

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    def current_question(self) -> Optional[ParsedQuestion]:
        return self.state.current_question()

    def begin(self) -> None:
        """
        Install the questions and enter the active state.

        Raises:
            RuntimeError: If the controller has already been started
            ValueError: If there are no questions
        """
        if self._status != ControllerStatus.NOT_STARTED:
            raise RuntimeError(
                f"{type(self).__name__} cannot be restarted; create a new controller"
            )
        if not self._questions:
            raise ValueError("Cannot begin a session without questions")
        if self.state.mode is None:
            self.state.initialize(None, self.mode)
        self.state.set_questions(self._questions)
        self._status = ControllerStatus.ACTIVE
        self._mark_question_start()
        logger.debug(
            f"{self.mode.value} session started with {len(self._questions)} questions"
        )

    def select(self, choice: str) -> None:
        """Hold ``choice`` as the pending answer for the current question."""
        if choice not in CHOICE_LABELS:
            raise ValueError(f"Unknown choice {choice!r}; expected one of A-D")
        if self.is_active and self._can_select():
            self._selected = choice

    def close(self) -> None:
        """Stop the timer without finishing the attempt."""
        if self.timer is not None:
            self.timer.close()

    def _can_select(self) -> bool:
        return True

    def _mark_question_start(self) -> None:
        self._question_started_at = self._clock()

    def _record_current(self, choice: Optional[str]) -> ResponseEntry:
        question = self.state.current_question()
        assert question is not None
        spent = max(0, int(round(self._clock() - self._question_started_at)))
        entry = ResponseEntry.for_question(question, choice, time_spent_seconds=spent)
        self.state.record_response(entry)
        return entry

    def _move_forward(self) -> None:
        self.state.advance()
        self._selected = None
        self._mark_question_start()

    def _finish(self, timed_out: bool = False) -> None:
        if self._status == ControllerStatus.FINISHED:
            return
        self._status = ControllerStatus.FINISHED
        self._selected = None
        if self.timer is not None:
            self.timer.pause()
            self.state.update_time_remaining(self.timer.remaining)

        total = self.state.question_count
        correct = self.state.correct_count()
        result_grade = grade(correct, total)
        self._result = SessionResult(
            mode=self.mode,
            score=result_grade.percentage,
            total=total,
            correct=correct,
            grade=result_grade,
            responses=self.state.responses,
            timed_out=timed_out,
        )
        logger.info(
            f"{self.mode.value} session finished: {correct}/{total} "
            f"({result_grade.percentage:.1f}%){' after time expired' if timed_out else ''}"
        )
        if self._on_complete is not None:
            self._on_complete(self._result)


class StudyController(SessionController):
    """
    Untimed practice with immediate feedback.

    select -> check_answer (records and reveals) -> next. A question is
    recorded at most once, even when revisited with ``previous()``.
    """

    mode = Mode.STUDY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._revealed = False

    @property
    def is_revealed(self) -> bool:
        return self._revealed

    def _can_select(self) -> bool:
        return not self._revealed

    def check_answer(self) -> Optional[bool]:
        """Reveal the answer for the current selection.

        Returns:
            Whether the selection was correct, or None when nothing was selected
        """
        if not self.is_active or self._revealed or self._selected is None:
            return None
        question = self.state.current_question()
        assert question is not None
        if self.state.response_for(question.id) is None:
            self._record_current(self._selected)
        self._revealed = True
        return question.is_correct(self._selected)

    def next(self) -> bool:
        if not self.is_active or not self._revealed:
            return False
        if self.state.is_last_question:
            self._finish()
            return True
        self._revealed = False
        self._move_forward()
        return True

    def previous(self) -> bool:
        if not self.is_active or self.state.current_index == 0:
            return False
        if self._revealed and self.state.is_last_question:
            return False
        self.state.jump_to(self.state.current_index - 1)
        self._selected = None
        self._revealed = False
        self._mark_question_start()
        return True


class _TimedController(SessionController):
    seconds_for: Callable[[int], int]

    def __init__(
        self,
        state: AssessmentState,
        questions: Sequence[ParsedQuestion],
        on_complete: Optional[CompleteCallback] = None,
        on_tick: Optional[TickCallback] = None,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(state, questions, on_complete=on_complete, clock=clock)
        self._on_tick = on_tick
        self.timer = CountdownTimer(
            type(self).seconds_for(len(self._questions)),
            on_tick=self._handle_tick,
            on_expire=self._handle_expire,
            interval=tick_interval,
        )

    @property
    def time_remaining(self) -> int:
        assert self.timer is not None
        return self.timer.remaining

    def begin(self) -> None:
        super().begin()
        assert self.timer is not None
        self.state.update_time_remaining(self.timer.remaining)
        self.timer.start()

    def _handle_tick(self, remaining: int) -> None:
        self.state.update_time_remaining(remaining)
        if self._on_tick is not None:
            self._on_tick(remaining)

    def _handle_expire(self) -> None:
        raise NotImplementedError


class QuizController(_TimedController):
    """
    Timed at 90 seconds per question, feedback deferred to the end.

    ``next()`` needs a selection. When time runs out the remaining
    questions are skipped without being recorded and the quiz finishes.
    """

    mode = Mode.QUIZ
    seconds_for = staticmethod(quiz_time)

    def next(self) -> bool:
        if not self.is_active or self._selected is None:
            return False
        self._record_current(self._selected)
        if self.state.is_last_question:
            self._finish()
        else:
            self._move_forward()
        return True

    def pause(self) -> None:
        if self.is_active and self.timer is not None:
            self.timer.pause()

    def resume(self) -> None:
        if self.is_active and self.timer is not None:
            self.timer.start()

    def _handle_expire(self) -> None:
        if not self.is_active:
            return
        skipped = 0
        while not self.state.is_last_question:
            self._move_forward()
            skipped += 1
        logger.info(f"Quiz time expired; skipped {skipped} remaining questions")
        self._finish(timed_out=True)


class TestController(_TimedController):
    """
    Timed at 84 seconds per question with no going back and no pause.

    Answering the last question enters review; ``finish()`` submits.
    """

    __test__ = False

    mode = Mode.TEST
    seconds_for = staticmethod(full_test_time)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._in_review = False

    @property
    def in_review(self) -> bool:
        return self._in_review

    def _can_select(self) -> bool:
        return not self._in_review

    def next(self) -> bool:
        if not self.is_active or self._in_review:
            return False
        if self._selected is not None:
            self._record_current(self._selected)
        if self.state.is_last_question:
            self._in_review = True
            self._selected = None
        else:
            self._move_forward()
        return True

    def finish(self) -> None:
        if self.is_active:
            self._finish()

    def _handle_expire(self) -> None:
        if self.is_active:
            logger.info("Test time expired; submitting")
            self._finish(timed_out=True)
