"""
Client-side session state containers.

AssessmentState holds one practice attempt in progress: the mode, the
ordered questions, the current position, every recorded response and the
remaining time. ProgressState holds the user's history as last fetched
from the backend.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from satprep.session.questions import ParsedQuestion


class Mode(str, Enum):
    """Practice mode."""

    STUDY = "study"
    QUIZ = "quiz"
    TEST = "test"


@dataclass(frozen=True)
class ResponseEntry:
    """One recorded answer (``user_answer`` is None when skipped)."""

    question_id: str
    user_answer: Optional[str]
    is_correct: bool
    time_spent_seconds: int = 0
    correct_answer: Optional[str] = None
    section: Optional[str] = None
    domain: Optional[str] = None

    @classmethod
    def for_question(
        cls,
        question: ParsedQuestion,
        user_answer: Optional[str],
        time_spent_seconds: int = 0,
    ) -> "ResponseEntry":
        """Build an entry, grading ``user_answer`` against the question."""
        return cls(
            question_id=question.id,
            user_answer=user_answer,
            is_correct=question.is_correct(user_answer),
            time_spent_seconds=time_spent_seconds,
            correct_answer=question.correct_answer,
            section=question.section,
            domain=question.domain,
        )


class AssessmentState:
    """
    Mutable state of the attempt in progress.

    Responses are append-only: recording the same question twice keeps both
    entries and both count toward ``correct_count()``.
    """

    def __init__(self) -> None:
        self.session_id: Optional[int] = None
        self.user_id: Optional[int] = None
        self.mode: Optional[Mode] = None
        self._questions: List[ParsedQuestion] = []
        self._responses: List[ResponseEntry] = []
        self.current_index = 0
        self.time_remaining = 0

    @property
    def questions(self) -> Tuple[ParsedQuestion, ...]:
        return tuple(self._questions)

    @property
    def responses(self) -> Tuple[ResponseEntry, ...]:
        return tuple(self._responses)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def is_last_question(self) -> bool:
        return bool(self._questions) and self.current_index == len(self._questions) - 1

    def initialize(self, user_id: Optional[int], mode: Mode) -> None:
        """Start a fresh attempt context; questions are installed separately."""
        self.session_id = None
        self.user_id = user_id
        self.mode = Mode(mode)
        self._questions = []
        self._responses = []
        self.current_index = 0
        self.time_remaining = 0

    def set_session_id(self, session_id: Optional[int]) -> None:
        self.session_id = session_id

    def set_questions(self, questions: Sequence[ParsedQuestion]) -> None:
        """Install the ordered question list and return to the first question."""
        self._questions = list(questions)
        self.current_index = 0

    def record_response(self, entry: ResponseEntry) -> None:
        self._responses.append(entry)

    def advance(self) -> None:
        """Move forward one question, stopping at the last one."""
        if not self._questions:
            return
        self.current_index = min(self.current_index + 1, len(self._questions) - 1)

    def jump_to(self, index: int) -> None:
        """Move to ``index``; out-of-range indices are ignored."""
        if 0 <= index < len(self._questions):
            self.current_index = index

    def current_question(self) -> Optional[ParsedQuestion]:
        if 0 <= self.current_index < len(self._questions):
            return self._questions[self.current_index]
        return None

    def progress(self) -> Tuple[int, int]:
        """(1-based position, total questions)."""
        return self.current_index + 1, len(self._questions)

    def correct_count(self) -> int:
        return sum(1 for entry in self._responses if entry.is_correct)

    def response_for(self, question_id: str) -> Optional[ResponseEntry]:
        """Most recent entry recorded for ``question_id``."""
        for entry in reversed(self._responses):
            if entry.question_id == question_id:
                return entry
        return None

    def update_time_remaining(self, seconds: int) -> None:
        self.time_remaining = max(0, seconds)

    def reset(self) -> None:
        """Discard everything (exit or abandon)."""
        self.session_id = None
        self.user_id = None
        self.mode = None
        self._questions = []
        self._responses = []
        self.current_index = 0
        self.time_remaining = 0


@dataclass
class ProgressState:
    """The user's session history and totals as last loaded."""

    user_id: Optional[int] = None
    recent_sessions: List[Dict[str, Any]] = field(default_factory=list)
    user_stats: Optional[Dict[str, Any]] = None
    is_loading: bool = False
    error: Optional[str] = None

    def add_session(self, session: Dict[str, Any]) -> None:
        """Put a just-finished session at the front of the history."""
        self.recent_sessions.insert(0, session)

    def reset(self) -> None:
        self.user_id = None
        self.recent_sessions = []
        self.user_stats = None
        self.is_loading = False
        self.error = None
