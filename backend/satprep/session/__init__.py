"""
Client-side practice session core.

Timer, session state, the Study/Quiz/Test controllers, scoring, and the
backend client and runner. Nothing here depends on the server settings or
database models.
"""
from .api_client import ApiError, SatPrepApiClient
from .modes import (
    ControllerStatus,
    QuizController,
    SessionResult,
    StudyController,
    TestController,
)
from .questions import ParsedQuestion, parse_question, parse_questions
from .runner import PracticeRunner
from .scoring import Grade, calculate_score, grade, time_pace
from .state import AssessmentState, Mode, ProgressState, ResponseEntry
from .timer import CountdownTimer

__all__ = [
    "ApiError",
    "AssessmentState",
    "ControllerStatus",
    "CountdownTimer",
    "Grade",
    "Mode",
    "ParsedQuestion",
    "PracticeRunner",
    "ProgressState",
    "QuizController",
    "ResponseEntry",
    "SatPrepApiClient",
    "SessionResult",
    "StudyController",
    "TestController",
    "calculate_score",
    "grade",
    "parse_question",
    "parse_questions",
    "time_pace",
]
