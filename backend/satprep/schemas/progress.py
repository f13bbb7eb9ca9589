"""
Pydantic schemas for progress tracking endpoints.
"""
from pydantic import Field, field_validator, model_validator
from typing import List, Optional, Self
from datetime import datetime

from satprep.core.datetime_utils import ensure_timezone_aware
from satprep.core.validators import StringSanitizer
from satprep.models import SessionMode
from satprep.schemas.base import CamelModel, SuccessResponse


class SessionStartRequest(CamelModel):
    """Schema for starting a practice session."""

    mode: SessionMode = Field(..., description="study, quiz or test")


class SessionEndRequest(CamelModel):
    """Schema for ending a practice session with its final tally."""

    session_id: int = Field(..., description="Session to end")
    score: Optional[float] = Field(None, ge=0, le=100, description="Percentage score")
    total_questions: Optional[int] = Field(None, ge=0)
    correct_answers: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_counts(self) -> Self:
        """Correct answers cannot exceed the question total."""
        if (
            self.total_questions is not None
            and self.correct_answers is not None
            and self.correct_answers > self.total_questions
        ):
            raise ValueError("correctAnswers cannot exceed totalQuestions")
        return self


class ResponseCreate(CamelModel):
    """Schema for recording one answer within a session."""

    session_id: int = Field(..., description="Parent session")
    question_id: str = Field(..., min_length=1, max_length=100)
    user_answer: Optional[str] = Field(
        None, max_length=10, description="Submitted choice; omit when skipped"
    )
    correct_answer: str = Field(..., min_length=1, max_length=10)
    is_correct: Optional[bool] = Field(
        None, description="Defaults to comparing userAnswer with correctAnswer"
    )
    time_spent_seconds: Optional[int] = Field(None, ge=0)
    section: Optional[str] = Field(None, max_length=20)
    domain: Optional[str] = Field(None, max_length=200)

    @field_validator("question_id", "correct_answer")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = StringSanitizer.sanitize_string(v)
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("user_answer", "section", "domain")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return StringSanitizer.sanitize_string(v) or None

    def resolved_is_correct(self) -> bool:
        """Correctness flag, derived from the answers when not supplied."""
        if self.is_correct is not None:
            return self.is_correct
        return self.user_answer is not None and self.user_answer == self.correct_answer


class SessionResponse(CamelModel):
    """Schema for a practice session."""

    id: int
    user_id: int
    mode: SessionMode
    started_at: datetime
    ended_at: Optional[datetime] = None
    score: Optional[float] = None
    total_questions: Optional[int] = None
    correct_answers: Optional[int] = None

    @field_validator("started_at", "ended_at")
    @classmethod
    def make_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_timezone_aware(v)


class ResponseRecord(CamelModel):
    """Schema for a recorded response."""

    id: int
    session_id: int
    question_id: str
    user_answer: Optional[str] = None
    correct_answer: str
    is_correct: bool
    time_spent_seconds: Optional[int] = None
    section: Optional[str] = None
    domain: Optional[str] = None
    answered_at: datetime

    @field_validator("answered_at")
    @classmethod
    def make_aware(cls, v: datetime) -> Optional[datetime]:
        return ensure_timezone_aware(v)


class UserStatsResponse(CamelModel):
    """Totals over a user's ended sessions."""

    total_sessions: int
    average_score: Optional[float] = None
    total_questions_answered: int
    correct_answers: int


class DomainAccuracyResponse(CamelModel):
    """Accuracy for one domain."""

    domain: str
    total: int
    correct: int
    accuracy: float = Field(..., description="Percent correct, one decimal")


class SessionEnvelope(SuccessResponse):
    session: SessionResponse


class SessionEndedResponse(SuccessResponse):
    message: str = "Session ended successfully"
    session: SessionResponse


class ResponseRecordedResponse(SuccessResponse):
    message: str = "Response recorded"
    response: ResponseRecord


class SessionResponsesEnvelope(SuccessResponse):
    count: int
    responses: List[ResponseRecord]


class UserProgressResponse(SuccessResponse):
    sessions: List[SessionResponse]
    stats: UserStatsResponse


class AnalyticsResponse(SuccessResponse):
    stats: UserStatsResponse
    domains: List[DomainAccuracyResponse]
