"""
Database models for the SAT practice application.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Float,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from .base import Base


class SessionMode(str, enum.Enum):
    """Practice session mode enumeration."""

    STUDY = "study"
    QUIZ = "quiz"
    TEST = "test"


class User(Base):
    """User model for authentication and profile."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    username = Column(String(50), unique=True, nullable=False, index=True)
    # Nullable for accounts created through Google sign-in without an email scope
    email = Column(String(255), unique=True, nullable=True, index=True)
    # Nullable for Google-only accounts
    password_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), unique=True, nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    last_login_at = Column(DateTime(timezone=True))

    # Relationships
    practice_sessions = relationship(
        "PracticeSession", back_populates="user", cascade="all, delete-orphan"
    )


class PracticeSession(Base):
    """A single study, quiz or test attempt."""

    __tablename__ = "practice_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mode = Column(Enum(SessionMode), nullable=False)
    started_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    ended_at = Column(DateTime(timezone=True), nullable=True)
    score = Column(Float, nullable=True)  # Percentage 0-100
    total_questions = Column(Integer, nullable=True)
    correct_answers = Column(Integer, nullable=True)

    # Relationships
    user = relationship("User", back_populates="practice_sessions")
    responses = relationship(
        "Response",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Response.id",
    )

    __table_args__ = (
        Index("ix_practice_sessions_user_started", "user_id", "started_at"),
        CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)",
            name="ck_practice_sessions_score_range",
        ),
    )


class Response(Base):
    """One recorded answer (or skip) to a question within a session.

    Rows are append-only; ascending id is the order in which the questions
    were answered.
    """

    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer,
        ForeignKey("practice_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = Column(String(100), nullable=False)
    user_answer = Column(String(10), nullable=True)  # None when skipped
    correct_answer = Column(String(10), nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    time_spent_seconds = Column(Integer, nullable=True)
    # Denormalized from the question for analytics
    section = Column(String(20), nullable=True)
    domain = Column(Text, nullable=True)
    answered_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    session = relationship("PracticeSession", back_populates="responses")

    __table_args__ = (Index("ix_responses_session_domain", "session_id", "domain"),)
