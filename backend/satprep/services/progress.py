"""
Practice session persistence and progress aggregation.

All aggregation is read-only and recomputed on every call.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from satprep.core.datetime_utils import utc_now
from satprep.models import PracticeSession, Response, SessionMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserStats:
    """Totals over a user's ended sessions."""

    total_sessions: int
    average_score: Optional[float]
    total_questions_answered: int
    correct_answers: int


@dataclass(frozen=True)
class DomainAccuracy:
    """Per-domain response totals for one user."""

    domain: str
    total: int
    correct: int
    accuracy: float


async def create_session(
    db: AsyncSession, user_id: int, mode: SessionMode
) -> PracticeSession:
    """Insert a new practice session starting now."""
    session = PracticeSession(user_id=user_id, mode=mode, started_at=utc_now())
    db.add(session)
    await db.commit()
    await db.refresh(session)
    logger.info(
        f"Started {mode.value} session {session.id} for user {user_id}",
        extra={"session_id": session.id},
    )
    return session


async def get_user_session(
    db: AsyncSession, user_id: int, session_id: int
) -> Optional[PracticeSession]:
    """
    Fetch a session owned by ``user_id``.

    Sessions belonging to other users are reported as absent.
    """
    result = await db.execute(
        select(PracticeSession).where(
            PracticeSession.id == session_id,
            PracticeSession.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def end_session(
    db: AsyncSession,
    session: PracticeSession,
    score: Optional[float],
    total_questions: Optional[int],
    correct_answers: Optional[int],
) -> PracticeSession:
    """Stamp the end time and final tally on a session."""
    session.ended_at = utc_now()  # type: ignore
    session.score = score  # type: ignore
    session.total_questions = total_questions  # type: ignore
    session.correct_answers = correct_answers  # type: ignore
    await db.commit()
    await db.refresh(session)
    logger.info(
        f"Ended session {session.id} with score={score} "
        f"({correct_answers}/{total_questions})",
        extra={"session_id": session.id},
    )
    return session


async def record_response(
    db: AsyncSession,
    session: PracticeSession,
    question_id: str,
    user_answer: Optional[str],
    correct_answer: str,
    is_correct: bool,
    time_spent_seconds: Optional[int] = None,
    section: Optional[str] = None,
    domain: Optional[str] = None,
) -> Response:
    """Append one response row to a session."""
    response = Response(
        session_id=session.id,
        question_id=question_id,
        user_answer=user_answer,
        correct_answer=correct_answer,
        is_correct=is_correct,
        time_spent_seconds=time_spent_seconds,
        section=section,
        domain=domain,
        answered_at=utc_now(),
    )
    db.add(response)
    await db.commit()
    await db.refresh(response)
    return response


async def get_session_responses(db: AsyncSession, session_id: int) -> List[Response]:
    """Responses of a session in the order they were recorded."""
    result = await db.execute(
        select(Response).where(Response.session_id == session_id).order_by(Response.id)
    )
    return list(result.scalars().all())


async def get_user_sessions(
    db: AsyncSession, user_id: int, limit: int = 10
) -> List[PracticeSession]:
    """Most recent sessions first."""
    result = await db.execute(
        select(PracticeSession)
        .where(PracticeSession.user_id == user_id)
        .order_by(PracticeSession.started_at.desc(), PracticeSession.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_user_stats(db: AsyncSession, user_id: int) -> UserStats:
    """
    Aggregate a user's ended sessions.

    The mean score only considers sessions that recorded a score and is
    None when there are none.
    """
    result = await db.execute(
        select(
            func.count(PracticeSession.id),
            func.avg(PracticeSession.score),
            func.coalesce(func.sum(PracticeSession.total_questions), 0),
            func.coalesce(func.sum(PracticeSession.correct_answers), 0),
        ).where(
            PracticeSession.user_id == user_id,
            PracticeSession.ended_at.is_not(None),
        )
    )
    total_sessions, average_score, total_questions, correct = result.one()
    return UserStats(
        total_sessions=int(total_sessions),
        average_score=float(average_score) if average_score is not None else None,
        total_questions_answered=int(total_questions),
        correct_answers=int(correct),
    )


async def get_domain_accuracy(db: AsyncSession, user_id: int) -> List[DomainAccuracy]:
    """
    Group a user's responses by domain.

    Responses without a domain are excluded. Accuracy is a percentage
    rounded to one decimal; rows are ordered by descending total, then
    domain name.
    """
    total = func.count(Response.id)
    correct = func.coalesce(func.sum(case((Response.is_correct.is_(True), 1), else_=0)), 0)
    result = await db.execute(
        select(Response.domain, total, correct)
        .join(PracticeSession, Response.session_id == PracticeSession.id)
        .where(
            PracticeSession.user_id == user_id,
            Response.domain.is_not(None),
        )
        .group_by(Response.domain)
        .order_by(total.desc(), Response.domain)
    )

    rows: List[DomainAccuracy] = []
    for domain, domain_total, domain_correct in result.all():
        domain_total = int(domain_total)
        domain_correct = int(domain_correct)
        rows.append(
            DomainAccuracy(
                domain=domain,
                total=domain_total,
                correct=domain_correct,
                accuracy=round(100 * domain_correct / domain_total, 1),
            )
        )
    return rows
