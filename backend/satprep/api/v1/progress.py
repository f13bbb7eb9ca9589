"""
Progress tracking endpoints: practice sessions, responses and analytics.

All routes act on the authenticated user. Sessions owned by other users
are reported as not found.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from satprep.core.auth import get_current_user
from satprep.core.db_error_handling import handle_db_error
from satprep.core.error_responses import (
    ErrorMessages,
    raise_conflict,
    raise_not_found,
)
from satprep.models import get_db, User, PracticeSession
from satprep.schemas.auth import UserEnvelope, UserResponse
from satprep.schemas.progress import (
    AnalyticsResponse,
    DomainAccuracyResponse,
    ResponseCreate,
    ResponseRecord,
    ResponseRecordedResponse,
    SessionEndedResponse,
    SessionEndRequest,
    SessionEnvelope,
    SessionResponse,
    SessionResponsesEnvelope,
    SessionStartRequest,
    UserProgressResponse,
    UserStatsResponse,
)
from satprep.services import progress as progress_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_session_or_404(
    db: AsyncSession, user: User, session_id: int
) -> PracticeSession:
    session = await progress_service.get_user_session(db, user.id, session_id)
    if session is None:
        raise_not_found(ErrorMessages.session_not_found(session_id))
    return session


@router.post("/user", response_model=UserEnvelope)
async def ensure_progress_user(current_user: User = Depends(get_current_user)):
    """
    Confirm the progress identity for the authenticated user.

    The bearer token is the only source of identity; the account already
    exists once the token validates.
    """
    return UserEnvelope(user=UserResponse.from_user(current_user))


@router.post("/session/start", response_model=SessionEnvelope)
async def start_session(
    request_data: SessionStartRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Open a new practice session in the requested mode."""
    async with handle_db_error(db, "start practice session"):
        session = await progress_service.create_session(
            db, current_user.id, request_data.mode
        )
    return SessionEnvelope(session=SessionResponse.model_validate(session))


@router.post("/session/end", response_model=SessionEndedResponse)
async def end_session(
    request_data: SessionEndRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Close a session with its final score and counts.

    Raises:
        HTTPException: 404 if the session is unknown, 409 if it already ended
    """
    session = await _get_owned_session_or_404(db, current_user, request_data.session_id)
    if session.ended_at is not None:
        raise_conflict(ErrorMessages.SESSION_ALREADY_ENDED)

    async with handle_db_error(db, "end practice session"):
        session = await progress_service.end_session(
            db,
            session,
            score=request_data.score,
            total_questions=request_data.total_questions,
            correct_answers=request_data.correct_answers,
        )
    return SessionEndedResponse(session=SessionResponse.model_validate(session))


@router.post("/response", response_model=ResponseRecordedResponse)
async def record_response(
    request_data: ResponseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Append one answered (or skipped) question to a session.

    Raises:
        HTTPException: 404 if the session is unknown
    """
    session = await _get_owned_session_or_404(db, current_user, request_data.session_id)

    async with handle_db_error(db, "record response"):
        response = await progress_service.record_response(
            db,
            session,
            question_id=request_data.question_id,
            user_answer=request_data.user_answer,
            correct_answer=request_data.correct_answer,
            is_correct=request_data.resolved_is_correct(),
            time_spent_seconds=request_data.time_spent_seconds,
            section=request_data.section,
            domain=request_data.domain,
        )
    return ResponseRecordedResponse(response=ResponseRecord.model_validate(response))


@router.get("/session/{session_id}", response_model=SessionResponsesEnvelope)
async def get_session_responses(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Responses of a session in the order they were recorded."""
    await _get_owned_session_or_404(db, current_user, session_id)
    responses = await progress_service.get_session_responses(db, session_id)
    return SessionResponsesEnvelope(
        count=len(responses),
        responses=[ResponseRecord.model_validate(r) for r in responses],
    )


@router.get("/user/{user_id}", response_model=UserProgressResponse)
async def get_user_progress(
    user_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Recent sessions and totals for the authenticated user.

    The path segment is accepted for compatibility but ignored; the token
    decides whose progress is returned.
    """
    if user_id != str(current_user.id):
        logger.debug(
            f"Progress requested for user '{user_id}' by user {current_user.id}; "
            "serving the token user"
        )
    sessions = await progress_service.get_user_sessions(db, current_user.id, limit)
    stats = await progress_service.get_user_stats(db, current_user.id)
    return UserProgressResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        stats=UserStatsResponse.model_validate(stats),
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Session totals plus per-domain accuracy, most practiced domain first."""
    stats = await progress_service.get_user_stats(db, current_user.id)
    domains = await progress_service.get_domain_accuracy(db, current_user.id)
    return AnalyticsResponse(
        stats=UserStatsResponse.model_validate(stats),
        domains=[DomainAccuracyResponse.model_validate(d) for d in domains],
    )
