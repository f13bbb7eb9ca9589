"""
Question retrieval endpoints backed by the in-memory question bank.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from satprep.api.deps import get_question_bank
from satprep.core.config import settings
from satprep.core.error_responses import (
    ErrorMessages,
    raise_not_found,
    raise_server_error,
)
from satprep.schemas.questions import (
    CacheStatusResponse,
    DomainListResponse,
    QuestionDetailResponse,
    QuestionListResponse,
    SectionListResponse,
)
from satprep.services.question_bank import QuestionBank, QuestionBankNotLoadedError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/questions", response_model=QuestionListResponse)
async def get_questions(
    section: Optional[str] = Query(None, description="math or english"),
    domain: Optional[str] = Query(None, description="Domain substring"),
    difficulty: Optional[str] = Query(None, description="Easy, Medium or Hard"),
    limit: int = Query(
        default=settings.QUESTION_DEFAULT_LIMIT,
        ge=1,
        le=settings.QUESTION_MAX_LIMIT,
        description="Maximum number of questions to return",
    ),
    bank: QuestionBank = Depends(get_question_bank),
):
    """
    Get a random set of questions matching the filters.

    Section and difficulty match exactly, domain matches as a substring;
    all comparisons ignore case.

    Raises:
        HTTPException: 500 if the question bank has not been loaded
    """
    try:
        questions = bank.filter(
            section=section, domain=domain, difficulty=difficulty, limit=limit
        )
    except QuestionBankNotLoadedError:
        logger.error("Question request received before the question bank loaded")
        raise_server_error(ErrorMessages.QUESTION_BANK_NOT_LOADED)

    return QuestionListResponse(count=len(questions), questions=questions)


@router.get("/questions/{question_id}", response_model=QuestionDetailResponse)
async def get_question(
    question_id: str,
    bank: QuestionBank = Depends(get_question_bank),
):
    """
    Get a single question by its upstream identifier.

    Raises:
        HTTPException: 404 if no question has this id
    """
    question = bank.by_id(question_id)
    if question is None:
        raise_not_found(ErrorMessages.question_not_found(question_id))
    return QuestionDetailResponse(question=question)


@router.get("/domains", response_model=DomainListResponse)
async def get_domains(bank: QuestionBank = Depends(get_question_bank)):
    """List the distinct domains in the question bank."""
    domains = bank.domains()
    return DomainListResponse(count=len(domains), domains=domains)


@router.get("/sections", response_model=SectionListResponse)
async def get_sections(bank: QuestionBank = Depends(get_question_bank)):
    return SectionListResponse(sections=bank.sections())


@router.get("/cache-status", response_model=CacheStatusResponse)
async def get_cache_status(bank: QuestionBank = Depends(get_question_bank)):
    """Report whether the question bank snapshot is loaded."""
    is_cached, count = bank.status()
    return CacheStatusResponse(is_cached=is_cached, count=count)
