"""
Health check and status endpoints.
"""
from fastapi import APIRouter, Depends

from satprep.api.deps import get_question_bank
from satprep.core.config import settings
from satprep.core.datetime_utils import utc_now
from satprep.services.question_bank import QuestionBank

router = APIRouter()


@router.get("/health")
async def health_check(bank: QuestionBank = Depends(get_question_bank)):
    """
    Health check endpoint.

    Reports the service version and whether the question bank is loaded.
    """
    is_cached, count = bank.status()
    return {
        "success": True,
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "questionBank": {"isCached": is_cached, "count": count},
    }
