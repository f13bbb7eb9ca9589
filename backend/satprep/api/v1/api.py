"""
API v1 router combining all v1 endpoints.
"""
from fastapi import APIRouter
from satprep.api.v1 import auth, health, progress, questions

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(questions.router, tags=["questions"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
