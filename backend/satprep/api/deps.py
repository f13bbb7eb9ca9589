"""
Shared FastAPI dependencies for application-owned services.

The question bank and identity client live on ``app.state`` (built in the
application lifespan) so tests can swap in fakes with
``app.dependency_overrides``.
"""
from fastapi import Request

from satprep.services.identity import GoogleIdentityClient
from satprep.services.question_bank import QuestionBank


def get_question_bank(request: Request) -> QuestionBank:
    return request.app.state.question_bank


def get_identity_client(request: Request) -> GoogleIdentityClient:
    return request.app.state.identity_client
