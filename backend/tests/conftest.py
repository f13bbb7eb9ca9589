"""
Pytest configuration and shared fixtures for testing.
"""
import asyncio
import os
from pathlib import Path

# Settings are read at import time, so the environment must be prepared first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("QUESTION_BANK_PRELOAD", "false")
os.environ.setdefault("ENV", "test")

from contextlib import asynccontextmanager  # noqa: E402
from typing import Dict, List  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from satprep.api.deps import get_identity_client, get_question_bank  # noqa: E402
from satprep.core.security import create_access_token, hash_password  # noqa: E402
from satprep.main import app  # noqa: E402
from satprep.models import Base, User, get_db  # noqa: E402
from satprep.schemas.questions import Question  # noqa: E402
from satprep.services.identity import (  # noqa: E402
    GoogleIdentity,
    IdentityProviderError,
)
from satprep.services.question_bank import QuestionBank  # noqa: E402


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests.

    Skips Sentry, table creation and the question bank download.
    """
    yield


# Neutralize the production lifespan on the singleton app.
app.router.lifespan_context = _test_lifespan


@pytest.fixture
def fresh_app():
    """Create the production app with the lifespan disabled.

    Use this instead of the singleton when a test needs the services that
    create_application() builds itself.
    """
    from satprep.main import create_application

    test_app = create_application()
    test_app.router.lifespan_context = _test_lifespan
    return test_app


# Use SQLite for sync tests; the path is relative to this file so the .db
# lands inside tests/ regardless of the working directory.
_TEST_DB = Path(__file__).parent / "test.db"
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Async test engine (aiosqlite) on the same DB file as the sync engine so that
# sync fixtures can create data visible to async endpoint overrides.
ASYNC_SQLALCHEMY_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DB}"

# NullPool: connections are never reused across the event loops of
# different TestClient instances and async tests.
async_test_engine = create_async_engine(
    ASYNC_SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=NullPool,
)
AsyncTestingSessionLocal = async_sessionmaker(
    async_test_engine, class_=AsyncSession, expire_on_commit=False
)


def make_question(
    question_id: str,
    domain: str,
    difficulty: str,
    section: str,
    correct_answer: str = "B",
) -> Question:
    """Build a cached question in the upstream shape."""
    return Question.model_validate(
        {
            "id": question_id,
            "domain": domain,
            "difficulty": difficulty,
            "section": section,
            "correct_answer": correct_answer,
            "explanation": f"Explanation for {question_id}.",
            "question": {
                "paragraph": None,
                "question": f"Prompt for {question_id}: solve \\(x + 1 = 2\\).",
                "choices": {"A": "0", "B": "1", "C": "2", "D": "3"},
            },
        }
    )


SAMPLE_QUESTIONS: List[Question] = [
    make_question("m1", "Algebra", "Easy", "math"),
    make_question("m2", "Advanced Math", "Medium", "math", correct_answer="C"),
    make_question("m3", "Geometry and Trigonometry", "Hard", "math"),
    make_question("e1", "Craft and Structure", "Easy", "english", correct_answer="A"),
    make_question("e2", "Information and Ideas", "Medium", "english"),
    make_question("e3", "Standard English Conventions", "Hard", "english"),
]


class StubSectionFetcher:
    """Serves fixed questions per section and counts fetches."""

    def __init__(self, questions: List[Question], fail_sections=()):
        self.questions = questions
        self.fail_sections = set(fail_sections)
        self.calls: List[str] = []

    async def fetch_section(self, section: str) -> List[Question]:
        from satprep.services.content_source import ContentSourceError

        self.calls.append(section)
        if section in self.fail_sections:
            raise ContentSourceError(f"{section} unavailable", section=section)
        return [q for q in self.questions if q.section == section]


class FakeIdentityClient:
    """Identity provider double keyed by access token."""

    def __init__(self):
        self.identities: Dict[str, GoogleIdentity] = {}

    def add(self, token: str, subject: str, email=None, name=None) -> GoogleIdentity:
        identity = GoogleIdentity(subject=subject, email=email, name=name)
        self.identities[token] = identity
        return identity

    async def fetch_identity(self, access_token: str) -> GoogleIdentity:
        try:
            return self.identities[access_token]
        except KeyError:
            raise IdentityProviderError("Userinfo lookup returned HTTP 401") from None


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def sample_questions() -> List[Question]:
    return list(SAMPLE_QUESTIONS)


@pytest.fixture
def stub_fetcher_factory():
    return StubSectionFetcher


@pytest.fixture
def question_bank():
    """A question bank loaded from SAMPLE_QUESTIONS with a fixed seed."""
    bank = QuestionBank(StubSectionFetcher(SAMPLE_QUESTIONS), seed=1234)
    # A private loop leaves the current event loop of async tests untouched
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(bank.load())
    finally:
        loop.close()
    return bank


@pytest.fixture
def identity_client():
    return FakeIdentityClient()


@pytest.fixture(scope="function")
def client(db_session, question_bank, identity_client):
    """
    Create a test client with database and service dependency overrides.

    Overrides get_db (async) to use a test async session backed by
    the same test.db file where db_session creates data.
    """

    async def override_get_db():
        async with AsyncTestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_bank] = lambda: question_bank
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session):
    """
    Create a test user in the database.
    """
    user = User(
        name="Test User",
        username="test",
        email="test@example.com",
        password_hash=hash_password("testpassword123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    """A second account for ownership checks."""
    user = User(
        name="Other User",
        username="other",
        email="other@example.com",
        password_hash=hash_password("otherpassword123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    """
    Create authentication headers for test user.
    """
    access_token = create_access_token({"user_id": test_user.id})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def other_auth_headers(other_user):
    access_token = create_access_token({"user_id": other_user.id})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def api_app(db_session, question_bank, identity_client):
    """
    The application with test overrides, for in-process httpx clients.

    Use with ``httpx.ASGITransport(app=api_app)`` from async tests.
    """

    async def override_get_db():
        async with AsyncTestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_bank] = lambda: question_bank
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    yield app
    app.dependency_overrides.clear()
