"""
Tests for the backend API client using httpx.MockTransport.
"""
import json

import httpx
import pytest

from satprep.session.api_client import ApiError, SatPrepApiClient
from satprep.session.state import Mode, ResponseEntry

BASE_URL = "http://backend.example.com/api"


def _client(handler, token=None):
    return SatPrepApiClient(BASE_URL, token=token, transport=httpx.MockTransport(handler))


class TestRequests:
    """Tests for request construction and token handling."""

    @pytest.mark.asyncio
    async def test_login_stores_token(self):
        """Test that the token from login is sent on later requests."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/api/auth/login":
                return httpx.Response(
                    200, json={"success": True, "token": "tok-1", "user": {"id": 1}}
                )
            return httpx.Response(200, json={"success": True, "user": {"id": 1}})

        async with _client(handler) as client:
            body = await client.login("a@example.com", "secret1")
            user = await client.me()

        assert body["token"] == "tok-1"
        assert client.token == "tok-1"
        assert user == {"id": 1}
        assert json.loads(seen[0].content) == {
            "email": "a@example.com",
            "password": "secret1",
        }
        assert "Authorization" not in seen[0].headers
        assert seen[1].headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_question_filters_drop_blank_params(self):
        """Test that empty filter values are not sent."""
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={"success": True, "count": 0, "questions": []})

        async with _client(handler) as client:
            questions = await client.get_questions(section="math", domain="", limit=5)

        assert questions == []
        assert seen == [{"section": "math", "limit": "5"}]

    @pytest.mark.asyncio
    async def test_record_response_payload(self):
        """Test that a response entry is sent in camelCase."""
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "response": {"id": 3}})

        entry = ResponseEntry(
            question_id="m1",
            user_answer=None,
            is_correct=False,
            time_spent_seconds=4,
            correct_answer="B",
            section="math",
            domain="Algebra",
        )
        async with _client(handler, token="t") as client:
            record = await client.record_response(12, entry)

        assert record == {"id": 3}
        assert seen[0] == {
            "sessionId": 12,
            "questionId": "m1",
            "userAnswer": None,
            "correctAnswer": "B",
            "isCorrect": False,
            "timeSpentSeconds": 4,
            "section": "math",
            "domain": "Algebra",
        }

    @pytest.mark.asyncio
    async def test_end_session_omits_missing_tally(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "session": {"id": 5}})

        async with _client(handler, token="t") as client:
            await client.end_session(5)
            await client.end_session(5, score=50.0, total_questions=2, correct_answers=1)

        assert seen[0] == {"sessionId": 5}
        assert seen[1] == {
            "sessionId": 5,
            "score": 50.0,
            "totalQuestions": 2,
            "correctAnswers": 1,
        }

    @pytest.mark.asyncio
    async def test_start_session_sends_mode_value(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "session": {"id": 1}})

        async with _client(handler, token="t") as client:
            session = await client.start_session(Mode.TEST)

        assert session == {"id": 1}
        assert seen == [{"mode": "test"}]


class TestErrors:
    """Tests for ApiError mapping."""

    @pytest.mark.asyncio
    async def test_error_envelope(self):
        """Test that the backend error message and status are kept."""
        handler = lambda r: httpx.Response(  # noqa: E731
            409, json={"success": False, "error": "Session has already ended."}
        )
        async with _client(handler, token="t") as client:
            with pytest.raises(ApiError) as exc_info:
                await client.end_session(1)

        error = exc_info.value
        assert error.status_code == 409
        assert error.message == "Session has already ended."
        assert error.retryable is False
        assert "HTTP 409" in str(error)

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self):
        handler = lambda r: httpx.Response(500, text="oops")  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_domains()
        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_network_error_is_retryable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.health()
        assert exc_info.value.status_code is None
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_success_false_with_200(self):
        handler = lambda r: httpx.Response(  # noqa: E731
            200, json={"success": False, "error": "nope"}
        )
        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.cache_status()
        assert exc_info.value.message == "nope"
