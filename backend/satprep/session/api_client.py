"""Async client for the SAT Prep REST API.

Wraps every backend endpoint used by the practice client. Responses are
returned as decoded JSON dictionaries (camelCase keys, as served). Any
non-success answer raises ApiError.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from satprep.session.state import Mode, ResponseEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class ApiError(Exception):
    """Backend call failed.

    Attributes:
        status_code: HTTP status, or None when the request never got an answer
        message: Error text from the backend envelope or transport
        retryable: True for network failures and 5xx responses
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class SatPrepApiClient:
    """Client for the backend API.

    The bearer token is captured from register/login/Google sign-in and
    sent with every later request.

    Attributes:
        base_url: API root including the prefix (e.g. "http://localhost:8000/api")
        token: Current bearer token, if signed in
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )
        logger.debug(f"SatPrepApiClient initialized with base_url: {self.base_url}")

    async def __aenter__(self) -> "SatPrepApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if params is not None:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=self._get_headers()
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or body.get("success") is False:
            message = body.get("error") or response.reason_phrase or "Request failed"
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(str(message), status_code=response.status_code)
        return body

    def _remember_token(self, body: Dict[str, Any]) -> Dict[str, Any]:
        token = body.get("token")
        if token:
            self.token = token
        return body

    # Auth

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        body = await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return self._remember_token(body)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Sign in with an email address or username."""
        body = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        return self._remember_token(body)

    async def google_sign_in(self, access_token: str) -> Dict[str, Any]:
        body = await self._request(
            "POST", "/auth/google", json={"accessToken": access_token}
        )
        return self._remember_token(body)

    async def me(self) -> Dict[str, Any]:
        return (await self._request("GET", "/auth/me"))["user"]

    async def update_profile(self, name: str) -> Dict[str, Any]:
        return (await self._request("PATCH", "/auth/profile", json={"name": name}))[
            "user"
        ]

    async def link_google(self, access_token: str) -> Dict[str, Any]:
        body = await self._request(
            "POST", "/auth/link-google", json={"accessToken": access_token}
        )
        return body["user"]

    async def change_password(self, current_password: str, new_password: str) -> str:
        body = await self._request(
            "POST",
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
        return body["message"]

    # Questions

    async def get_questions(
        self,
        section: Optional[str] = None,
        domain: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list:
        body = await self._request(
            "GET",
            "/questions",
            params={
                "section": section,
                "domain": domain,
                "difficulty": difficulty,
                "limit": limit,
            },
        )
        return body["questions"]

    async def get_question(self, question_id: str) -> Dict[str, Any]:
        return (await self._request("GET", f"/questions/{question_id}"))["question"]

    async def get_domains(self) -> list:
        return (await self._request("GET", "/domains"))["domains"]

    async def get_sections(self) -> list:
        return (await self._request("GET", "/sections"))["sections"]

    async def cache_status(self) -> Dict[str, Any]:
        return await self._request("GET", "/cache-status")

    # Progress

    async def ensure_user(self) -> Dict[str, Any]:
        return (await self._request("POST", "/progress/user"))["user"]

    async def start_session(self, mode: Mode) -> Dict[str, Any]:
        body = await self._request(
            "POST", "/progress/session/start", json={"mode": Mode(mode).value}
        )
        return body["session"]

    async def end_session(
        self,
        session_id: int,
        score: Optional[float] = None,
        total_questions: Optional[int] = None,
        correct_answers: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"sessionId": session_id}
        if score is not None:
            payload["score"] = score
        if total_questions is not None:
            payload["totalQuestions"] = total_questions
        if correct_answers is not None:
            payload["correctAnswers"] = correct_answers
        body = await self._request("POST", "/progress/session/end", json=payload)
        return body["session"]

    async def record_response(
        self, session_id: int, entry: ResponseEntry
    ) -> Dict[str, Any]:
        payload = {
            "sessionId": session_id,
            "questionId": entry.question_id,
            "userAnswer": entry.user_answer,
            "correctAnswer": entry.correct_answer or "",
            "isCorrect": entry.is_correct,
            "timeSpentSeconds": entry.time_spent_seconds,
            "section": entry.section,
            "domain": entry.domain,
        }
        body = await self._request("POST", "/progress/response", json=payload)
        return body["response"]

    async def get_session_responses(self, session_id: int) -> list:
        return (await self._request("GET", f"/progress/session/{session_id}"))[
            "responses"
        ]

    async def get_user_progress(
        self, user_id: int, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/progress/user/{user_id}", params={"limit": limit}
        )

    async def get_analytics(self) -> Dict[str, Any]:
        return await self._request("GET", "/progress/analytics")

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")
