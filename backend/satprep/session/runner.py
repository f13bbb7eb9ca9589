"""
Practice session runner.

Connects a mode controller to the backend: opens a session record, fetches
the filtered questions, persists every recorded response and the final tally
when the attempt finishes, and makes a best-effort end-of-session flush when
the attempt is abandoned.

Usage:
    async with SatPrepApiClient(base_url) as client:
        await client.login(email, password)
        runner = PracticeRunner(client, Mode.QUIZ, section="math", limit=10)
        controller = await runner.start()
        ...
        result = await runner.wait_finished()
        await runner.close()
"""
import asyncio
import logging
from typing import Callable, Dict, Optional, Type

from satprep.core.graceful_failure import graceful_failure
from satprep.session.api_client import SatPrepApiClient
from satprep.session.modes import (
    QuizController,
    SessionController,
    SessionResult,
    StudyController,
    TestController,
)
from satprep.session.questions import parse_questions
from satprep.session.state import AssessmentState, Mode, ProgressState

logger = logging.getLogger(__name__)

CONTROLLERS: Dict[Mode, Type[SessionController]] = {
    Mode.STUDY: StudyController,
    Mode.QUIZ: QuizController,
    Mode.TEST: TestController,
}


class PracticeRunner:
    """Runs one practice attempt against the backend."""

    def __init__(
        self,
        client: SatPrepApiClient,
        mode: Mode,
        *,
        user_id: Optional[int] = None,
        section: Optional[str] = None,
        domain: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = 10,
        state: Optional[AssessmentState] = None,
        progress: Optional[ProgressState] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        tick_interval: float = 1.0,
    ):
        self.client = client
        self.mode = Mode(mode)
        self.user_id = user_id
        self.filters = {"section": section, "domain": domain, "difficulty": difficulty}
        self.limit = limit
        self.state = state if state is not None else AssessmentState()
        self.progress = progress
        self._on_tick = on_tick
        self._tick_interval = tick_interval
        self.controller: Optional[SessionController] = None
        self._finished = asyncio.Event()
        self._persist_task: Optional[asyncio.Task] = None
        self._submitted = False

    @property
    def session_id(self) -> Optional[int]:
        return self.state.session_id

    async def start(self) -> SessionController:
        """
        Open the backend session, load questions and begin the attempt.

        Raises:
            ApiError: If the backend rejects or cannot serve the request
            ValueError: If no questions match the filters
        """
        questions = parse_questions(
            await self.client.get_questions(limit=self.limit, **self.filters)
        )
        if not questions:
            raise ValueError("No questions match the selected filters")

        self.state.initialize(self.user_id, self.mode)
        session = await self.client.start_session(self.mode)
        self.state.set_session_id(session["id"])
        if self.user_id is None:
            self.user_id = session.get("userId")
            self.state.user_id = self.user_id

        controller_cls = CONTROLLERS[self.mode]
        kwargs = {"on_complete": self._handle_complete}
        if self.mode != Mode.STUDY:
            kwargs.update(on_tick=self._on_tick, tick_interval=self._tick_interval)
        self.controller = controller_cls(self.state, questions, **kwargs)
        self.controller.begin()
        logger.info(
            f"Runner started {self.mode.value} session {self.session_id} "
            f"with {len(questions)} questions"
        )
        return self.controller

    def _handle_complete(self, result: SessionResult) -> None:
        # Called synchronously by the controller, possibly from the timer task
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._persist_task = loop.create_task(self.submit(result))
        self._finished.set()

    async def wait_finished(self) -> SessionResult:
        """Wait for the attempt to finish and its results to be saved."""
        await self._finished.wait()
        if self._persist_task is not None:
            await self._persist_task
        elif not self._submitted:
            await self.submit()
        assert self.controller is not None and self.controller.result is not None
        return self.controller.result

    async def submit(self, result: Optional[SessionResult] = None) -> Dict:
        """
        Save every recorded response, then end the session with its tally.

        Raises:
            ApiError: If a save fails; the session stays open for ``close()``
            RuntimeError: If the session has not started or finished, or
                was already submitted
        """
        session_id = self.session_id
        if self.controller is None or session_id is None:
            raise RuntimeError("Session has not started")
        if result is None:
            result = self.controller.result
        if result is None:
            raise RuntimeError("Session has not finished")
        if self._submitted:
            raise RuntimeError("Session results were already submitted")

        for entry in result.responses:
            await self.client.record_response(session_id, entry)
        session = await self.client.end_session(
            session_id,
            score=result.score,
            total_questions=result.total,
            correct_answers=result.correct,
        )
        self._submitted = True
        if self.progress is not None:
            self.progress.add_session(session)
        logger.info(
            f"Saved {len(result.responses)} responses for session {session_id}"
        )
        return session

    async def close(self) -> None:
        """
        Stop the timer and, if results were never saved, end the session.

        Failures are logged and swallowed so closing never blocks exit.
        """
        if self.controller is not None:
            self.controller.close()
        if self._persist_task is not None and not self._persist_task.done():
            with graceful_failure(
                "save session results", logger, log_level=logging.DEBUG
            ):
                await self._persist_task
        if self._submitted or self.session_id is None:
            return
        with graceful_failure(
            "flush end-of-session record",
            logger,
            log_level=logging.DEBUG,
            context={"session_id": self.session_id},
        ):
            await self.client.end_session(self.session_id)
            self._submitted = True
