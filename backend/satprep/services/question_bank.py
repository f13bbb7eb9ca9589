"""
In-memory question bank.

The application builds one QuestionBank at startup, loads it from the
content source, and hands it to request handlers through a dependency.
"""
import asyncio
import logging
import random
from typing import Dict, List, Optional, Protocol, Tuple

from satprep.schemas.questions import Question
from satprep.services.content_source import SECTIONS

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class QuestionBankNotLoadedError(RuntimeError):
    """Raised when the bank is queried before a successful load."""

    MESSAGE = "Question bank not loaded. Call load() first."

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class SectionFetcher(Protocol):
    """Anything that can fetch one section of questions."""

    async def fetch_section(self, section: str) -> List[Question]: ...


class QuestionBank:
    """
    Snapshot of every practice question, filtered on demand.

    Filtered results are shuffled with the bank's own random generator
    before truncation. Pass ``seed`` to make that order reproducible.

    Args:
        source: Section fetcher (normally a ContentSourceClient)
        seed: Optional seed for the shuffle generator
    """

    def __init__(self, source: SectionFetcher, seed: Optional[int] = None):
        self._source = source
        self._random = random.Random(seed)
        self._questions: List[Question] = []
        self._by_id: Dict[str, Question] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """
        Fetch both sections concurrently and store the snapshot.

        A non-empty snapshot is reused without refetching. Any section
        failing to load fails the whole load and leaves the previous state
        untouched.

        Raises:
            ContentSourceError: If the content source cannot be read
        """
        async with self._lock:
            if self._questions:
                logger.debug("Question bank already loaded; skipping fetch")
                return

            results = await asyncio.gather(
                *(self._source.fetch_section(section) for section in SECTIONS)
            )

            questions = [question for batch in results for question in batch]
            self._questions = questions
            self._by_id = {question.id: question for question in questions}
            self._loaded = True

        counts = ", ".join(
            f"{section}={len(batch)}" for section, batch in zip(SECTIONS, results)
        )
        logger.info(f"Question bank loaded: {len(questions)} questions ({counts})")

    def filter(
        self,
        section: Optional[str] = None,
        domain: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Question]:
        """
        Select a random subset of questions matching the criteria.

        Matching is case-insensitive: section and difficulty must match
        exactly, domain is a substring match. Blank criteria are ignored.

        Args:
            section: "math" or "english"
            domain: Domain substring, e.g. "algebra"
            difficulty: "Easy", "Medium" or "Hard"
            limit: Maximum number of questions to return

        Returns:
            Up to ``limit`` questions in shuffled order

        Raises:
            QuestionBankNotLoadedError: If load() has never succeeded
            ValueError: If limit is negative
        """
        if not self._loaded:
            raise QuestionBankNotLoadedError()
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        candidates = self._questions
        if section:
            wanted = section.lower()
            candidates = [q for q in candidates if (q.section or "").lower() == wanted]
        if domain:
            wanted = domain.lower()
            candidates = [q for q in candidates if wanted in q.domain.lower()]
        if difficulty:
            wanted = difficulty.lower()
            candidates = [q for q in candidates if q.difficulty.lower() == wanted]

        shuffled = list(candidates)
        self._random.shuffle(shuffled)
        return shuffled[:limit]

    def by_id(self, question_id: str) -> Optional[Question]:
        """Return the question with ``question_id``, or None."""
        return self._by_id.get(question_id)

    def domains(self) -> List[str]:
        """Sorted distinct domains in the snapshot (empty before load)."""
        return sorted({q.domain for q in self._questions if q.domain})

    def sections(self) -> List[str]:
        return list(SECTIONS)

    def status(self) -> Tuple[bool, int]:
        """Return (is_cached, count) for the current snapshot."""
        return bool(self._questions), len(self._questions)
