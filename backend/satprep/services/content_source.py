"""
Upstream question content source client.

The content source publishes one section of the SAT question bank per
request (``GET {base_url}?section=math``). Over time it has answered with
several response shapes, so decoding is an explicit tagged-union step with
a fixed fallback order:

1. a bare JSON list of questions
2. an object holding the list under the section name
3. an object holding the list under ``questions``
4. an object whose first list-valued key holds the questions (warned)
5. anything else: no questions (warned)
"""
import logging
from enum import Enum
from typing import Any, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from satprep.schemas.questions import Question

logger = logging.getLogger(__name__)

SECTIONS: Tuple[str, ...] = ("math", "english")


class ContentSourceError(Exception):
    """Raised when the upstream content source cannot be read."""

    def __init__(self, message: str, section: Optional[str] = None):
        self.section = section
        super().__init__(message)


class PayloadShape(str, Enum):
    """Which decode branch produced the question list."""

    BARE_LIST = "bare_list"
    SECTION_KEY = "section_key"
    QUESTIONS_KEY = "questions_key"
    FIRST_LIST_VALUE = "first_list_value"
    UNRECOGNIZED = "unrecognized"


def extract_question_items(
    payload: Any, section: str
) -> Tuple[PayloadShape, List[Any]]:
    """
    Locate the raw question list inside an upstream payload.

    Args:
        payload: Parsed JSON body
        section: Section that was requested

    Returns:
        Tuple of (shape that matched, raw list of question objects)
    """
    if isinstance(payload, list):
        return PayloadShape.BARE_LIST, payload

    if isinstance(payload, dict):
        if isinstance(payload.get(section), list):
            return PayloadShape.SECTION_KEY, payload[section]
        if isinstance(payload.get("questions"), list):
            return PayloadShape.QUESTIONS_KEY, payload["questions"]
        for key, value in payload.items():
            if isinstance(value, list):
                logger.warning(
                    f"Content source payload for section '{section}' matched no "
                    f"known key; using first list under '{key}'",
                    extra={"section": section},
                )
                return PayloadShape.FIRST_LIST_VALUE, value

    logger.warning(
        f"Content source payload for section '{section}' contained no question "
        f"list (type={type(payload).__name__})",
        extra={"section": section},
    )
    return PayloadShape.UNRECOGNIZED, []


def decode_section_payload(payload: Any, section: str) -> List[Question]:
    """
    Decode one section's payload into validated, section-tagged questions.

    Items that fail validation are skipped and counted in a warning.

    Args:
        payload: Parsed JSON body
        section: Section that was requested

    Returns:
        List of questions tagged with ``section``
    """
    _, items = extract_question_items(payload, section)

    questions: List[Question] = []
    skipped = 0
    for item in items:
        try:
            question = Question.model_validate(item)
        except ValidationError:
            skipped += 1
            continue
        questions.append(question.model_copy(update={"section": section}))

    if skipped:
        logger.warning(
            f"Skipped {skipped} malformed question(s) in section '{section}'",
            extra={"section": section},
        )
    return questions


class ContentSourceClient:
    """
    Async HTTP client for the upstream question content source.

    Args:
        base_url: Endpoint URL; the section is passed as a query parameter
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def fetch_section(self, section: str) -> List[Question]:
        """
        Fetch and decode one section of the question bank.

        Args:
            section: "math" or "english"

        Returns:
            Questions for the section

        Raises:
            ContentSourceError: On transport errors, non-2xx status, or a body
                that is not JSON
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(self.base_url, params={"section": section})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ContentSourceError(
                f"Content source returned HTTP {e.response.status_code} "
                f"for section '{section}'",
                section=section,
            ) from e
        except httpx.HTTPError as e:
            raise ContentSourceError(
                f"Could not reach content source for section '{section}': {e}",
                section=section,
            ) from e
        except ValueError as e:
            raise ContentSourceError(
                f"Content source returned invalid JSON for section '{section}'",
                section=section,
            ) from e

        questions = decode_section_payload(payload, section)
        logger.info(
            f"Fetched {len(questions)} {section} questions from content source",
            extra={"section": section},
        )
        return questions
