"""
Client-side view of practice questions.

Flattens the nested question payload served by the API and normalizes
inline LaTeX delimiters.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

CHOICE_LABELS = ("A", "B", "C", "D")

MATH_DOMAINS = frozenset(
    {
        "Algebra",
        "Advanced Math",
        "Geometry and Trigonometry",
        "Problem-Solving and Data Analysis",
    }
)

_INLINE_LATEX = re.compile(r"\\\((.*?)\\\)")


@dataclass(frozen=True)
class ParsedQuestion:
    """A question ready to be presented and answered."""

    id: str
    domain: str
    difficulty: str
    section: str
    question: str
    choices: Dict[str, str] = field(default_factory=dict)
    correct_answer: str = "A"
    explanation: str = ""
    paragraph: Optional[str] = None

    def is_correct(self, choice: Optional[str]) -> bool:
        return choice is not None and choice == self.correct_answer


def normalize_latex(text: Optional[str]) -> Optional[str]:
    r"""
    Rewrite ``\(...\)`` inline math as ``$...$``.

    ``$...$`` and ``$$...$$`` are already in the expected form.
    """
    if not text:
        return text
    return _INLINE_LATEX.sub(lambda m: f"${m.group(1)}$", text)


def section_for_domain(domain: str) -> str:
    return "math" if domain in MATH_DOMAINS else "english"


def parse_question(data: Mapping[str, Any]) -> ParsedQuestion:
    """
    Flatten one API question payload.

    The correct answer and explanation may sit at the top level or inside
    the nested ``question`` object; the answer defaults to ``A``.
    """
    body = data.get("question") or {}
    if not isinstance(body, Mapping):
        body = {"question": str(body)}
    choices = body.get("choices") or {}
    domain = data.get("domain") or ""
    paragraph = body.get("paragraph")

    return ParsedQuestion(
        id=str(data["id"]),
        domain=domain,
        difficulty=data.get("difficulty") or "",
        section=data.get("section") or section_for_domain(domain),
        paragraph=normalize_latex(paragraph) if paragraph else None,
        question=normalize_latex(body.get("question") or "") or "",
        choices={
            label: normalize_latex(choices.get(label) or "") or ""
            for label in CHOICE_LABELS
        },
        correct_answer=data.get("correct_answer") or body.get("correct_answer") or "A",
        explanation=normalize_latex(
            data.get("explanation") or body.get("explanation") or ""
        )
        or "",
    )


def parse_questions(items: Iterable[Mapping[str, Any]]) -> List[ParsedQuestion]:
    return [parse_question(item) for item in items]
