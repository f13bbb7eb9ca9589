"""
Pydantic schemas for practice questions and question endpoints.

Questions keep the upstream field names (``correct_answer``, ``svg_content``)
so clients see exactly what the content source publishes.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional

from satprep.schemas.base import SuccessResponse


class QuestionBody(BaseModel):
    """Prompt, optional passage and labeled choices."""

    model_config = ConfigDict(extra="allow", frozen=True)

    paragraph: Optional[str] = Field(None, description="Supporting passage")
    question: str = Field("", description="Prompt text")
    choices: Dict[str, str] = Field(
        default_factory=dict, description="Answer choices keyed A-D"
    )


class QuestionVisual(BaseModel):
    """Optional visual attachment (figure, chart)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = Field(..., description="Visual type")
    svg_content: Optional[str] = Field(None, description="Inline SVG markup")


class Question(BaseModel):
    """A single practice question as served by the question bank."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(..., min_length=1, description="Upstream question identifier")
    domain: str = Field("", description="Subject-matter domain, e.g. 'Algebra'")
    difficulty: str = Field("", description="Easy, Medium or Hard")
    section: Optional[str] = Field(None, description="math or english")
    correct_answer: Optional[str] = Field(None, description="Correct choice label")
    explanation: Optional[str] = Field(None, description="Answer explanation")
    question: QuestionBody = Field(..., description="Question content")
    visuals: Optional[QuestionVisual] = Field(None, description="Visual attachment")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Accept numeric identifiers from the upstream source."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("domain", "difficulty", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Treat null domain or difficulty as empty text."""
        return "" if v is None else v


class QuestionListResponse(SuccessResponse):
    """Filtered question set."""

    count: int = Field(..., description="Number of questions returned")
    questions: List[Question] = Field(..., description="Questions in random order")


class QuestionDetailResponse(SuccessResponse):
    """Single question lookup."""

    question: Question


class DomainListResponse(SuccessResponse):
    """Distinct domains present in the question bank."""

    count: int
    domains: List[str]


class SectionListResponse(SuccessResponse):
    """Fixed list of SAT sections."""

    sections: List[str]


class CacheStatusResponse(SuccessResponse):
    """Whether the question bank snapshot is loaded."""

    is_cached: bool = Field(..., description="True once a non-empty snapshot exists")
    count: int = Field(..., description="Number of cached questions")
