"""
Interview data models for the Mock Interviewer platform.

This module defines Pydantic models for transcripts, interview configuration,
persisted interviews and feedback reports. Documents are stored with the
camelCase field names the web client reads (``userId``, ``createdAt`` ...),
so every model exposes snake_case attributes with camelCase aliases.
"""

from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mock_interviewer.utils.constants import (
    DEFAULT_LEVEL,
    DEFAULT_QUESTION_COUNT,
    DEFAULT_ROLE,
    FEEDBACK_CATEGORIES,
)


def utc_now_iso() -> str:
    """Current time as an ISO 8601 UTC string ending with 'Z'."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class CallState(str, Enum):
    """Lifecycle of one voice call. Only ever moves forward."""
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    FINISHED = "finished"


class CallMode(str, Enum):
    """What a call session is for."""
    GENERATE = "generate"    # Collect interview parameters, then generate questions
    INTERVIEW = "interview"  # Run the interview, then score the transcript


class Speaker(str, Enum):
    """Who produced an utterance."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class InterviewKind(str, Enum):
    """Kind of interview the questions are generated for."""
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    MIXED = "mixed"


class TranscriptEntry(BaseModel):
    """A single finalized utterance. Immutable once created."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    speaker: Speaker = Field(..., alias="role", description="Who spoke")
    text: str = Field(..., alias="content", description="Final utterance text")

    def to_document(self) -> Dict[str, str]:
        return {"role": self.speaker.value, "content": self.text}


class InterviewConfig(BaseModel):
    """Parameters used to generate an interview's questions."""
    model_config = ConfigDict(populate_by_name=True)

    role: str = Field(DEFAULT_ROLE, description="Job role being interviewed for")
    level: str = Field(DEFAULT_LEVEL, description="Seniority level")
    tech_stack: List[str] = Field(default_factory=list, alias="techstack")
    question_count: int = Field(DEFAULT_QUESTION_COUNT, ge=1, alias="amount")
    interview_kind: InterviewKind = Field(InterviewKind.MIXED, alias="type")


class Interview(BaseModel):
    """A persisted interview with its AI-authored questions."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    role: str
    level: str
    tech_stack: List[str] = Field(default_factory=list, alias="techstack")
    interview_kind: InterviewKind = Field(InterviewKind.MIXED, alias="type")
    question_count: int = Field(DEFAULT_QUESTION_COUNT, alias="amount")
    questions: List[str] = Field(default_factory=list)
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    finalized: bool = True
    call_completed: bool = Field(False, alias="callCompleted")
    user_id: str = Field(..., alias="userId")
    cover_image: Optional[str] = Field(None, alias="coverImage")
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")

    @classmethod
    def from_config(
        cls,
        config: InterviewConfig,
        user_id: str,
        questions: List[str],
        **fields: Any
    ) -> "Interview":
        return cls(
            role=config.role,
            level=config.level,
            techstack=list(config.tech_stack),
            type=config.interview_kind,
            amount=config.question_count,
            questions=questions,
            userId=user_id,
            **fields
        )

    def to_document(self) -> Dict[str, Any]:
        """Serialize for the document store (id is assigned by the store)."""
        return self.model_dump(by_alias=True, exclude={"id"}, mode="json")


class FeedbackReport(BaseModel):
    """A persisted, schema-validated score report for one interview."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    interview_id: str = Field(..., alias="interviewId")
    user_id: str = Field(..., alias="userId")
    total_score: int = Field(..., ge=0, le=100, alias="totalScore")
    category_scores: Dict[str, int] = Field(..., alias="categoryScores")
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list, alias="areasForImprovement")
    final_assessment: str = Field(..., alias="finalAssessment")
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")

    @field_validator("category_scores")
    @classmethod
    def check_categories(cls, scores: Dict[str, int]) -> Dict[str, int]:
        if set(scores) != set(FEEDBACK_CATEGORIES):
            raise ValueError(f"categoryScores must contain exactly {list(FEEDBACK_CATEGORIES)}")
        for name, score in scores.items():
            if not 0 <= score <= 100:
                raise ValueError(f"Score for {name} out of range: {score}")
        return scores

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id"}, mode="json")


class CategoryScores(BaseModel):
    """The five fixed scoring categories, each scored 0 to 100."""
    communication_skills: int = Field(
        ..., ge=0, le=100,
        description="Communication Skills: clarity, articulation, structured responses."
    )
    technical_knowledge: int = Field(
        ..., ge=0, le=100,
        description="Technical Knowledge: understanding of key concepts for the role."
    )
    problem_solving: int = Field(
        ..., ge=0, le=100,
        description="Problem-Solving: ability to analyze problems and propose solutions."
    )
    cultural_role_fit: int = Field(
        ..., ge=0, le=100,
        description="Cultural & Role Fit: alignment with company values and job role."
    )
    confidence_clarity: int = Field(
        ..., ge=0, le=100,
        description="Confidence & Clarity: confidence in responses, engagement, and clarity."
    )

    def as_mapping(self) -> Dict[str, int]:
        """Map the scores onto their display category names."""
        return dict(zip(FEEDBACK_CATEGORIES, (
            self.communication_skills,
            self.technical_knowledge,
            self.problem_solving,
            self.cultural_role_fit,
            self.confidence_clarity,
        )))


class FeedbackAssessment(BaseModel):
    """Structured output schema requested from the grading model."""
    total_score: int = Field(..., ge=0, le=100, description="Overall score from 0 to 100")
    category_scores: CategoryScores = Field(..., description="Scores for the fixed categories")
    strengths: List[str] = Field(default_factory=list, description="What the candidate did well")
    areas_for_improvement: List[str] = Field(
        default_factory=list,
        description="Concrete areas where the candidate should improve"
    )
    final_assessment: str = Field(..., description="Overall assessment of the candidate")


class DashboardView(BaseModel):
    """Home page data: the user's interviews split by call completion."""
    model_config = ConfigDict(populate_by_name=True)

    your_interviews: List[Interview] = Field(default_factory=list, alias="yourInterviews")
    take_interviews: List[Interview] = Field(default_factory=list, alias="takeInterviews")
    latest_interviews: List[Interview] = Field(default_factory=list, alias="latestInterviews")
