"""
Request and response models for the Mock Interviewer HTTP API.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from mock_interviewer.models.interview import CallMode, TranscriptEntry


class GenerateInterviewRequest(BaseModel):
    """
    Body of POST /api/vapi/generate.

    Two shapes are accepted: ``{userid, transcript}`` (extract the config from
    the transcript) or ``{type, role, level, techstack, amount, userid}``.
    Every field is optional here; the route decides which are required.
    """
    userid: Optional[str] = None
    transcript: Optional[List[TranscriptEntry]] = None
    type: Optional[str] = None
    role: Optional[str] = None
    level: Optional[str] = None
    techstack: Optional[Union[List[str], str]] = None
    amount: Optional[Union[int, str]] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "type": "technical",
            "role": "Backend Engineer",
            "level": "Senior",
            "techstack": "Go,SQL",
            "amount": 3,
            "userid": "user_123",
        }
    })


class GenerateInterviewResponse(BaseModel):
    success: bool
    id: Optional[str] = None
    message: Optional[str] = None


class CreateFeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interview_id: str = Field(..., alias="interviewId")
    user_id: str = Field(..., alias="userId")
    transcript: List[TranscriptEntry]
    feedback_id: Optional[str] = Field(None, alias="feedbackId")


class CreateFeedbackResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    feedback_id: Optional[str] = Field(None, alias="feedbackId")


class StartCallRequest(BaseModel):
    """Body of POST /api/calls."""
    model_config = ConfigDict(populate_by_name=True)

    mode: CallMode
    user_name: Optional[str] = Field(None, alias="userName")
    user_id: Optional[str] = Field(None, alias="userId")
    interview_id: Optional[str] = Field(None, alias="interviewId")
    questions: List[str] = Field(default_factory=list)
    interviewer: Optional[str] = Field(None, description="Interviewer assistant id override")


class CallStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    mode: CallMode
    state: str
    transcript_length: int = Field(0, alias="transcriptLength")
    latest_partial: str = Field("", alias="latestPartial")
    is_speaking: bool = Field(False, alias="isSpeaking")
    navigate_to: Optional[str] = Field(None, alias="navigateTo")
    web_call_url: Optional[str] = Field(None, alias="webCallUrl")


class ErrorResponse(BaseModel):
    success: bool = False
    message: str = Field(..., description="Error details")
