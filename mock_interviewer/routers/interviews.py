"""
FastAPI router for interviews, feedback and the home page dashboard.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from mock_interviewer.models.interview import DashboardView, FeedbackReport, Interview
from mock_interviewer.models.requests import CreateFeedbackRequest, CreateFeedbackResponse
from mock_interviewer.routers.dependencies import get_repository, get_scoring_pipeline, log_request_time
from mock_interviewer.services.feedback_scoring import FeedbackScoringPipeline
from mock_interviewer.services.interview_repository import InterviewRepository
from mock_interviewer.utils.constants import LATEST_INTERVIEWS_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["interviews"])


# Declared before /interviews/{interview_id} so "latest" is not taken as an id
@router.get("/interviews/latest", response_model=List[Interview])
async def get_latest_interviews(
    user_id: str = Query(..., alias="userId"),
    limit: int = Query(LATEST_INTERVIEWS_LIMIT, ge=1, le=100),
    repository: InterviewRepository = Depends(get_repository)
):
    """Finalized interviews created by other users, newest first."""
    return await repository.get_latest_interviews(user_id, limit=limit)


@router.get("/interviews/{interview_id}", response_model=Interview)
async def get_interview(
    interview_id: str,
    repository: InterviewRepository = Depends(get_repository)
):
    interview = await repository.get_interview_by_id(interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    return interview


@router.get("/users/{user_id}/interviews", response_model=List[Interview])
async def get_user_interviews(
    user_id: str,
    repository: InterviewRepository = Depends(get_repository)
):
    return await repository.get_interviews_by_user_id(user_id)


@router.get("/users/{user_id}/dashboard", response_model=DashboardView)
async def get_dashboard(
    user_id: str,
    repository: InterviewRepository = Depends(get_repository),
    _: None = Depends(log_request_time)
):
    """Home page data for a user."""
    return await repository.get_dashboard(user_id)


@router.post("/feedback", response_model=CreateFeedbackResponse, response_model_exclude_none=True)
async def create_feedback(
    body: CreateFeedbackRequest,
    repository: InterviewRepository = Depends(get_repository),
    pipeline: FeedbackScoringPipeline = Depends(get_scoring_pipeline),
    _: None = Depends(log_request_time)
):
    """
    Score an interview transcript.

    Without a ``feedbackId``, an existing report for the same interview and
    user is returned instead of creating a second one.
    """
    if not body.feedback_id:
        existing = await repository.get_feedback_by_interview_id(body.interview_id, body.user_id)
        if existing:
            logger.info(f"Feedback {existing.id} already exists for interview {body.interview_id}")
            return {"success": True, "feedbackId": existing.id}

    result = await pipeline.create_feedback(
        body.interview_id,
        body.user_id,
        body.transcript,
        feedback_id=body.feedback_id
    )
    if not result.get("success"):
        return JSONResponse(status_code=500, content={"success": False})
    return result


@router.get("/interviews/{interview_id}/feedback", response_model=FeedbackReport)
async def get_feedback(
    interview_id: str,
    user_id: str = Query(..., alias="userId"),
    repository: InterviewRepository = Depends(get_repository)
):
    feedback = await repository.get_feedback_by_interview_id(interview_id, user_id)
    if not feedback:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return feedback
