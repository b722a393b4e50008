"""
Shared FastAPI dependencies for the Mock Interviewer routers.
"""

import logging
from datetime import datetime

from fastapi import HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from mock_interviewer.services.call_sessions import CallSessionRegistry
from mock_interviewer.services.feedback_scoring import FeedbackScoringPipeline
from mock_interviewer.services.interview_generation import InterviewGenerationPipeline
from mock_interviewer.services.interview_repository import InterviewRepository

logger = logging.getLogger(__name__)

# Rate limiter shared by all routers; registered on app.state by the server
limiter = Limiter(key_func=get_remote_address)


async def log_request_time(request: Request):
    """Log request timing for HTTP endpoints."""
    request.state.start_time = datetime.now()
    yield
    process_time = (datetime.now() - request.state.start_time).total_seconds() * 1000
    logger.info(f"Request to {request.url.path} took {process_time:.2f}ms")


def _app_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"Service '{name}' not initialized")
    return service


def get_repository(request: Request) -> InterviewRepository:
    return _app_state(request, "repository")


def get_generation_pipeline(request: Request) -> InterviewGenerationPipeline:
    return _app_state(request, "generation_pipeline")


def get_scoring_pipeline(request: Request) -> FeedbackScoringPipeline:
    return _app_state(request, "scoring_pipeline")


def get_call_registry(request: Request) -> CallSessionRegistry:
    return _app_state(request, "call_registry")
