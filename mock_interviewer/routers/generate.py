"""
FastAPI router for interview generation.

POST /api/vapi/generate accepts either a setup-call transcript or an
explicit interview config; GET on the same path is a liveness check.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from mock_interviewer.errors import MockInterviewerError, ValidationError
from mock_interviewer.models.requests import ErrorResponse, GenerateInterviewRequest, GenerateInterviewResponse
from mock_interviewer.routers.dependencies import get_generation_pipeline, limiter, log_request_time
from mock_interviewer.services.interview_generation import InterviewGenerationPipeline, config_from_request
from mock_interviewer.utils.constants import (
    ERROR_INTERNAL,
    ERROR_MISSING_CONFIG_FIELDS,
    ERROR_MISSING_GENERATE_FIELDS,
    GENERATE_PING_DATA,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vapi", tags=["generate"])


def _is_config_request(body: GenerateInterviewRequest) -> bool:
    return body.transcript is None and any([body.role, body.level, body.type])


@router.post(
    "/generate",
    response_model=GenerateInterviewResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
@limiter.limit("10/minute")
async def generate_interview(
    request: Request,
    body: GenerateInterviewRequest,
    pipeline: InterviewGenerationPipeline = Depends(get_generation_pipeline),
    _: None = Depends(log_request_time)
):
    """
    Generate and store an interview.

    Body is ``{userid, transcript}`` or ``{type, role, level, techstack, amount, userid}``.
    """
    if _is_config_request(body):
        if not (body.userid and body.role and body.level and body.type):
            raise ValidationError(ERROR_MISSING_CONFIG_FIELDS)
        config = config_from_request(
            role=body.role,
            level=body.level,
            interview_type=body.type,
            techstack=body.techstack,
            amount=body.amount
        )
    else:
        config = None
        if not body.userid or not body.transcript:
            raise ValidationError(ERROR_MISSING_GENERATE_FIELDS)

    try:
        if config is not None:
            result = await pipeline.generate_from_config(body.userid, config)
        else:
            result = await pipeline.generate_from_transcript(body.userid, body.transcript)
    except MockInterviewerError:
        raise
    except Exception as e:
        logger.error(f"Interview generation failed for user {body.userid}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "message": str(e) or ERROR_INTERNAL})

    logger.info(f"Generated interview {result.get('id')} for user {body.userid}")
    return result


@router.get("/generate")
async def generate_ping():
    return {"success": True, "data": GENERATE_PING_DATA}
