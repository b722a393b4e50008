"""
FastAPI router for voice call sessions.

Clients open a call here and join it with the returned ``webCallUrl``; Vapi
reports the live call back through the server-message webhook.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from mock_interviewer.models.requests import CallStatusResponse, StartCallRequest
from mock_interviewer.routers.dependencies import get_call_registry, limiter, log_request_time
from mock_interviewer.services.call_sessions import CallSession, CallSessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["calls"])


def build_call_status(session: CallSession) -> CallStatusResponse:
    controller = session.controller
    return CallStatusResponse(
        sessionId=session.session_id,
        mode=controller.mode,
        state=controller.state.value,
        transcriptLength=len(controller.transcript),
        latestPartial=controller.transcript.latest_partial,
        isSpeaking=controller.is_speaking,
        navigateTo=controller.navigation_target,
        webCallUrl=getattr(session.agent, "web_call_url", None)
    )


@router.post("/calls", response_model=CallStatusResponse)
@limiter.limit("10/minute")
async def start_call(
    request: Request,
    body: StartCallRequest,
    registry: CallSessionRegistry = Depends(get_call_registry),
    _: None = Depends(log_request_time)
):
    """Open a call session and start the voice agent."""
    session = await registry.open(
        body.mode,
        user_name=body.user_name,
        user_id=body.user_id,
        interview_id=body.interview_id,
        questions=body.questions,
        interviewer=body.interviewer
    )
    return build_call_status(session)


@router.get("/calls/{session_id}", response_model=CallStatusResponse)
async def get_call(
    session_id: str,
    registry: CallSessionRegistry = Depends(get_call_registry)
):
    return build_call_status(registry.lookup(session_id))


@router.post("/calls/{session_id}/stop", response_model=CallStatusResponse)
async def stop_call(
    session_id: str,
    registry: CallSessionRegistry = Depends(get_call_registry),
    _: None = Depends(log_request_time)
):
    """Manual disconnect."""
    session = await registry.stop(session_id)
    return build_call_status(session)


@router.post("/vapi/webhook")
async def vapi_webhook(
    payload: Dict[str, Any] = Body(...),
    registry: CallSessionRegistry = Depends(get_call_registry)
):
    """Receive a Vapi server message and route it to its call session."""
    message = payload.get("message") or {}
    routed = await registry.route_message(message)
    return {"success": True, "routed": routed}
