"""
Call session registry for Mock Interviewer.

This module keeps the live call lifecycle controllers, keyed by a generated
session id. The id travels to Vapi as call metadata and comes back on every
server message, which is how webhook events find their session.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from mock_interviewer.core.call_lifecycle import CallLifecycleController, CallPayload
from mock_interviewer.errors import SessionNotFound
from mock_interviewer.models.interview import CallMode, CallState
from mock_interviewer.services.voice_agent import VoiceAgent
from mock_interviewer.utils.config import get_session_config, get_voice_config

logger = logging.getLogger(__name__)


def session_id_from_message(message: Dict[str, Any]) -> Optional[str]:
    """Read the session id Vapi echoes back in ``message.call.metadata``."""
    call = message.get("call") or {}
    metadata = call.get("metadata") or {}
    return metadata.get("sessionId")


@dataclass
class CallSession:
    session_id: str
    controller: CallLifecycleController
    agent: VoiceAgent
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    def touch(self):
        self.last_activity = datetime.now()


class CallSessionRegistry:
    """
    Owns the call sessions served by this process.

    Sessions are dropped once their terminal dispatch completes. Sessions that
    never finish are closed by ``sweep_stale``.
    """

    def __init__(
        self,
        agent_factory: Callable[[], VoiceAgent],
        generation_pipeline,
        scoring_pipeline,
        workflow_id: Optional[str] = None,
        interviewer_assistant_id: Optional[str] = None
    ):
        """
        Initialize the registry.

        Args:
            agent_factory: Builds a fresh voice agent for each call
            generation_pipeline: Pipeline for ``generate`` calls
            scoring_pipeline: Pipeline for ``interview`` calls
            workflow_id: Vapi workflow run by ``generate`` calls
            interviewer_assistant_id: Vapi assistant overriding the built-in interviewer persona
        """
        voice_config = get_voice_config()
        self.agent_factory = agent_factory
        self.generation_pipeline = generation_pipeline
        self.scoring_pipeline = scoring_pipeline
        self.workflow_id = workflow_id or voice_config["workflow_id"]
        self.interviewer_assistant_id = interviewer_assistant_id or voice_config["interviewer_assistant_id"]
        self._sessions: Dict[str, CallSession] = {}
        # Completed sessions kept for status polling until the next sweep
        self._completed: Dict[str, CallSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def open(
        self,
        mode: CallMode,
        user_name: Optional[str] = None,
        user_id: Optional[str] = None,
        interview_id: Optional[str] = None,
        questions: Optional[List[str]] = None,
        interviewer: Optional[str] = None
    ) -> CallSession:
        """
        Open and start a call session.

        Returns:
            The started session

        Raises:
            ValidationError: If the inputs the mode needs are missing
            SessionStartFailed: If the voice agent could not establish the call
        """
        session_id = str(uuid.uuid4())
        agent = self.agent_factory()
        controller = CallLifecycleController(
            agent,
            self.generation_pipeline,
            self.scoring_pipeline,
            navigate=lambda target: logger.info(f"Session {session_id} navigating to {target}"),
            on_dispatch_complete=lambda _controller: self._drop(session_id)
        )
        payload = CallPayload(
            user_name=user_name,
            user_id=user_id,
            interview_id=interview_id,
            questions=list(questions or []),
            interviewer=interviewer or self.interviewer_assistant_id or None,
            workflow_id=self.workflow_id,
            metadata={"sessionId": session_id}
        )

        session = CallSession(session_id=session_id, controller=controller, agent=agent)
        self._sessions[session_id] = session
        try:
            await controller.start(mode, payload)
        except Exception:
            self._sessions.pop(session_id, None)
            await controller.close()
            raise

        logger.info(f"Opened {mode.value} call session {session_id} for user {user_id}")
        return session

    def get(self, session_id: str) -> CallSession:
        """Live session by id."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(f"Call session {session_id} not found")
        return session

    def lookup(self, session_id: str) -> CallSession:
        """Live or recently completed session by id."""
        session = self._sessions.get(session_id) or self._completed.get(session_id)
        if session is None:
            raise SessionNotFound(f"Call session {session_id} not found")
        return session

    async def stop(self, session_id: str) -> CallSession:
        """Manually disconnect a session."""
        session = self.get(session_id)
        session.touch()
        await session.controller.stop()
        return session

    async def route_message(self, message: Dict[str, Any]) -> bool:
        """
        Deliver a Vapi server message to the session it belongs to.

        Returns:
            True if a session handled the message
        """
        session_id = session_id_from_message(message)
        session = self._sessions.get(session_id) if session_id else None
        if session is None:
            logger.debug(f"No call session for server message {message.get('type')} (session {session_id})")
            return False

        session.touch()
        handler = getattr(session.agent, "handle_server_message", None)
        if handler is None:
            logger.warning(f"Voice agent for session {session_id} does not accept server messages")
            return False
        await handler(message)
        return True

    async def _drop(self, session_id: str):
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.touch()
        self._completed[session_id] = session
        await session.controller.close()
        logger.info(f"Call session {session_id} completed")

    @staticmethod
    def _is_abandoned(session: CallSession) -> bool:
        state = session.controller.state
        if state in (CallState.CONNECTING, CallState.ACTIVE):
            return True
        # Finished with an empty transcript: nothing will ever dispatch
        return state == CallState.FINISHED and not session.controller.dispatched

    async def sweep_stale(self, max_age_minutes: Optional[int] = None) -> int:
        """
        Close sessions that stopped receiving events without completing.

        Args:
            max_age_minutes: Inactivity limit, defaults to the configured session timeout

        Returns:
            Number of sessions closed
        """
        if max_age_minutes is None:
            max_age_minutes = get_session_config()["timeout_minutes"]
        cutoff = datetime.now() - timedelta(minutes=max_age_minutes)

        stale_ids = [
            session_id for session_id, session in self._sessions.items()
            if session.last_activity < cutoff and self._is_abandoned(session)
        ]
        for session_id in stale_ids:
            session = self._sessions.pop(session_id)
            logger.info(f"Closing stale call session {session_id} (state {session.controller.state.value})")
            try:
                await session.controller.close()
            except Exception as e:
                logger.error(f"Error closing stale call session {session_id}: {e}")
        expired_ids = [
            session_id for session_id, session in self._completed.items()
            if session.last_activity < cutoff
        ]
        for session_id in expired_ids:
            del self._completed[session_id]

        return len(stale_ids)

    async def close_all(self):
        """Close every session (used on shutdown)."""
        self._completed.clear()
        for session_id in list(self._sessions):
            session = self._sessions.pop(session_id)
            try:
                await session.controller.close()
            except Exception as e:
                logger.error(f"Error closing call session {session_id}: {e}")
