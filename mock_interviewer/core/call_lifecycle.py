"""
Call lifecycle controller for Mock Interviewer.

This module drives one voice call from start to finish:

    IDLE -> CONNECTING -> ACTIVE -> FINISHED

and, once the call is finished, hands the captured transcript to exactly one
pipeline: interview generation for ``generate`` calls, feedback scoring for
``interview`` calls. A controller serves a single call; a new call needs a
new controller.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from mock_interviewer.ai.prompts.interview_prompts import build_interviewer_persona
from mock_interviewer.core.transcript_accumulator import TranscriptAccumulator
from mock_interviewer.errors import AlreadyActive, SessionStartFailed, ValidationError
from mock_interviewer.models.interview import CallMode, CallState, TranscriptEntry
from mock_interviewer.services.voice_agent import (
    CALL_END,
    CALL_START,
    ERROR,
    MESSAGE,
    SPEECH_END,
    SPEECH_START,
    SessionDescriptor,
    VoiceAgent,
)
from mock_interviewer.utils.constants import FEEDBACK_VIEW, HOME_VIEW
from mock_interviewer.utils.transcript import format_question_list

logger = logging.getLogger(__name__)

Navigate = Callable[[str], Any]


@dataclass
class CallPayload:
    """Caller-supplied inputs for starting a call."""
    user_name: Optional[str] = None
    user_id: Optional[str] = None
    interview_id: Optional[str] = None
    questions: List[str] = field(default_factory=list)
    interviewer: Optional[str] = None  # Assistant id overriding the built-in persona
    workflow_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class CallLifecycleController:
    """
    Finite-state machine for a single voice call.

    The controller subscribes to the injected voice agent's events on
    construction. Terminal dispatch is guarded by an armed flag that is
    consumed the first time the call is FINISHED with a non-empty
    transcript, so repeated end notifications or late transcript updates
    never dispatch twice.
    """

    def __init__(
        self,
        agent: VoiceAgent,
        generation_pipeline,
        scoring_pipeline,
        navigate: Optional[Navigate] = None,
        on_dispatch_complete: Optional[Callable[["CallLifecycleController"], Any]] = None
    ):
        """
        Initialize the controller.

        Args:
            agent: Voice agent session owned by this controller
            generation_pipeline: Object with ``generate_from_transcript(user_id, transcript)``
            scoring_pipeline: Object with ``create_feedback(interview_id, user_id, transcript)``
            navigate: Called with the view the user should be sent to after dispatch
            on_dispatch_complete: Called once the terminal action has finished
        """
        self.agent = agent
        self.generation_pipeline = generation_pipeline
        self.scoring_pipeline = scoring_pipeline
        self.navigate = navigate
        self.on_dispatch_complete = on_dispatch_complete

        self.transcript = TranscriptAccumulator()
        self.is_speaking = False
        self.navigation_target: Optional[str] = None
        self.dispatch_result: Optional[Dict[str, Any]] = None

        self._state = CallState.IDLE
        self._mode: Optional[CallMode] = None
        self._payload = CallPayload()
        self._dispatch_armed = True
        self._dispatch_task: Optional[asyncio.Task] = None

        self._subscriptions: List[Tuple[str, Callable]] = [
            (CALL_START, self._on_call_start),
            (CALL_END, self._on_call_end),
            (MESSAGE, self._on_message),
            (SPEECH_START, self._on_speech_start),
            (SPEECH_END, self._on_speech_end),
            (ERROR, self._on_error),
        ]
        for event, handler in self._subscriptions:
            self.agent.on(event, handler)

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def mode(self) -> Optional[CallMode]:
        return self._mode

    @property
    def payload(self) -> CallPayload:
        return self._payload

    @property
    def dispatched(self) -> bool:
        """True once the terminal action has been fired."""
        return not self._dispatch_armed

    def _set_state(self, state: CallState):
        old_state = self._state
        self._state = state
        logger.info(f"Call state {old_state.value} -> {state.value}")

    def build_session_request(self, mode: CallMode, payload: CallPayload) -> Tuple[SessionDescriptor, Dict[str, Any]]:
        """
        Build the voice agent descriptor and template variables for a call.

        Args:
            mode: Call mode
            payload: Caller inputs

        Returns:
            (descriptor, variables) tuple

        Raises:
            ValidationError: If the inputs the mode needs are missing
        """
        if not payload.user_id:
            raise ValidationError("A user id is required to start a call")

        if mode == CallMode.GENERATE:
            if not payload.workflow_id:
                raise ValidationError("A workflow id is required to start a generate call")
            descriptor = SessionDescriptor(workflow_id=payload.workflow_id, metadata=payload.metadata)
            variables = {"username": payload.user_name, "userid": payload.user_id}
            return descriptor, variables

        if not payload.interview_id:
            raise ValidationError("An interview id is required to start an interview call")

        formatted_questions = format_question_list(payload.questions)
        if payload.interviewer:
            descriptor = SessionDescriptor(assistant_id=payload.interviewer, metadata=payload.metadata)
        else:
            descriptor = SessionDescriptor(
                assistant=build_interviewer_persona(formatted_questions),
                metadata=payload.metadata
            )
        return descriptor, {"questions": formatted_questions}

    async def start(self, mode: CallMode, payload: CallPayload):
        """
        Start the call.

        Raises:
            AlreadyActive: If this controller has already left IDLE
            ValidationError: If the payload lacks what the mode needs
            SessionStartFailed: If the voice agent could not establish the call
        """
        if self._state != CallState.IDLE:
            raise AlreadyActive(f"Call is already {self._state.value}")

        descriptor, variables = self.build_session_request(mode, payload)
        self._mode = mode
        self._payload = payload

        self._set_state(CallState.CONNECTING)
        try:
            await self.agent.start(descriptor, variables)
        except Exception as e:
            logger.error(f"Failed to start voice agent: {e}")
            # The agent may already have reported call-start before failing
            if self._state == CallState.CONNECTING:
                self._set_state(CallState.IDLE)
            raise SessionStartFailed(str(e)) from e

    async def stop(self):
        """
        Manual disconnect.

        The state becomes FINISHED right away; a later call-end event from the
        agent is then a no-op.
        """
        if self._state in (CallState.IDLE, CallState.FINISHED):
            logger.info(f"Ignoring stop while {self._state.value}")
            return

        logger.info("Manual disconnect")
        self._set_state(CallState.FINISHED)
        try:
            await self.agent.stop()
        except Exception as e:
            logger.warning(f"Error stopping voice agent: {e}")
        self._check_dispatch()

    async def close(self):
        """Unsubscribe from the voice agent and tear it down if the call is still live."""
        for event, handler in self._subscriptions:
            self.agent.off(event, handler)
        if self._state in (CallState.CONNECTING, CallState.ACTIVE):
            try:
                await self.agent.stop()
            except Exception as e:
                logger.warning(f"Error stopping voice agent on close: {e}")
        await self.agent.close()

    async def wait_for_dispatch(self) -> Optional[Dict[str, Any]]:
        """Wait for the terminal action, if one was fired, and return its result."""
        if self._dispatch_task is not None:
            await self._dispatch_task
        return self.dispatch_result

    def snapshot(self) -> Tuple[TranscriptEntry, ...]:
        return self.transcript.snapshot()

    # Voice agent events

    def _on_call_start(self, _payload: Any = None):
        if self._state == CallState.CONNECTING:
            self._set_state(CallState.ACTIVE)
        else:
            logger.debug(f"Ignoring call-start while {self._state.value}")

    def _on_call_end(self, _payload: Any = None):
        if self._state in (CallState.IDLE, CallState.FINISHED):
            logger.debug(f"Ignoring call-end while {self._state.value}")
            return
        self._set_state(CallState.FINISHED)
        self._check_dispatch()

    def _on_message(self, message: Optional[Dict[str, Any]]):
        if self.transcript.record_message(message or {}):
            self._check_dispatch()

    def _on_speech_start(self, _payload: Any = None):
        self.is_speaking = True

    def _on_speech_end(self, _payload: Any = None):
        self.is_speaking = False

    def _on_error(self, error: Any):
        logger.error(f"Voice agent error: {error}")

    # Terminal dispatch

    def _check_dispatch(self):
        """Fire the terminal action if the call is FINISHED, the guard is armed and there is a transcript."""
        if self._state != CallState.FINISHED or not self._dispatch_armed:
            return
        if len(self.transcript) == 0:
            logger.info("Call finished with an empty transcript, nothing to dispatch")
            return

        self._dispatch_armed = False
        self._dispatch_task = asyncio.create_task(self._run_terminal_action(self.snapshot()))

    async def _run_terminal_action(self, transcript: Tuple[TranscriptEntry, ...]):
        if self._mode == CallMode.GENERATE:
            target = await self._dispatch_generation(transcript)
        else:
            target = await self._dispatch_scoring(transcript)

        self.navigation_target = target
        await self._call_hook(self.navigate, target)
        await self._call_hook(self.on_dispatch_complete, self)

    async def _dispatch_generation(self, transcript: Tuple[TranscriptEntry, ...]) -> str:
        logger.info(f"Sending {len(transcript)} transcript entries to interview generation")
        try:
            self.dispatch_result = await self.generation_pipeline.generate_from_transcript(
                self._payload.user_id, list(transcript)
            )
            logger.info(f"Interview generation finished: {self.dispatch_result}")
        except Exception as e:
            logger.error(f"Interview generation failed: {e}")
            self.dispatch_result = {"success": False, "message": str(e)}
        return HOME_VIEW

    async def _dispatch_scoring(self, transcript: Tuple[TranscriptEntry, ...]) -> str:
        interview_id = self._payload.interview_id
        logger.info(f"Sending {len(transcript)} transcript entries to feedback scoring for {interview_id}")
        try:
            self.dispatch_result = await self.scoring_pipeline.create_feedback(
                interview_id, self._payload.user_id, list(transcript)
            )
        except Exception as e:
            logger.error(f"Feedback scoring failed: {e}")
            self.dispatch_result = {"success": False}

        if self.dispatch_result.get("success") and interview_id:
            return FEEDBACK_VIEW.format(interview_id=interview_id)
        logger.warning(f"No feedback saved for interview {interview_id}, sending user home")
        return HOME_VIEW

    @staticmethod
    async def _call_hook(hook: Optional[Callable], argument: Any):
        if hook is None:
            return
        try:
            result = hook(argument)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in call lifecycle hook {hook}: {e}")
