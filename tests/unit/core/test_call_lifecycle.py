"""
Unit tests for CallLifecycleController.
"""
import pytest
from unittest.mock import AsyncMock, Mock

from mock_interviewer.core.call_lifecycle import CallLifecycleController, CallPayload
from mock_interviewer.errors import AlreadyActive, SessionStartFailed, ValidationError
from mock_interviewer.models.interview import CallMode, CallState
from mock_interviewer.services.voice_agent import (
    CALL_END,
    CALL_START,
    MESSAGE,
    SPEECH_END,
    SPEECH_START,
    VoiceAgent,
)
from mock_interviewer.utils.constants import HOME_VIEW


class FakeVoiceAgent(VoiceAgent):
    """Voice agent whose start/stop are mocks; events are emitted by the test."""

    def __init__(self):
        super().__init__()
        self.start_mock = AsyncMock()
        self.stop_mock = AsyncMock()

    async def start(self, descriptor, variables):
        await self.start_mock(descriptor, variables)

    async def stop(self):
        await self.stop_mock()


def final_message(text, role="user"):
    return {"type": "transcript", "transcriptType": "final", "role": role, "transcript": text}


@pytest.fixture
def agent():
    return FakeVoiceAgent()


@pytest.fixture
def generation_pipeline():
    pipeline = Mock()
    pipeline.generate_from_transcript = AsyncMock(return_value={"success": True, "id": "interview-1"})
    return pipeline


@pytest.fixture
def scoring_pipeline():
    pipeline = Mock()
    pipeline.create_feedback = AsyncMock(return_value={"success": True, "feedbackId": "feedback-1"})
    return pipeline


@pytest.fixture
def navigate():
    return Mock()


@pytest.fixture
def controller(agent, generation_pipeline, scoring_pipeline, navigate):
    return CallLifecycleController(agent, generation_pipeline, scoring_pipeline, navigate=navigate)


@pytest.fixture
def generate_payload():
    return CallPayload(user_name="Ada", user_id="user-1", workflow_id="wf-1")


@pytest.fixture
def interview_payload():
    return CallPayload(
        user_name="Ada",
        user_id="user-1",
        interview_id="interview-9",
        questions=["What is a goroutine?", "Explain SQL joins."]
    )


class TestSessionRequest:
    """Test descriptor and variables built for each mode."""

    def test_generate_mode_uses_workflow(self, controller, generate_payload):
        descriptor, variables = controller.build_session_request(CallMode.GENERATE, generate_payload)

        assert descriptor.workflow_id == "wf-1"
        assert variables == {"username": "Ada", "userid": "user-1"}

    def test_generate_mode_requires_workflow(self, controller):
        with pytest.raises(ValidationError):
            controller.build_session_request(CallMode.GENERATE, CallPayload(user_id="user-1"))

    def test_interview_mode_fills_persona_with_questions(self, controller, interview_payload):
        descriptor, variables = controller.build_session_request(CallMode.INTERVIEW, interview_payload)

        expected = "- What is a goroutine?\n- Explain SQL joins."
        assert variables == {"questions": expected}
        system_message = descriptor.assistant["model"]["messages"][0]["content"]
        assert expected in system_message
        assert "{{questions}}" not in system_message

    def test_interview_mode_uses_interviewer_override(self, controller, interview_payload):
        interview_payload.interviewer = "assistant-42"

        descriptor, _ = controller.build_session_request(CallMode.INTERVIEW, interview_payload)

        assert descriptor.assistant_id == "assistant-42"
        assert descriptor.assistant is None

    def test_interview_mode_requires_interview_id(self, controller):
        with pytest.raises(ValidationError):
            controller.build_session_request(CallMode.INTERVIEW, CallPayload(user_id="user-1"))

    def test_generate_mode_requires_user_id(self, controller):
        with pytest.raises(ValidationError):
            controller.build_session_request(CallMode.GENERATE, CallPayload(user_name="Ada", workflow_id="wf-1"))

    def test_interview_mode_requires_user_id(self, controller):
        with pytest.raises(ValidationError):
            controller.build_session_request(
                CallMode.INTERVIEW,
                CallPayload(interview_id="interview-9", questions=["What is a goroutine?"])
            )


class TestCallLifecycle:
    """Test state transitions and terminal dispatch."""

    @pytest.mark.asyncio
    async def test_start_moves_to_connecting_then_active(self, controller, agent, generate_payload):
        await controller.start(CallMode.GENERATE, generate_payload)
        assert controller.state == CallState.CONNECTING
        agent.start_mock.assert_awaited_once()

        await agent.emit(CALL_START)
        assert controller.state == CallState.ACTIVE

    @pytest.mark.asyncio
    async def test_start_failure_returns_to_idle(self, controller, agent, generate_payload):
        agent.start_mock.side_effect = RuntimeError("microphone denied")

        with pytest.raises(SessionStartFailed):
            await controller.start(CallMode.GENERATE, generate_payload)

        assert controller.state == CallState.IDLE

    @pytest.mark.asyncio
    async def test_start_without_user_id_stays_idle(self, controller, agent):
        with pytest.raises(ValidationError):
            await controller.start(CallMode.GENERATE, CallPayload(workflow_id="wf-1"))

        assert controller.state == CallState.IDLE
        agent.start_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_failure_after_call_start_keeps_active(self, controller, agent, generate_payload):
        async def fail_after_call_start(descriptor, variables):
            await agent.emit(CALL_START)
            raise ValueError("unreadable call response")

        agent.start_mock.side_effect = fail_after_call_start

        with pytest.raises(SessionStartFailed):
            await controller.start(CallMode.GENERATE, generate_payload)

        assert controller.state == CallState.ACTIVE

    @pytest.mark.asyncio
    async def test_start_twice_raises_already_active(self, controller, generate_payload):
        await controller.start(CallMode.GENERATE, generate_payload)

        with pytest.raises(AlreadyActive):
            await controller.start(CallMode.GENERATE, generate_payload)

    @pytest.mark.asyncio
    async def test_generate_call_dispatches_once(
        self, controller, agent, generation_pipeline, scoring_pipeline, navigate, generate_payload
    ):
        await controller.start(CallMode.GENERATE, generate_payload)
        await agent.emit(CALL_START)
        await agent.emit(MESSAGE, final_message("What role?", role="assistant"))
        await agent.emit(MESSAGE, final_message("Backend engineer"))

        await agent.emit(CALL_END)
        await agent.emit(CALL_END)
        await agent.emit(MESSAGE, final_message("late words"))
        result = await controller.wait_for_dispatch()

        assert controller.state == CallState.FINISHED
        generation_pipeline.generate_from_transcript.assert_awaited_once()
        user_id, transcript = generation_pipeline.generate_from_transcript.await_args.args
        assert user_id == "user-1"
        assert [entry.text for entry in transcript] == ["What role?", "Backend engineer"]
        scoring_pipeline.create_feedback.assert_not_called()
        assert result == {"success": True, "id": "interview-1"}
        navigate.assert_called_once_with(HOME_VIEW)

    @pytest.mark.asyncio
    async def test_manual_stop_finishes_immediately(self, controller, agent, generation_pipeline, generate_payload):
        await controller.start(CallMode.GENERATE, generate_payload)
        await agent.emit(CALL_START)
        await agent.emit(MESSAGE, final_message("Senior Go developer"))

        await controller.stop()
        assert controller.state == CallState.FINISHED
        agent.stop_mock.assert_awaited_once()

        await agent.emit(CALL_END)
        await controller.wait_for_dispatch()

        assert controller.state == CallState.FINISHED
        generation_pipeline.generate_from_transcript.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_noop(self, controller, agent):
        await controller.stop()

        assert controller.state == CallState.IDLE
        agent.stop_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_transcript_does_not_dispatch(self, controller, agent, generation_pipeline, generate_payload):
        await controller.start(CallMode.GENERATE, generate_payload)
        await agent.emit(CALL_START)
        await agent.emit(CALL_END)

        assert controller.state == CallState.FINISHED
        assert controller.dispatched is False
        generation_pipeline.generate_from_transcript.assert_not_called()

    @pytest.mark.asyncio
    async def test_late_final_transcript_dispatches_after_empty_finish(
        self, controller, agent, generation_pipeline, generate_payload
    ):
        await controller.start(CallMode.GENERATE, generate_payload)
        await agent.emit(CALL_START)
        await agent.emit(CALL_END)

        await agent.emit(MESSAGE, final_message("Frontend, junior, five questions"))
        await controller.wait_for_dispatch()

        assert controller.dispatched is True
        generation_pipeline.generate_from_transcript.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_interview_call_navigates_to_feedback(
        self, controller, agent, scoring_pipeline, navigate, interview_payload
    ):
        await controller.start(CallMode.INTERVIEW, interview_payload)
        await agent.emit(CALL_START)
        await agent.emit(MESSAGE, final_message("A goroutine is a lightweight thread"))
        await agent.emit(CALL_END)
        await controller.wait_for_dispatch()

        scoring_pipeline.create_feedback.assert_awaited_once()
        assert scoring_pipeline.create_feedback.await_args.args[0] == "interview-9"
        navigate.assert_called_once_with("/interview/interview-9/feedback")

    @pytest.mark.asyncio
    async def test_failed_scoring_navigates_home(self, controller, agent, scoring_pipeline, navigate, interview_payload):
        scoring_pipeline.create_feedback.return_value = {"success": False}

        await controller.start(CallMode.INTERVIEW, interview_payload)
        await agent.emit(CALL_START)
        await agent.emit(MESSAGE, final_message("I don't know"))
        await agent.emit(CALL_END)
        await controller.wait_for_dispatch()

        navigate.assert_called_once_with(HOME_VIEW)
        assert controller.navigation_target == HOME_VIEW

    @pytest.mark.asyncio
    async def test_speech_events_toggle_speaking(self, controller, agent):
        await agent.emit(SPEECH_START)
        assert controller.is_speaking is True

        await agent.emit(SPEECH_END)
        assert controller.is_speaking is False

    @pytest.mark.asyncio
    async def test_close_unsubscribes_and_stops_live_call(self, controller, agent, generate_payload):
        await controller.start(CallMode.GENERATE, generate_payload)

        await controller.close()
        agent.stop_mock.assert_awaited_once()

        await agent.emit(CALL_START)
        assert controller.state == CallState.CONNECTING
