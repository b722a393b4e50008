"""
Voice agent collaborator for Mock Interviewer.

This module defines the event-emitting interface the call lifecycle consumes
and a Vapi implementation of it. Vapi calls are created over its REST API;
live call events arrive through Vapi's server-message webhook and are
translated into the same event names the Vapi web SDK emits.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx

from mock_interviewer.utils.config import get_voice_config

logger = logging.getLogger(__name__)

CALL_START = "call-start"
CALL_END = "call-end"
MESSAGE = "message"
SPEECH_START = "speech-start"
SPEECH_END = "speech-end"
ERROR = "error"

VOICE_EVENTS = (CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END, ERROR)


@dataclass
class SessionDescriptor:
    """
    What the voice agent should run.

    Exactly one of ``workflow_id``, ``assistant_id`` or ``assistant`` is set.
    """
    workflow_id: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class VoiceAgent(ABC):
    """
    Event-emitting voice agent session.

    Handlers are registered with ``on`` and removed with ``off``. Events:
    call-start, call-end, message, speech-start, speech-end, error.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {event: [] for event in VOICE_EVENTS}

    def on(self, event: str, handler: Callable):
        """Register a handler for an event."""
        if event not in self._handlers:
            logger.warning(f"Unknown voice event type: {event}")
            return
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Callable):
        """Remove a previously registered handler."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    async def emit(self, event: str, payload: Any = None):
        """
        Deliver an event to its handlers in registration order.

        Handler errors are logged and do not stop delivery to later handlers.
        """
        for handler in list(self._handlers.get(event, [])):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in voice event handler for {event}: {e}", exc_info=True)

    @abstractmethod
    async def start(self, descriptor: SessionDescriptor, variables: Dict[str, Any]) -> None:
        """Establish a call session. Raises on failure."""

    @abstractmethod
    async def stop(self) -> None:
        """Tear the call session down."""

    async def close(self) -> None:
        """Release resources held by the agent."""


class VapiVoiceAgent(VoiceAgent):
    """
    Voice agent backed by Vapi.

    ``start`` creates a web call; the client joins it with ``web_call_url``.
    Server messages posted by Vapi to the webhook are fed to
    ``handle_server_message``.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        super().__init__()
        voice_config = get_voice_config()
        self.api_key = api_key or voice_config["api_key"]
        self.base_url = (base_url or voice_config["base_url"]).rstrip("/")
        self.timeout = timeout or voice_config["timeout"]
        self._client = http_client
        self._owns_client = http_client is None

        self.call_id: Optional[str] = None
        self.control_url: Optional[str] = None
        self.web_call_url: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @staticmethod
    def build_call_body(descriptor: SessionDescriptor, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Build the Vapi create-call body.

        Args:
            descriptor: Workflow or assistant to run
            variables: Values for the template variables of the workflow/assistant

        Returns:
            JSON body for POST /call/web
        """
        body: Dict[str, Any] = {}
        overrides = {"variableValues": variables}

        if descriptor.workflow_id:
            body["workflowId"] = descriptor.workflow_id
            body["workflowOverrides"] = overrides
        elif descriptor.assistant_id:
            body["assistantId"] = descriptor.assistant_id
            body["assistantOverrides"] = overrides
        elif descriptor.assistant:
            body["assistant"] = descriptor.assistant
            body["assistantOverrides"] = overrides
        else:
            raise ValueError("Session descriptor needs a workflow, an assistant id or an assistant")

        if descriptor.metadata:
            body["metadata"] = descriptor.metadata
        return body

    async def start(self, descriptor: SessionDescriptor, variables: Dict[str, Any]) -> None:
        body = self.build_call_body(descriptor, variables)
        response = await self._get_client().post(
            f"{self.base_url}/call/web",
            json=body,
            headers=self._headers()
        )
        response.raise_for_status()
        data = response.json()

        self.call_id = data.get("id")
        self.control_url = (data.get("monitor") or {}).get("controlUrl")
        self.web_call_url = data.get("webCallUrl")
        logger.info(f"Created Vapi web call {self.call_id}")

    async def stop(self) -> None:
        try:
            if not self.control_url:
                logger.info("No live Vapi call to stop")
                return
            response = await self._get_client().post(
                self.control_url,
                json={"type": "end-call"},
                headers=self._headers()
            )
            response.raise_for_status()
            logger.info(f"Requested end of Vapi call {self.call_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Error ending Vapi call {self.call_id}: {e}")
        finally:
            self.control_url = None
            await self.close()

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def handle_server_message(self, message: Dict[str, Any]) -> None:
        """
        Translate a Vapi server message into a voice event.

        Args:
            message: The ``message`` object of a Vapi webhook request
        """
        message_type = message.get("type")

        if message_type == "status-update":
            status = message.get("status")
            if status == "in-progress":
                await self.emit(CALL_START)
            elif status == "ended":
                await self.emit(CALL_END, {"reason": message.get("endedReason")})
        elif message_type == "transcript":
            await self.emit(MESSAGE, {
                "type": "transcript",
                "transcriptType": message.get("transcriptType"),
                "role": message.get("role"),
                "transcript": message.get("transcript", ""),
            })
        elif message_type == "speech-update":
            if message.get("status") == "started":
                await self.emit(SPEECH_START, {"role": message.get("role")})
            elif message.get("status") == "stopped":
                await self.emit(SPEECH_END, {"role": message.get("role")})
        elif message_type == "end-of-call-report":
            await self.emit(CALL_END, {"reason": message.get("endedReason")})
        elif message_type == "hang":
            await self.emit(ERROR, {"message": "Assistant did not respond in time"})
        else:
            logger.debug(f"Ignoring Vapi server message of type {message_type}")
