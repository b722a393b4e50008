"""
Interview generation pipeline for Mock Interviewer.

This service turns a setup-call transcript (or a config supplied directly by
the user) into a persisted interview with AI-authored questions:

    A. extract the interview config from the transcript
    B. generate the questions
    C. store the interview

Parse failures in steps A and B are absorbed with defaults. Quota and store
failures propagate to the caller.
"""

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from mock_interviewer.ai.prompts.interview_prompts import (
    CONFIG_EXTRACTION_SYSTEM_PROMPT,
    QUESTION_GENERATION_PROMPT,
    QUESTION_GENERATION_SYSTEM_PROMPT,
)
from mock_interviewer.errors import UpstreamParseError, ValidationError
from mock_interviewer.models.interview import Interview, InterviewConfig, InterviewKind, TranscriptEntry
from mock_interviewer.services.interview_repository import InterviewRepository
from mock_interviewer.services.llm_client import CompletionClient
from mock_interviewer.utils.constants import (
    COVERS_PATH,
    DEFAULT_LEVEL,
    DEFAULT_QUESTION_COUNT,
    DEFAULT_ROLE,
    ERROR_MISSING_GENERATE_FIELDS,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_TEMPERATURE,
    FALLBACK_QUESTION,
    INTERVIEW_COVERS,
    QUESTION_MAX_TOKENS,
    QUESTION_TEMPERATURE,
)
from mock_interviewer.utils.profiling import timed_function, timer
from mock_interviewer.utils.transcript import find_json_object, format_conversation, strip_code_fences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigExtraction:
    """Result of config extraction: either parsed from the model, or all defaults."""
    config: InterviewConfig
    defaulted: bool = False
    reason: Optional[str] = None

    @classmethod
    def parsed(cls, config: InterviewConfig) -> "ConfigExtraction":
        return cls(config=config)

    @classmethod
    def default(cls, reason: str) -> "ConfigExtraction":
        return cls(config=InterviewConfig(), defaulted=True, reason=reason)


def get_random_interview_cover() -> str:
    return f"{COVERS_PATH}{random.choice(INTERVIEW_COVERS)}"


def parse_interview_kind(value: Any) -> InterviewKind:
    """Normalize an interview type; anything unrecognized is MIXED."""
    if isinstance(value, InterviewKind):
        return value
    try:
        return InterviewKind(str(value).strip().lower())
    except ValueError:
        return InterviewKind.MIXED


def coerce_tech_stack(value: Any) -> List[str]:
    """
    Normalize a tech stack to a list of names.

    Lists are kept (blank items dropped), strings are split on commas and any
    other truthy scalar becomes a one-item list.
    """
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if value:
        return [str(value)]
    return []


def coerce_question_count(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_QUESTION_COUNT
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_QUESTION_COUNT
    return count if count >= 1 else DEFAULT_QUESTION_COUNT


def build_config(data: Dict[str, Any]) -> InterviewConfig:
    """Build a config from loosely-typed fields, defaulting each missing or invalid one."""
    role = data.get("role")
    level = data.get("level")
    return InterviewConfig(
        role=str(role).strip() if role else DEFAULT_ROLE,
        level=str(level).strip() if level else DEFAULT_LEVEL,
        techstack=coerce_tech_stack(data.get("techstack")),
        amount=coerce_question_count(data.get("amount")),
        type=parse_interview_kind(data.get("type")),
    )


def parse_config_response(text: str) -> ConfigExtraction:
    """
    Parse the extraction model's response into an interview config.

    Args:
        text: Raw model output, possibly fenced or wrapped in prose

    Returns:
        ConfigExtraction, defaulted if no JSON object could be parsed
    """
    span = find_json_object(strip_code_fences(text))
    if span is None:
        return ConfigExtraction.default("no JSON object in response")
    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        return ConfigExtraction.default(f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return ConfigExtraction.default("response is not a JSON object")
    return ConfigExtraction.parsed(build_config(data))


def _decode_questions(text: str) -> List[str]:
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise UpstreamParseError(f"Questions are not valid JSON: {e}") from e
    if not isinstance(data, list) or not data:
        raise UpstreamParseError("Questions response is not a non-empty list")
    if not all(isinstance(question, str) for question in data):
        raise UpstreamParseError("Questions response contains non-string items")
    return data


def parse_questions_response(text: str) -> List[str]:
    """Parse a JSON array of questions, falling back to a single stock question."""
    try:
        return _decode_questions(text)
    except UpstreamParseError as e:
        logger.warning(f"Could not parse generated questions, using fallback: {e}")
        return [FALLBACK_QUESTION]


def config_from_request(
    role: Optional[str],
    level: Optional[str],
    interview_type: Optional[str],
    techstack: Union[str, Sequence[str], None] = None,
    amount: Union[int, str, None] = None
) -> InterviewConfig:
    """Build a config from the directly supplied generate request fields."""
    return build_config({
        "role": role,
        "level": level,
        "type": interview_type,
        "techstack": techstack,
        "amount": amount,
    })


class InterviewGenerationPipeline:
    """Service that generates and stores interviews."""

    def __init__(self, completion_client: CompletionClient, repository: InterviewRepository):
        """
        Initialize the pipeline.

        Args:
            completion_client: Client used for extraction and question generation
            repository: Store the generated interviews are written to
        """
        self.completion_client = completion_client
        self.repository = repository

    async def extract_config(self, transcript: Sequence[TranscriptEntry]) -> ConfigExtraction:
        """Step A: ask the model for the interview settings discussed in the call."""
        conversation = format_conversation(transcript)
        with timer("config_extraction", logging.INFO):
            text = await self.completion_client.complete(
                system_prompt=CONFIG_EXTRACTION_SYSTEM_PROMPT,
                user_prompt=conversation,
                temperature=EXTRACTION_TEMPERATURE,
                max_tokens=EXTRACTION_MAX_TOKENS
            )

        extraction = parse_config_response(text)
        if extraction.defaulted:
            logger.warning(f"Config extraction fell back to defaults ({extraction.reason}); raw response: {text!r}")
        else:
            logger.info(f"Extracted interview config: {extraction.config.model_dump(by_alias=True, mode='json')}")
        return extraction

    async def generate_questions(self, config: InterviewConfig) -> List[str]:
        """Step B: generate ``config.question_count`` questions."""
        prompt = QUESTION_GENERATION_PROMPT.format(
            amount=config.question_count,
            role=config.role,
            level=config.level,
            interview_type=config.interview_kind.value,
            techstack=", ".join(config.tech_stack)
        )
        with timer("question_generation", logging.INFO):
            text = await self.completion_client.complete(
                system_prompt=QUESTION_GENERATION_SYSTEM_PROMPT,
                user_prompt=prompt,
                temperature=QUESTION_TEMPERATURE,
                max_tokens=QUESTION_MAX_TOKENS
            )

        questions = parse_questions_response(text)
        logger.info(f"Generated {len(questions)} questions for {config.role}")
        return questions

    async def _persist(
        self,
        user_id: str,
        config: InterviewConfig,
        questions: List[str],
        transcript: Sequence[TranscriptEntry],
        call_completed: bool
    ) -> Dict[str, Any]:
        interview = Interview.from_config(
            config,
            user_id,
            questions,
            transcript=list(transcript),
            finalized=True,
            callCompleted=call_completed,
            coverImage=get_random_interview_cover()
        )
        interview_id = await self.repository.add_interview(interview)
        return {"success": True, "id": interview_id}

    @timed_function()
    async def generate_from_transcript(self, user_id: str, transcript: Sequence[TranscriptEntry]) -> Dict[str, Any]:
        """
        Generate an interview from a setup-call transcript.

        Args:
            user_id: Owner of the new interview
            transcript: Finalized entries of the setup call

        Returns:
            ``{"success": True, "id": <interview id>}``

        Raises:
            ValidationError: If the user id or transcript is missing
            UpstreamQuotaError: If the completion provider is rate limiting
            PersistenceError: If the interview could not be stored
        """
        if not user_id or not transcript:
            raise ValidationError(ERROR_MISSING_GENERATE_FIELDS)

        logger.info(f"Generating interview for user {user_id} from {len(transcript)} transcript entries")
        extraction = await self.extract_config(transcript)
        questions = await self.generate_questions(extraction.config)
        return await self._persist(user_id, extraction.config, questions, transcript, call_completed=True)

    @timed_function()
    async def generate_from_config(self, user_id: str, config: InterviewConfig) -> Dict[str, Any]:
        """Generate an interview from a config supplied directly by the user."""
        if not user_id:
            raise ValidationError("userid required")

        logger.info(f"Generating {config.question_count} {config.interview_kind.value} questions for user {user_id}")
        questions = await self.generate_questions(config)
        return await self._persist(user_id, config, questions, [], call_completed=False)
