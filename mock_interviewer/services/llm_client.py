"""
Completion client for Mock Interviewer.

This module wraps the LangChain chat model used by the pipelines. It offers
two request/response modes: free-form text completion, and schema-validated
structured generation.
"""
import logging
from typing import Any, Callable, Optional, Type, TypeVar

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

from mock_interviewer.errors import UpstreamQuotaError
from mock_interviewer.utils.config import get_llm_config

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_QUOTA_MARKERS = ("resource_exhausted", "resource exhausted", "quota", "rate limit")


def is_quota_error(error: Exception) -> bool:
    """Whether an upstream error means the provider is rate limiting us."""
    status = getattr(error, "status_code", None) or getattr(error, "code", None)
    if status == 429:
        return True
    if type(error).__name__ in ("ResourceExhausted", "RateLimitError"):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _QUOTA_MARKERS)


def message_text(content: Any) -> str:
    """Flatten a chat message's content (string or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


def default_chat_model(model: str, temperature: float, max_tokens: Optional[int]) -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        model=model,
        temperature=temperature,
        max_output_tokens=max_tokens
    )


class CompletionClient:
    """Thin async facade over a LangChain chat model."""

    def __init__(
        self,
        model: Optional[str] = None,
        feedback_model: Optional[str] = None,
        chat_model_factory: Callable[[str, float, Optional[int]], BaseChatModel] = default_chat_model
    ):
        """
        Initialize the completion client.

        Args:
            model: Model used for extraction and question generation
            feedback_model: Model used for structured feedback scoring
            chat_model_factory: Builds a chat model from (model, temperature, max_tokens)
        """
        llm_config = get_llm_config()
        self.model = model or llm_config["model"]
        self.feedback_model = feedback_model or llm_config["feedback_model"]
        self.chat_model_factory = chat_model_factory

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Free-form text completion.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The request content
            temperature: Sampling temperature
            max_tokens: Output token cap

        Returns:
            Response text (possibly empty)

        Raises:
            UpstreamQuotaError: If the provider is rate limiting
        """
        llm = self.chat_model_factory(self.model, temperature, max_tokens)
        try:
            response = await llm.ainvoke([
                SystemMessage(content=system_prompt),
                HumanMessage(content=user_prompt)
            ])
        except Exception as e:
            if is_quota_error(e):
                raise UpstreamQuotaError(str(e)) from e
            raise
        return message_text(response.content)

    async def generate_structured(
        self,
        prompt: str,
        system_prompt: str,
        schema: Type[SchemaT],
        temperature: float = 0.1
    ) -> SchemaT:
        """
        Schema-validated structured generation.

        Args:
            prompt: The request content
            system_prompt: Instructions for the model
            schema: Pydantic model the output must satisfy
            temperature: Sampling temperature

        Returns:
            A validated instance of ``schema``

        Raises:
            UpstreamQuotaError: If the provider is rate limiting
            pydantic.ValidationError: If the output does not match the schema
        """
        llm = self.chat_model_factory(self.feedback_model, temperature, None)
        structured_llm = llm.with_structured_output(schema)
        try:
            result = await structured_llm.ainvoke([
                SystemMessage(content=system_prompt),
                HumanMessage(content=prompt)
            ])
        except Exception as e:
            if is_quota_error(e):
                raise UpstreamQuotaError(str(e)) from e
            raise

        if isinstance(result, schema):
            return result
        return schema.model_validate(result)
