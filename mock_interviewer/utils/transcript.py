"""
Transcript utilities for Mock Interviewer.

This module provides functionality for formatting interview transcripts for
prompts and for pulling JSON out of free-form model responses.
"""
import re
import logging
from typing import Iterable, Optional

from mock_interviewer.models.interview import TranscriptEntry

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```json|```")


def format_conversation(transcript: Iterable[TranscriptEntry]) -> str:
    """
    Flatten a transcript to one ``speaker: text`` line per entry.

    Args:
        transcript: Ordered transcript entries

    Returns:
        Newline-joined conversation text
    """
    return "\n".join(f"{entry.speaker.value}: {entry.text}" for entry in transcript)


def format_for_feedback(transcript: Iterable[TranscriptEntry]) -> str:
    """Flatten a transcript to ``- speaker: text`` bullet lines."""
    return "".join(f"- {entry.speaker.value}: {entry.text}\n" for entry in transcript)


def format_question_list(questions: Iterable[str]) -> str:
    return "\n".join(f"- {question}" for question in questions)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json and ```) and surrounding whitespace."""
    return _CODE_FENCE_RE.sub("", text or "").strip()


def find_json_object(text: str) -> Optional[str]:
    """
    Locate the first balanced ``{...}`` span in text.

    Braces inside JSON string literals are ignored.

    Args:
        text: Free-form text that may contain a JSON object

    Returns:
        The object's source text, or None if no balanced object exists
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None

