"""
AI components for the {SYSTEM_NAME} platform.

This package contains the prompt templates and the interviewer persona.
"""

from mock_interviewer.ai.prompts.interview_prompts import (
    CONFIG_EXTRACTION_SYSTEM_PROMPT,
    QUESTION_GENERATION_SYSTEM_PROMPT,
    QUESTION_GENERATION_PROMPT,
    FEEDBACK_SYSTEM_PROMPT,
    FEEDBACK_PROMPT,
    INTERVIEWER_PERSONA,
    build_interviewer_persona
)

__all__ = [
    'CONFIG_EXTRACTION_SYSTEM_PROMPT',
    'QUESTION_GENERATION_SYSTEM_PROMPT',
    'QUESTION_GENERATION_PROMPT',
    'FEEDBACK_SYSTEM_PROMPT',
    'FEEDBACK_PROMPT',
    'INTERVIEWER_PERSONA',
    'build_interviewer_persona'
]
