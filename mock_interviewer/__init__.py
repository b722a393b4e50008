"""
{SYSTEM_NAME} Package.

This package provides voice-driven mock interviews: AI-generated interview
questions, live call sessions and AI feedback scoring.
"""

from mock_interviewer.utils.config import SYSTEM_NAME

__version__ = "0.1.0"
