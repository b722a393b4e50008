"""
FastAPI routers for the Mock Interviewer platform.

This module contains FastAPI routers for organizing API endpoints
into logical groups.
"""

from . import calls, generate, interviews

__all__ = ["calls", "generate", "interviews"]
