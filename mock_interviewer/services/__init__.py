"""
Service layer for the Mock Interviewer platform.

This module contains the services behind the API: the completion client, the
voice agent, the generation and scoring pipelines, the interview repository
and the call session registry.
"""
