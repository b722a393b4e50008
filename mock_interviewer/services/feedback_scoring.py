"""
Feedback scoring pipeline for Mock Interviewer.

Grades a finished interview transcript with a structured model call and
stores one FeedbackReport. Failures are logged and reported as
``{"success": False}``; nothing is raised to the caller.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from mock_interviewer.ai.prompts.interview_prompts import FEEDBACK_PROMPT, FEEDBACK_SYSTEM_PROMPT
from mock_interviewer.models.interview import FeedbackAssessment, FeedbackReport, TranscriptEntry
from mock_interviewer.services.interview_repository import InterviewRepository
from mock_interviewer.services.llm_client import CompletionClient
from mock_interviewer.utils.profiling import timer
from mock_interviewer.utils.transcript import format_for_feedback

logger = logging.getLogger(__name__)


class FeedbackScoringPipeline:
    """Service that scores interviews and stores the feedback."""

    def __init__(self, completion_client: CompletionClient, repository: InterviewRepository):
        self.completion_client = completion_client
        self.repository = repository

    async def assess(self, transcript: Sequence[TranscriptEntry]) -> FeedbackAssessment:
        """Ask the grading model for a structured assessment of the transcript."""
        prompt = FEEDBACK_PROMPT.format(transcript=format_for_feedback(transcript))
        with timer("feedback_scoring", logging.INFO):
            return await self.completion_client.generate_structured(
                prompt=prompt,
                system_prompt=FEEDBACK_SYSTEM_PROMPT,
                schema=FeedbackAssessment
            )

    async def create_feedback(
        self,
        interview_id: str,
        user_id: str,
        transcript: Sequence[TranscriptEntry],
        feedback_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Score a transcript and store the report.

        Args:
            interview_id: Interview the transcript belongs to
            user_id: Candidate who took the interview
            transcript: Finalized entries of the interview call
            feedback_id: Existing report to overwrite, if any

        Returns:
            ``{"success": True, "feedbackId": ...}`` or ``{"success": False}``
        """
        try:
            assessment = await self.assess(transcript)
            report = FeedbackReport(
                interviewId=interview_id,
                userId=user_id,
                totalScore=assessment.total_score,
                categoryScores=assessment.category_scores.as_mapping(),
                strengths=assessment.strengths,
                areasForImprovement=assessment.areas_for_improvement,
                finalAssessment=assessment.final_assessment
            )
            saved_id = await self.repository.add_feedback(report, feedback_id=feedback_id)
        except Exception as e:
            logger.error(f"Error saving feedback for interview {interview_id}: {e}", exc_info=True)
            return {"success": False}

        logger.info(f"Feedback {saved_id} scored {report.total_score} for interview {interview_id}")
        return {"success": True, "feedbackId": saved_id}
