"""
Interview repository for Mock Interviewer.

This service stores interviews and feedback reports in MongoDB and runs the
queries behind the home page. Writes are single-document and unacknowledged
failures are surfaced as PersistenceError; there are no transactions.
"""

import logging
from typing import Any, Dict, List, Optional

import pymongo
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from mock_interviewer.errors import PersistenceError
from mock_interviewer.models.interview import DashboardView, FeedbackReport, Interview
from mock_interviewer.utils.config import get_db_config
from mock_interviewer.utils.constants import LATEST_INTERVIEWS_LIMIT

logger = logging.getLogger(__name__)


def _object_id(document_id: str) -> Optional[ObjectId]:
    if document_id and ObjectId.is_valid(document_id):
        return ObjectId(document_id)
    return None


def _with_id(document: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(document)
    data["id"] = str(data.pop("_id"))
    return data


class InterviewRepository:
    """Service for reading and writing interview and feedback documents."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        interviews_collection: Optional[str] = None,
        feedback_collection: Optional[str] = None
    ):
        """Initialize the repository on a motor database."""
        db_config = get_db_config()
        self.db = database
        self.interviews: AsyncIOMotorCollection = database[
            interviews_collection or db_config["interviews_collection"]
        ]
        self.feedback: AsyncIOMotorCollection = database[
            feedback_collection or db_config["feedback_collection"]
        ]

    async def setup_indexes(self):
        """Set up database indexes for the dashboard and feedback queries."""
        try:
            await self.interviews.create_index([("userId", pymongo.ASCENDING), ("createdAt", pymongo.DESCENDING)])
            await self.interviews.create_index([("finalized", pymongo.ASCENDING), ("createdAt", pymongo.DESCENDING)])
            await self.feedback.create_index([("interviewId", pymongo.ASCENDING), ("userId", pymongo.ASCENDING)])
            logger.info("Interview database indexes created successfully")
        except PyMongoError as e:
            logger.warning(f"Error creating interview indexes: {e}")

    # Interviews

    async def add_interview(self, interview: Interview) -> str:
        """
        Insert an interview document.

        Args:
            interview: Interview to store

        Returns:
            The new document id

        Raises:
            PersistenceError: If the write fails
        """
        try:
            result = await self.interviews.insert_one(interview.to_document())
        except PyMongoError as e:
            logger.error(f"Error saving interview for user {interview.user_id}: {e}")
            raise PersistenceError(f"Could not save interview: {e}") from e

        interview_id = str(result.inserted_id)
        logger.info(f"Saved interview {interview_id} for user {interview.user_id}")
        return interview_id

    async def get_interview_by_id(self, interview_id: str) -> Optional[Interview]:
        object_id = _object_id(interview_id)
        if object_id is None:
            return None
        document = await self.interviews.find_one({"_id": object_id})
        if not document:
            return None
        return Interview.model_validate(_with_id(document))

    async def get_interviews_by_user_id(self, user_id: str) -> List[Interview]:
        """All of a user's interviews, newest first."""
        cursor = self.interviews.find({"userId": user_id}).sort("createdAt", pymongo.DESCENDING)
        documents = await cursor.to_list(length=None)
        return [Interview.model_validate(_with_id(document)) for document in documents]

    async def get_latest_interviews(self, user_id: str, limit: int = LATEST_INTERVIEWS_LIMIT) -> List[Interview]:
        """
        Finalized interviews created by other users, newest first.

        Args:
            user_id: The viewing user; their own interviews are excluded
            limit: Maximum number of interviews to return

        Returns:
            At most ``limit`` interviews
        """
        cursor = (
            self.interviews
            .find({"finalized": True, "userId": {"$ne": user_id}})
            .sort("createdAt", pymongo.DESCENDING)
            .limit(limit)
        )
        documents = await cursor.to_list(length=limit)
        return [Interview.model_validate(_with_id(document)) for document in documents]

    async def get_dashboard(self, user_id: str, limit: int = LATEST_INTERVIEWS_LIMIT) -> DashboardView:
        """Split the user's interviews by ``callCompleted`` and add others' latest interviews."""
        user_interviews = await self.get_interviews_by_user_id(user_id)
        latest_interviews = await self.get_latest_interviews(user_id, limit=limit)
        return DashboardView(
            yourInterviews=[interview for interview in user_interviews if interview.call_completed],
            takeInterviews=[interview for interview in user_interviews if not interview.call_completed],
            latestInterviews=latest_interviews
        )

    # Feedback

    async def add_feedback(self, report: FeedbackReport, feedback_id: Optional[str] = None) -> str:
        """
        Store a feedback report.

        Args:
            report: Report to store
            feedback_id: Existing report to overwrite instead of inserting

        Returns:
            The report's document id

        Raises:
            PersistenceError: If the write fails
        """
        document = report.to_document()
        try:
            object_id = _object_id(feedback_id) if feedback_id else None
            if object_id is not None:
                await self.feedback.replace_one({"_id": object_id}, document, upsert=True)
                saved_id = feedback_id
            else:
                result = await self.feedback.insert_one(document)
                saved_id = str(result.inserted_id)
        except PyMongoError as e:
            logger.error(f"Error saving feedback for interview {report.interview_id}: {e}")
            raise PersistenceError(f"Could not save feedback: {e}") from e

        logger.info(f"Saved feedback {saved_id} for interview {report.interview_id}")
        return saved_id

    async def get_feedback_by_interview_id(self, interview_id: str, user_id: str) -> Optional[FeedbackReport]:
        document = await self.feedback.find_one({"interviewId": interview_id, "userId": user_id})
        if not document:
            return None
        return FeedbackReport.model_validate(_with_id(document))
