"""
Unit tests for InterviewRepository.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, Mock

from bson import ObjectId
from pymongo.errors import PyMongoError

from mock_interviewer.errors import PersistenceError
from mock_interviewer.models.interview import FeedbackReport, Interview
from mock_interviewer.services.interview_repository import InterviewRepository


def interview_document(user_id, role="Backend Engineer", created_at="2024-06-01T10:00:00Z", call_completed=False):
    return {
        "_id": ObjectId(),
        "role": role,
        "level": "Senior",
        "techstack": ["Go"],
        "type": "technical",
        "amount": 3,
        "questions": ["Q1", "Q2", "Q3"],
        "transcript": [],
        "finalized": True,
        "callCompleted": call_completed,
        "userId": user_id,
        "coverImage": "/covers/adobe.png",
        "createdAt": created_at,
    }


def make_cursor(documents):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor


@pytest.fixture
def interviews():
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def feedback():
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.replace_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def repository(interviews, feedback):
    database = MagicMock()
    collections = {"interviews": interviews, "feedback": feedback}
    database.__getitem__.side_effect = lambda name: collections[name]
    return InterviewRepository(database, interviews_collection="interviews", feedback_collection="feedback")


@pytest.fixture
def report():
    return FeedbackReport(
        interviewId="interview-1",
        userId="user-1",
        totalScore=70,
        categoryScores={
            "Communication Skills": 70,
            "Technical Knowledge": 70,
            "Problem-Solving": 70,
            "Cultural & Role Fit": 70,
            "Confidence & Clarity": 70,
        },
        finalAssessment="Good.",
    )


class TestInterviews:
    """Test interview reads and writes."""

    @pytest.mark.asyncio
    async def test_add_interview(self, repository, interviews):
        inserted_id = ObjectId()
        interviews.insert_one.return_value = Mock(inserted_id=inserted_id)
        interview = Interview(role="Backend Engineer", level="Senior", userId="user-1")

        result = await repository.add_interview(interview)

        assert result == str(inserted_id)
        document = interviews.insert_one.await_args.args[0]
        assert document["userId"] == "user-1"
        assert document["callCompleted"] is False
        assert "id" not in document

    @pytest.mark.asyncio
    async def test_add_interview_failure_raises(self, repository, interviews):
        interviews.insert_one.side_effect = PyMongoError("connection reset")

        with pytest.raises(PersistenceError):
            await repository.add_interview(Interview(role="QA", level="Junior", userId="user-1"))

    @pytest.mark.asyncio
    async def test_get_interview_by_id(self, repository, interviews):
        document = interview_document("user-1")
        interviews.find_one.return_value = document

        interview = await repository.get_interview_by_id(str(document["_id"]))

        assert interview.id == str(document["_id"])
        assert interview.role == "Backend Engineer"
        interviews.find_one.assert_awaited_once_with({"_id": document["_id"]})

    @pytest.mark.asyncio
    async def test_get_interview_with_invalid_id(self, repository, interviews):
        assert await repository.get_interview_by_id("not-an-object-id") is None
        interviews.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_latest_interviews_query(self, repository, interviews):
        cursor = make_cursor([interview_document("user-2")])
        interviews.find.return_value = cursor

        result = await repository.get_latest_interviews("user-1", limit=20)

        interviews.find.assert_called_once_with({"finalized": True, "userId": {"$ne": "user-1"}})
        cursor.sort.assert_called_once_with("createdAt", -1)
        cursor.limit.assert_called_once_with(20)
        assert [interview.user_id for interview in result] == ["user-2"]

    @pytest.mark.asyncio
    async def test_get_interviews_by_user_id_query(self, repository, interviews):
        cursor = make_cursor([])
        interviews.find.return_value = cursor

        assert await repository.get_interviews_by_user_id("user-1") == []
        interviews.find.assert_called_once_with({"userId": "user-1"})
        cursor.sort.assert_called_once_with("createdAt", -1)

    @pytest.mark.asyncio
    async def test_dashboard_splits_by_call_completed(self, repository, interviews):
        own = [
            interview_document("user-1", role="Done", call_completed=True),
            interview_document("user-1", role="Pending", call_completed=False),
        ]
        others = [interview_document("user-2", role="Other")]
        interviews.find.side_effect = [make_cursor(own), make_cursor(others)]

        dashboard = await repository.get_dashboard("user-1")

        assert [interview.role for interview in dashboard.your_interviews] == ["Done"]
        assert [interview.role for interview in dashboard.take_interviews] == ["Pending"]
        assert [interview.role for interview in dashboard.latest_interviews] == ["Other"]


class TestFeedback:
    """Test feedback reads and writes."""

    @pytest.mark.asyncio
    async def test_add_feedback_inserts(self, repository, feedback, report):
        inserted_id = ObjectId()
        feedback.insert_one.return_value = Mock(inserted_id=inserted_id)

        assert await repository.add_feedback(report) == str(inserted_id)
        document = feedback.insert_one.await_args.args[0]
        assert document["interviewId"] == "interview-1"
        assert document["categoryScores"]["Problem-Solving"] == 70
        feedback.replace_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_feedback_with_id_overwrites(self, repository, feedback, report):
        feedback_id = str(ObjectId())

        assert await repository.add_feedback(report, feedback_id=feedback_id) == feedback_id
        filter_document, _document = feedback.replace_one.await_args.args
        assert filter_document == {"_id": ObjectId(feedback_id)}
        assert feedback.replace_one.await_args.kwargs["upsert"] is True
        feedback.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_feedback_failure_raises(self, repository, feedback, report):
        feedback.insert_one.side_effect = PyMongoError("not primary")

        with pytest.raises(PersistenceError):
            await repository.add_feedback(report)

    @pytest.mark.asyncio
    async def test_get_feedback_by_interview_id(self, repository, feedback, report):
        document = report.to_document()
        document["_id"] = ObjectId()
        feedback.find_one.return_value = document

        result = await repository.get_feedback_by_interview_id("interview-1", "user-1")

        assert result.id == str(document["_id"])
        assert result.total_score == 70
        feedback.find_one.assert_awaited_once_with({"interviewId": "interview-1", "userId": "user-1"})

    @pytest.mark.asyncio
    async def test_setup_indexes_failure_only_warns(self, repository, interviews):
        interviews.create_index.side_effect = PyMongoError("unauthorized")

        await repository.setup_indexes()
