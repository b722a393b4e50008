"""
Unit tests for the interview generation endpoints.
"""
import pytest
from unittest.mock import AsyncMock, Mock, patch
from fastapi.testclient import TestClient

from mock_interviewer.errors import PersistenceError, UpstreamQuotaError
from mock_interviewer.routers.dependencies import limiter
from mock_interviewer.server import create_app
from mock_interviewer.services.interview_generation import InterviewGenerationPipeline

TRANSCRIPT = [
    {"role": "assistant", "content": "What role are you preparing for?"},
    {"role": "user", "content": "Senior backend engineer."},
]


@pytest.fixture
def pipeline():
    pipeline = Mock(spec=InterviewGenerationPipeline)
    pipeline.generate_from_transcript = AsyncMock(return_value={"success": True, "id": "interview-1"})
    pipeline.generate_from_config = AsyncMock(return_value={"success": True, "id": "interview-2"})
    return pipeline


@pytest.fixture
def app(pipeline):
    limiter.reset()
    app = create_app(use_lifespan=False)
    app.state.generation_pipeline = pipeline
    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


class TestGenerateEndpoint:
    """Test POST and GET /api/vapi/generate."""

    def test_generate_from_transcript(self, client, pipeline):
        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": TRANSCRIPT})

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": "interview-1"}
        user_id, transcript = pipeline.generate_from_transcript.await_args.args
        assert user_id == "user-1"
        assert transcript[1].text == "Senior backend engineer."

    def test_generate_from_config(self, client, pipeline):
        response = client.post("/api/vapi/generate", json={
            "type": "technical",
            "role": "Backend Engineer",
            "level": "Senior",
            "techstack": "Go,SQL",
            "amount": 3,
            "userid": "user-1",
        })

        assert response.status_code == 200
        assert response.json()["id"] == "interview-2"
        user_id, config = pipeline.generate_from_config.await_args.args
        assert user_id == "user-1"
        assert config.tech_stack == ["Go", "SQL"]
        assert config.question_count == 3
        pipeline.generate_from_transcript.assert_not_called()

    def test_missing_user_id_is_400(self, client, pipeline):
        response = client.post("/api/vapi/generate", json={"transcript": TRANSCRIPT})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Transcript and userid required"}
        pipeline.generate_from_transcript.assert_not_called()

    def test_incomplete_config_is_400(self, client):
        response = client.post("/api/vapi/generate", json={"role": "Backend Engineer", "userid": "user-1"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_malformed_transcript_is_400(self, client):
        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": "hello"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_quota_error_is_429(self, client, pipeline):
        pipeline.generate_from_transcript.side_effect = UpstreamQuotaError("quota exceeded")

        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": TRANSCRIPT})

        assert response.status_code == 429
        assert response.json() == {"success": False, "message": "quota exceeded"}

    def test_store_failure_is_500(self, client, pipeline):
        pipeline.generate_from_transcript.side_effect = PersistenceError("write failed")

        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": TRANSCRIPT})

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_unexpected_error_is_500(self, client, pipeline):
        pipeline.generate_from_transcript.side_effect = RuntimeError("boom")

        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": TRANSCRIPT})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "boom"}

    def test_config_path_unexpected_error_reports_message(self, client, pipeline):
        pipeline.generate_from_config.side_effect = KeyError("questions")

        response = client.post("/api/vapi/generate", json={
            "type": "technical",
            "role": "Backend Engineer",
            "level": "Senior",
            "userid": "user-1",
        })

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "'questions'"}

    def test_unexpected_error_without_text_falls_back(self, client, pipeline):
        pipeline.generate_from_transcript.side_effect = RuntimeError()

        response = client.post("/api/vapi/generate", json={"userid": "user-1", "transcript": TRANSCRIPT})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal Server Error"}

    def test_get_returns_liveness_payload(self, client):
        response = client.get("/api/vapi/generate")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": "THANK YOU!"}


class TestHealthEndpoint:
    """Test GET /api/health."""

    def test_health_without_database(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["database"] == "unavailable"

    def test_health_with_database(self, app, client):
        app.state.mongo_client = Mock()

        with patch("mock_interviewer.server.ping", AsyncMock(return_value=True)):
            response = client.get("/api/health")

        assert response.json()["status"] == "ok"
        assert response.json()["database"] == "connected"
