"""
FastAPI server for the Mock Interviewer platform.

This module builds the HTTP API: interview generation, interviews and
feedback, voice call sessions and the Vapi webhook.
"""
import contextlib
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from mock_interviewer import __version__
from mock_interviewer.errors import MockInterviewerError
from mock_interviewer.routers import calls, generate, interviews
from mock_interviewer.routers.dependencies import limiter
from mock_interviewer.services.call_sessions import CallSessionRegistry
from mock_interviewer.services.feedback_scoring import FeedbackScoringPipeline
from mock_interviewer.services.interview_generation import InterviewGenerationPipeline
from mock_interviewer.services.interview_repository import InterviewRepository
from mock_interviewer.services.llm_client import CompletionClient
from mock_interviewer.services.voice_agent import VapiVoiceAgent
from mock_interviewer.utils.config import SYSTEM_NAME, get_cors_origins, get_session_config, log_config
from mock_interviewer.utils.constants import ERROR_INTERNAL
from mock_interviewer.utils.db import get_database, get_mongodb_client, ping

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """
    Lifespan context manager for FastAPI app.

    This handles startup and shutdown events for the application.
    """
    log_config()

    mongo_client = get_mongodb_client()
    repository = InterviewRepository(get_database(mongo_client))
    await repository.setup_indexes()

    completion_client = CompletionClient()
    generation_pipeline = InterviewGenerationPipeline(completion_client, repository)
    scoring_pipeline = FeedbackScoringPipeline(completion_client, repository)
    call_registry = CallSessionRegistry(VapiVoiceAgent, generation_pipeline, scoring_pipeline)

    app_instance.state.mongo_client = mongo_client
    app_instance.state.repository = repository
    app_instance.state.completion_client = completion_client
    app_instance.state.generation_pipeline = generation_pipeline
    app_instance.state.scoring_pipeline = scoring_pipeline
    app_instance.state.call_registry = call_registry

    # Close call sessions abandoned without an end-of-call notification
    session_config = get_session_config()
    scheduler = AsyncIOScheduler()
    scheduler.add_job(call_registry.sweep_stale, 'interval', minutes=session_config["sweep_minutes"])
    scheduler.start()
    app_instance.state.scheduler = scheduler
    logger.info(f"{SYSTEM_NAME} services initialized")

    yield

    # Cleanup on shutdown
    scheduler.shutdown()
    await call_registry.close_all()
    mongo_client.close()
    logger.info("Server shutdown complete")


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


async def app_error_handler(request: Request, exc: MockInterviewerError):
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc)))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content=_error_body(f"Invalid request: {exc.errors()}"))


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content=_error_body(ERROR_INTERNAL))


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        use_lifespan: Create the database, model and voice services on startup.
            Tests pass False and put their own services on ``app.state``.
    """
    app = FastAPI(
        title=f"{SYSTEM_NAME} API",
        description="Voice-driven mock interviews: question generation, call sessions and feedback scoring.",
        version=__version__,
        lifespan=lifespan if use_lifespan else None
    )

    # Add rate limiter exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(MockInterviewerError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(generate.router)
    app.include_router(interviews.router)
    app.include_router(calls.router)

    @app.get("/api/health")
    async def health_check(request: Request):
        """Service and database status."""
        mongo_client = getattr(request.app.state, "mongo_client", None)
        database_ok = await ping(mongo_client) if mongo_client is not None else False
        call_registry = getattr(request.app.state, "call_registry", None)
        return {
            "status": "ok" if database_ok else "degraded",
            "service": SYSTEM_NAME,
            "version": __version__,
            "database": "connected" if database_ok else "unavailable",
            "active_calls": len(call_registry) if call_registry is not None else 0,
        }

    return app


app = create_app()
