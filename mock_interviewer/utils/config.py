"""
Configuration module for {SYSTEM_NAME}.

This module provides configuration settings and utilities for the {SYSTEM_NAME}.
"""
import os
import logging
from typing import Dict, Any, List
from dotenv import load_dotenv

from mock_interviewer.utils.constants import LOG_FORMAT, LOG_LEVEL

# Load environment variables from .env file if it exists
load_dotenv()


# Set up logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", LOG_LEVEL),
    format=LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# MongoDB configuration
MONGODB_URI = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE = os.environ.get("MONGODB_DATABASE", "mock_interviewer")
MONGODB_INTERVIEWS_COLLECTION = os.environ.get("MONGODB_INTERVIEWS_COLLECTION", "interviews")
MONGODB_FEEDBACK_COLLECTION = os.environ.get("MONGODB_FEEDBACK_COLLECTION", "feedback")

# LLM configuration
LLM_MODEL = os.environ.get("LLM_MODEL", "gemini-1.5-flash")
FEEDBACK_LLM_MODEL = os.environ.get("FEEDBACK_LLM_MODEL", LLM_MODEL)
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

# Voice agent (Vapi) configuration
VAPI_API_KEY = os.environ.get("VAPI_API_KEY", "")
VAPI_BASE_URL = os.environ.get("VAPI_BASE_URL", "https://api.vapi.ai")
VAPI_WORKFLOW_ID = os.environ.get("VAPI_WORKFLOW_ID", "")
VAPI_INTERVIEWER_ASSISTANT_ID = os.environ.get("VAPI_INTERVIEWER_ASSISTANT_ID", "")
VAPI_REQUEST_TIMEOUT = float(os.environ.get("VAPI_REQUEST_TIMEOUT", "30.0"))

# Server configuration
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.environ.get("SERVER_PORT", "8000"))
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:3000")

# Call session configuration
CALL_SESSION_TIMEOUT_MINUTES = int(os.environ.get("CALL_SESSION_TIMEOUT_MINUTES", "60"))
CALL_SESSION_SWEEP_MINUTES = int(os.environ.get("CALL_SESSION_SWEEP_MINUTES", "10"))

# --- System Configuration ---
SYSTEM_NAME = os.getenv("SYSTEM_NAME", "Mock Interviewer")

def get_db_config() -> Dict[str, str]:
    """
    Get MongoDB configuration.

    Returns:
        Dictionary with MongoDB configuration
    """
    return {
        "uri": MONGODB_URI,
        "database": MONGODB_DATABASE,
        "interviews_collection": MONGODB_INTERVIEWS_COLLECTION,
        "feedback_collection": MONGODB_FEEDBACK_COLLECTION,
    }

def get_llm_config() -> Dict[str, Any]:
    """
    Get LLM configuration.

    Returns:
        Dictionary with LLM configuration
    """
    return {
        "model": LLM_MODEL,
        "feedback_model": FEEDBACK_LLM_MODEL,
    }

def get_voice_config() -> Dict[str, Any]:
    """
    Get voice agent configuration.

    Returns:
        Dictionary with Vapi configuration
    """
    return {
        "api_key": VAPI_API_KEY,
        "base_url": VAPI_BASE_URL,
        "workflow_id": VAPI_WORKFLOW_ID,
        "interviewer_assistant_id": VAPI_INTERVIEWER_ASSISTANT_ID,
        "timeout": VAPI_REQUEST_TIMEOUT,
    }

def get_session_config() -> Dict[str, Any]:
    """
    Get call session configuration.

    Returns:
        Dictionary with session configuration
    """
    return {
        "timeout_minutes": CALL_SESSION_TIMEOUT_MINUTES,
        "sweep_minutes": CALL_SESSION_SWEEP_MINUTES,
    }

def get_server_config() -> Dict[str, Any]:
    """Get HTTP server configuration."""
    return {
        "host": SERVER_HOST,
        "port": SERVER_PORT,
        "cors_origins": get_cors_origins(),
    }

def get_cors_origins() -> List[str]:
    return [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

def log_config():
    """Log current configuration values (excluding sensitive information)."""
    logger.info("Current configuration:")
    logger.info(f"- MongoDB Database: {MONGODB_DATABASE}")
    logger.info(f"- Interviews Collection: {MONGODB_INTERVIEWS_COLLECTION}")
    logger.info(f"- Feedback Collection: {MONGODB_FEEDBACK_COLLECTION}")
    logger.info(f"- LLM Model: {LLM_MODEL}")
    logger.info(f"- Feedback LLM Model: {FEEDBACK_LLM_MODEL}")
    logger.info(f"- Google API Key: {'Configured' if GOOGLE_API_KEY else 'Not configured'}")
    logger.info(f"- Vapi Base URL: {VAPI_BASE_URL}")
    logger.info(f"- Vapi API Key: {'Configured' if VAPI_API_KEY else 'Not configured'}")
    logger.info(f"- Vapi Workflow: {'Configured' if VAPI_WORKFLOW_ID else 'Not configured'}")
    logger.info(f"- Vapi Interviewer Assistant: {'Configured' if VAPI_INTERVIEWER_ASSISTANT_ID else 'Not configured'}")
    logger.info(f"- Call Session Timeout: {CALL_SESSION_TIMEOUT_MINUTES} minutes")
    logger.info(f"- CORS Origins: {', '.join(get_cors_origins())}")
