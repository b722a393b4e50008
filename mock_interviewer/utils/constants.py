"""
Constants used throughout the Mock Interviewer application.
"""

# Interview config defaults used whenever extraction or input is incomplete
DEFAULT_ROLE = "Unknown role"
DEFAULT_LEVEL = "unknown"
DEFAULT_QUESTION_COUNT = 5

# Completion settings
EXTRACTION_TEMPERATURE = 0.0  # Deterministic extraction
EXTRACTION_MAX_TOKENS = 200
QUESTION_TEMPERATURE = 0.7  # Creative generation
QUESTION_MAX_TOKENS = 500

FALLBACK_QUESTION = "Tell me about yourself."

# Feedback categories (fixed, no others permitted)
FEEDBACK_CATEGORIES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
)

# Query defaults
LATEST_INTERVIEWS_LIMIT = 20

# Navigation targets returned after a call ends
HOME_VIEW = "/"
FEEDBACK_VIEW = "/interview/{interview_id}/feedback"

# Persona template placeholder filled with the question list
QUESTIONS_PLACEHOLDER = "{{questions}}"

INTERVIEW_COVERS = [
    "/adobe.png",
    "/amazon.png",
    "/facebook.png",
    "/hostinger.png",
    "/pinterest.png",
    "/quora.png",
    "/reddit.png",
    "/skype.png",
    "/spotify.png",
    "/telegram.png",
    "/tiktok.png",
    "/yahoo.png",
]
COVERS_PATH = "/covers"

# GET /api/vapi/generate payload
GENERATE_PING_DATA = "THANK YOU!"

# Error messages
ERROR_MISSING_GENERATE_FIELDS = "Transcript and userid required"
ERROR_MISSING_CONFIG_FIELDS = "role, level, type and userid required"
ERROR_INTERNAL = "Internal Server Error"

# Logging constants
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
