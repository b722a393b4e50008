"""
Exception hierarchy for the Mock Interviewer.

Each error carries the HTTP status the API layer reports for it.
"""


class MockInterviewerError(Exception):
    """Base class for application errors."""
    status_code = 500


class ValidationError(MockInterviewerError):
    """A required input field is missing or malformed."""
    status_code = 400


class UpstreamParseError(MockInterviewerError):
    """The model's response could not be parsed. Always recovered locally."""
    status_code = 502


class UpstreamQuotaError(MockInterviewerError):
    """The completion provider rejected the request for rate or quota reasons."""
    status_code = 429


class PersistenceError(MockInterviewerError):
    """A document store write failed."""
    status_code = 500


class SessionStartFailed(MockInterviewerError):
    """The voice agent could not establish a call session."""
    status_code = 502


class AlreadyActive(MockInterviewerError):
    """start() was called on a controller that has left the Idle state."""
    status_code = 409


class SessionNotFound(MockInterviewerError):
    status_code = 404
