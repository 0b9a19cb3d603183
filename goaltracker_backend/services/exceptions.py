"""
Exceptions raised by the service layer.

Every failure that should reach the client carries a stable error code. The
HTTP status lives on the class; the human readable message is resolved from
api.locales at response time unless one is passed explicitly.
"""

from typing import Any, Dict, Optional


class GoalTrackerError(Exception):
    status_code = 500
    default_code = "internal_error"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        details: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message or self.code)


class BadRequestError(GoalTrackerError):
    status_code = 400
    default_code = "invalid_payload"


class AuthenticationError(GoalTrackerError):
    status_code = 401
    default_code = "not_authenticated"


class NotFoundError(GoalTrackerError):
    status_code = 404
    default_code = "goal_not_found"


class ConflictError(GoalTrackerError):
    status_code = 409


class ValidationFailedError(GoalTrackerError):
    status_code = 422
    default_code = "validation_error"


class PreconditionFailedError(GoalTrackerError):
    status_code = 412
    default_code = "not_enough_data"


class RateLimitedError(GoalTrackerError):
    status_code = 429
    default_code = "rate_limited"


class AIProviderError(GoalTrackerError):
    """The AI provider failed, timed out or answered with something unusable."""
    status_code = 502
    default_code = "ai_provider_error"


class AIProviderTimeoutError(AIProviderError):
    default_code = "ai_provider_timeout"


class MissingAPIKeyError(GoalTrackerError):
    """OPENROUTER_API_KEY is not configured; a server misconfiguration, not a provider fault."""
    default_code = "missing_api_key"
