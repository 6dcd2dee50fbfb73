"""Error kinds raised by the progress, exam and certificate engines.

Each error carries the HTTP status it maps to and a JSON-safe ``details``
dict. Routers let these propagate; ``journey.main`` renders them.
"""

from typing import Any, Dict, Optional


class JourneyError(Exception):
    """Base class for every error the core surfaces to callers."""

    status_code = 500
    error = "server_error"
    retryable = False

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.error
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.details}


class ValidationError(JourneyError):
    status_code = 400
    error = "invalid_input"


class InvalidExamDefinition(ValidationError):
    """Rejected at write time; a stored definition is always scoreable."""

    error = "invalid_exam_definition"


class Unauthorized(JourneyError):
    status_code = 401
    error = "unauthorized"


class NotFound(JourneyError):
    status_code = 404
    error = "not_found"


class AttemptLimitExceeded(JourneyError):
    status_code = 403
    error = "attempt_limit_exceeded"

    def __init__(self, attempt_count: int, max_attempts: int):
        self.attempt_count = attempt_count
        self.max_attempts = max_attempts
        super().__init__(
            "Maximum exam attempts reached",
            attemptCount=attempt_count,
            maxAttempts=max_attempts,
        )


class ExamUnscoreable(JourneyError):
    """The exam definition has no question with a resolvable answer."""

    status_code = 500
    error = "exam_unscoreable"

    def __init__(self, course_id: str, lang: str = "en"):
        self.course_id = course_id
        super().__init__(
            "Exam definition has no scoreable questions",
            courseId=course_id,
            lang=lang,
        )


class NotEligible(JourneyError):
    status_code = 403
    error = "not_eligible"

    def __init__(self, eligibility: Dict[str, Any]):
        self.eligibility = eligibility
        super().__init__("Not eligible yet", eligibility=eligibility)


class StorageUnavailable(JourneyError):
    """Transient; callers may retry. Details are never exposed."""

    status_code = 503
    error = "storage_unavailable"
    retryable = True

    def __init__(self, message: str = "Temporarily unavailable, please try again"):
        super().__init__(message)
