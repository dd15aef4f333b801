"""Exception hierarchy for the flashcards API.

Each error carries the machine-readable ``code`` and HTTP status it is
rendered with by ``flashcards.api.exceptions.api_exception_handler``.
"""

from .domain.enums import ErrorCode
from .utils.time import to_iso


class FlashcardsError(Exception):
    """Base exception for all flashcards errors."""

    code = ErrorCode.INTERNAL_SERVER_ERROR
    status_code = 500

    def __init__(self, message: str, *, headers: dict | None = None, extra: dict | None = None) -> None:
        self.message = message
        self.headers = headers or {}
        self.extra = extra or {}
        super().__init__(self.message)


class ValidationFailed(FlashcardsError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        self.fields = fields or []
        super().__init__(message, extra={"fields": self.fields} if self.fields else None)


class NotFoundError(FlashcardsError):
    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, resource_id=None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        if resource_id is not None:
            super().__init__(f"{resource} with id {resource_id} not found")
        else:
            super().__init__(f"{resource} not found")


class ConflictError(FlashcardsError):
    code = ErrorCode.CONFLICT
    status_code = 409


class QuotaExceededError(FlashcardsError):
    code = ErrorCode.QUOTA_EXCEEDED
    status_code = 429

    def __init__(self, quota) -> None:
        self.quota = quota
        super().__init__(
            f"You have reached the limit of {quota.limit} generations per 24 hours",
            headers={
                "X-RateLimit-Limit": str(quota.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(quota.reset_timestamp),
                "Retry-After": str(quota.retry_after_seconds),
            },
            extra={"resetAt": to_iso(quota.reset_at)},
        )


class AIServiceError(FlashcardsError):
    """The AI provider failed or returned something unusable."""

    code = ErrorCode.AI_SERVICE_ERROR


class DatabaseError(FlashcardsError):
    code = ErrorCode.DATABASE_ERROR


class ConfigurationError(FlashcardsError):
    code = ErrorCode.CONFIGURATION_ERROR
