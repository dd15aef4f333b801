from django.db import models


class ReviewResult(models.TextChoices):
    KNOW = "know"
    DONT_KNOW = "dont_know"


class CardOrigin(models.TextChoices):
    MANUAL = "manual"
    AI = "ai"


class GenerationStatus(models.TextChoices):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class IssueStatus(models.TextChoices):
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ErrorCode(models.TextChoices):
    VALIDATION_ERROR = "validation_error"
    INVALID_JSON = "invalid_json"
    QUOTA_EXCEEDED = "quota_exceeded"
    AI_SERVICE_ERROR = "ai_service_error"
    DATABASE_ERROR = "database_error"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
