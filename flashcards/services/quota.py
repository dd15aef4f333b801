from django.db import DatabaseError as DjangoDatabaseError
from django.utils import timezone
import structlog

from ..config import QUOTA_WINDOW
from ..data.repos import insert_attempt, successful_attempt_times
from ..domain.enums import GenerationStatus
from ..domain.logic import QuotaCheck, evaluate_quota

logger = structlog.get_logger()


def check_quota(user_id, now=None) -> QuotaCheck:
    """
    Check whether the user may run another AI generation.

    Does not record anything; attempts are recorded once the generation
    finished. Store errors propagate to the caller.
    """
    now = now or timezone.now()
    try:
        times = successful_attempt_times(user_id, since=now - QUOTA_WINDOW)
    except DjangoDatabaseError as e:
        logger.error("quota_check_failed", user_id=str(user_id), error=str(e))
        raise

    quota = evaluate_quota(times, now)
    logger.info("quota_checked",
        user_id=str(user_id),
        used=quota.used,
        remaining=quota.remaining,
        allowed=quota.allowed,
    )
    return quota


def record_successful_attempt(user_id, generation_id):
    try:
        return insert_attempt(user_id, GenerationStatus.SUCCEEDED, generation_id=generation_id)
    except DjangoDatabaseError as e:
        logger.error("record_successful_attempt_failed",
            user_id=str(user_id),
            generation_id=str(generation_id),
            error=str(e),
        )
        raise


def record_failed_attempt(user_id, error_code):
    # Bookkeeping only: never mask the error that caused the failure
    try:
        insert_attempt(user_id, GenerationStatus.FAILED, error_code=error_code)
    except DjangoDatabaseError as e:
        logger.error("record_failed_attempt_failed",
            user_id=str(user_id),
            error_code=error_code,
            error=str(e),
        )
