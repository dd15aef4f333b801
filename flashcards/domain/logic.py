from dataclasses import dataclass
from datetime import datetime

from .enums import ReviewResult
from ..config import BOX_INTERVALS, MAX_BOX, MIN_BOX, QUOTA_LIMIT, QUOTA_WINDOW


def next_review(prev_box: int, result: str, now: datetime) -> tuple[int, datetime]:
    if not MIN_BOX <= prev_box <= MAX_BOX:
        raise ValueError(f"leitner box must be within {MIN_BOX}..{MAX_BOX}, got {prev_box}")

    if result == ReviewResult.DONT_KNOW:
        # Back to the first box, due again right away
        return MIN_BOX, now

    if result != ReviewResult.KNOW:
        raise ValueError(f"unknown review result: {result!r}")

    new_box = min(prev_box + 1, MAX_BOX)
    return new_box, now + BOX_INTERVALS[new_box]


@dataclass(frozen=True)
class QuotaCheck:
    allowed: bool
    limit: int
    used: int
    remaining: int
    reset_at: datetime
    retry_after_seconds: int

    @property
    def reset_timestamp(self) -> int:
        return int(self.reset_at.timestamp())


def evaluate_quota(attempt_times: list[datetime], now: datetime, limit: int = QUOTA_LIMIT) -> QuotaCheck:
    """
    Evaluate the rolling quota from the successful attempts inside the window.

    ``attempt_times`` must be sorted ascending; the oldest attempt decides when
    a slot frees up again. Without attempts the reset time is informative only.
    """
    used = len(attempt_times)
    if attempt_times:
        reset_at = attempt_times[0] + QUOTA_WINDOW
    else:
        reset_at = now + QUOTA_WINDOW
    retry_after = max(0, int((reset_at - now).total_seconds()))

    allowed = used < limit
    return QuotaCheck(
        allowed=allowed,
        limit=limit,
        used=used,
        remaining=max(0, limit - used) if allowed else 0,
        reset_at=reset_at,
        retry_after_seconds=retry_after,
    )


def advisory_lock_key(user_id) -> int:
    """32-bit string hash of the user id, stored with each attempt for tracking."""
    h = 0
    for ch in str(user_id):
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)
