from django.db import transaction
from django.utils import timezone
import structlog

from ..data.models import StudySession
from ..data.repos import (
    due_cards,
    get_card_for_update,
    get_deck,
    get_session,
    persist_review,
)
from ..domain.logic import next_review
from ..errors import ConflictError, NotFoundError
from ..utils.time import to_iso

logger = structlog.get_logger()


def start_session(user_id, deck_id):
    deck = get_deck(user_id, deck_id)
    now = timezone.now()
    session = StudySession.objects.create(user_id=user_id, deck=deck, started_at=now)
    due_count = due_cards(deck.id, now).count()
    logger.info("study_session_started",
        user_id=str(user_id),
        deck_id=str(deck.id),
        session_id=str(session.id),
        due_cards=due_count,
    )
    return session, due_count


def session_due_cards(user_id, session_id, limit):
    session = get_session(user_id, session_id)
    qs = due_cards(session.deck_id, timezone.now())
    return list(qs[:limit]), qs.count()


def record_review(user_id, session_id, card_id, result, response_ms=None):
    logger.info("review_received",
        user_id=str(user_id),
        session_id=str(session_id),
        card_id=str(card_id),
        result=result,
    )

    # Card and session stay locked until the counters are updated
    with transaction.atomic():
        session = get_session(user_id, session_id, for_update=True)
        if session.ended_at is not None:
            raise ConflictError("Study session has already ended")

        card = get_card_for_update(user_id, card_id)
        if card.deck_id != session.deck_id:
            raise NotFoundError("Card", card_id)

        now = timezone.now()
        new_box, due_at = next_review(card.leitner_box, result, now)
        review = persist_review(session, card, result, new_box, due_at, now, response_ms)

    logger.info("review_scheduled",
        user_id=str(user_id),
        card_id=str(card_id),
        prev_box=review.prev_box,
        new_box=new_box,
        next_review_utc=to_iso(due_at),
    )
    return review, card


def end_session(user_id, session_id):
    with transaction.atomic():
        session = get_session(user_id, session_id, for_update=True)
        if session.ended_at is not None:
            raise ConflictError("Study session has already ended")
        session.ended_at = timezone.now()
        session.save(update_fields=["ended_at"])

    duration = int((session.ended_at - session.started_at).total_seconds())
    logger.info("study_session_ended",
        user_id=str(user_id),
        session_id=str(session.id),
        cards_reviewed=session.cards_reviewed,
        duration_seconds=duration,
    )
    return session, duration
