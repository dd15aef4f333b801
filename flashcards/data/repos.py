from django.contrib.auth import get_user_model
from django.db.models import Count, F, Q

from ..domain.enums import GenerationStatus, ReviewResult
from ..domain.logic import advisory_lock_key
from ..errors import NotFoundError
from .models import AIGenerationAttempt, Card, CardReview, Deck, StudySession


def lock_user(user_id):
    """
    Lock the user row for the rest of the transaction.
    Serializes quota check-and-insert for the same user.
    """
    User = get_user_model()
    return User.objects.select_for_update().get(pk=user_id)


def successful_attempt_times(user_id, since):
    return list(
        AIGenerationAttempt.objects.filter(
            user_id=user_id, status=GenerationStatus.SUCCEEDED, created_at__gte=since
        )
        .order_by("created_at")
        .values_list("created_at", flat=True)
    )


def insert_attempt(user_id, status, generation_id=None, error_code=None):
    return AIGenerationAttempt.objects.create(
        user_id=user_id,
        generation_id=generation_id,
        status=status,
        error_code=error_code,
        advisory_lock_key=advisory_lock_key(user_id),
    )


def decks_with_stats(user_id, now):
    return Deck.objects.filter(user_id=user_id).annotate(
        cards_total=Count("cards", distinct=True),
        due_count=Count("cards", filter=Q(cards__due_at__lte=now), distinct=True),
    )


def get_deck(user_id, deck_id):
    try:
        return Deck.objects.get(pk=deck_id, user_id=user_id)
    except Deck.DoesNotExist:
        raise NotFoundError("Deck", deck_id)


def get_deck_with_stats(user_id, deck_id, now):
    try:
        return decks_with_stats(user_id, now).get(pk=deck_id)
    except Deck.DoesNotExist:
        raise NotFoundError("Deck", deck_id)


def get_card(user_id, card_id):
    try:
        return Card.objects.get(pk=card_id, user_id=user_id)
    except Card.DoesNotExist:
        raise NotFoundError("Card", card_id)


def get_session(user_id, session_id, for_update=False):
    qs = StudySession.objects.filter(user_id=user_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=session_id)
    except StudySession.DoesNotExist:
        raise NotFoundError("Study session", session_id)


def due_cards(deck_id, now):
    return Card.objects.filter(deck_id=deck_id, due_at__lte=now).order_by("due_at", "created_at")


def persist_review(session, card, result, new_box, due_at, reviewed_at, response_ms=None):
    """
    Insert the review, move the card and bump the session counters.
    Caller holds row locks on ``session`` and ``card`` inside a transaction.
    """
    review = CardReview.objects.create(
        user_id=session.user_id,
        session=session,
        card=card,
        result=result,
        prev_box=card.leitner_box,
        new_box=new_box,
        response_ms=response_ms,
        reviewed_at=reviewed_at,
    )

    card.leitner_box = new_box
    card.due_at = due_at
    card.last_reviewed_at = reviewed_at
    card.save(update_fields=["leitner_box", "due_at", "last_reviewed_at"])

    counter = "know_count" if result == ReviewResult.KNOW else "dont_know_count"
    StudySession.objects.filter(pk=session.pk).update(
        cards_reviewed=F("cards_reviewed") + 1,
        **{counter: F(counter) + 1},
    )
    return review


def get_card_for_update(user_id, card_id):
    """Must run inside ``transaction.atomic``."""
    try:
        return Card.objects.select_for_update().get(pk=card_id, user_id=user_id)
    except Card.DoesNotExist:
        raise NotFoundError("Card", card_id)
