import uuid
from datetime import datetime, timedelta, timezone

import pytest
from django.utils import timezone as dj_timezone

from flashcards.api.mappers import (
    CARD_FIELDS,
    DECK_STATS_FIELDS,
    GENERATED_CARD_FIELDS,
    ISSUE_FIELDS,
    REVIEW_FIELDS,
    SESSION_FIELDS,
    from_dto,
    session_to_dto,
    to_dto,
)
from flashcards.data.models import (
    AIGeneratedCard,
    AIGeneration,
    Card,
    CardIssueReport,
    CardReview,
    Deck,
    StudySession,
)
from flashcards.data.repos import get_deck_with_stats

WHEN = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_card_dto_uses_camel_case_and_utc_strings():
    card = Card(
        id=uuid.uuid4(),
        question="Q",
        answer="A",
        origin="ai",
        leitner_box=2,
        due_at=WHEN,
        last_reviewed_at=None,
        created_at=WHEN,
        updated_at=WHEN,
    )
    dto = to_dto(card, CARD_FIELDS)

    assert dto["id"] == str(card.id)
    assert dto["leitnerBox"] == 2
    assert dto["dueAt"] == "2026-03-01T09:30:00Z"
    assert dto["lastReviewedAt"] is None
    assert "deck_id" not in dto


def test_card_dto_loads_back_into_row_values():
    card_id = uuid.uuid4()
    dto = {"id": str(card_id), "question": "Q", "dueAt": "2026-03-01T09:30:00Z", "lastReviewedAt": None}
    row = from_dto(dto, CARD_FIELDS)

    assert row == {"id": card_id, "question": "Q", "due_at": WHEN, "last_reviewed_at": None}


def test_review_dto_renames_ids_and_boxes():
    review = CardReview(
        id=uuid.uuid4(),
        card_id=uuid.uuid4(),
        result="know",
        prev_box=1,
        new_box=2,
        reviewed_at=WHEN,
    )
    dto = to_dto(review, REVIEW_FIELDS)

    assert dto["reviewId"] == str(review.id)
    assert dto["cardId"] == str(review.card_id)
    assert (dto["previousBox"], dto["newBox"]) == (1, 2)


def test_dict_rows_are_mapped_like_objects():
    row = {"id": uuid.uuid4(), "name": "Spanish", "cards_total": 4, "due_count": 1, "created_at": WHEN}
    dto = to_dto(row, DECK_STATS_FIELDS)

    assert dto["cardsTotal"] == 4
    assert dto["dueCount"] == 1
    assert dto["description"] is None
    assert dto["createdAt"] == "2026-03-01T09:30:00Z"


def test_session_dto_open_session():
    session = StudySession(id=uuid.uuid4(), deck_id=uuid.uuid4(), started_at=WHEN)
    dto = session_to_dto(session)

    assert dto["endedAt"] is None
    assert dto["cardsReviewed"] == 0
    assert dto["deckId"] == str(session.deck_id)


@pytest.fixture
def stored(user):
    """One row of every mapped entity, read back from the database."""
    now = dj_timezone.now()
    deck = Deck.objects.create(user=user, name="Biology", description="Cells")
    card = Card.objects.create(
        user=user, deck=deck, question="Q", answer="A", leitner_box=2,
        due_at=now + timedelta(days=3), last_reviewed_at=now,
    )
    session = StudySession.objects.create(
        user=user, deck=deck, ended_at=now + timedelta(minutes=5), cards_reviewed=1, know_count=1
    )
    review = CardReview.objects.create(
        user=user, session=session, card=card, result="know", prev_box=1, new_box=2, response_ms=900
    )
    generation = AIGeneration.objects.create(user=user, prompt="p", status="succeeded")
    generated = AIGeneratedCard.objects.create(user=user, generation=generation, question="GQ", answer="GA")
    issue = CardIssueReport.objects.create(user=user, card=card, description="typo", resolution_notes="fixed")
    return {
        "deck": (get_deck_with_stats(user.id, deck.id, now + timedelta(days=7)), DECK_STATS_FIELDS),
        "card": (Card.objects.get(pk=card.pk), CARD_FIELDS),
        "session": (StudySession.objects.get(pk=session.pk), SESSION_FIELDS),
        "review": (CardReview.objects.get(pk=review.pk), REVIEW_FIELDS),
        "generated": (AIGeneratedCard.objects.get(pk=generated.pk), GENERATED_CARD_FIELDS),
        "issue": (CardIssueReport.objects.get(pk=issue.pk), ISSUE_FIELDS),
    }


@pytest.mark.django_db
@pytest.mark.parametrize("entity", ["deck", "card", "session", "review", "generated", "issue"])
def test_stored_entity_survives_dto_round_trip(stored, entity):
    row, fields = stored[entity]
    loaded = from_dto(to_dto(row, fields), fields)

    assert set(loaded) == {attr for attr, _ in fields}
    for attr, _ in fields:
        assert loaded[attr] == getattr(row, attr), attr
