import logging
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from flashcards.data.models import Card, CardReview, Deck, StudySession

logger = logging.getLogger(__name__)

# Helpers

def make_deck(user, name="Spanish", **kwargs):
    return Deck.objects.create(user=user, name=name, **kwargs)


def make_card(user, deck, box=1, due_in=timedelta(0), **kwargs):
    kwargs.setdefault("question", "hola?")
    kwargs.setdefault("answer", "hello")
    return Card.objects.create(
        user=user, deck=deck, leitner_box=box, due_at=timezone.now() + due_in, **kwargs
    )


def start_session(api, deck):
    resp = api.post(reverse("study-sessions", kwargs={"deck_id": deck.id}))
    assert resp.status_code == 201
    return resp.json()


def submit(api, session_id, card, result, **extra):
    payload = {"cardId": str(card.id), "result": result, **extra}
    resp = api.post(reverse("session-reviews", kwargs={"session_id": session_id}), payload)
    data = resp.json()
    logger.info(
        "POST /reviews result=%s → status=%s box %s→%s",
        result,
        resp.status_code,
        data.get("previousBox"),
        data.get("newBox"),
    )
    return resp


# Decks

@pytest.mark.django_db
def test_create_and_list_decks(api):
    resp = api.post(reverse("decks"), {"name": "Spanish", "description": "Verbs"})
    created = resp.json()
    assert resp.status_code == 201
    assert created["name"] == "Spanish"
    assert created["cardsTotal"] == 0
    assert created["dueCount"] == 0

    api.post(reverse("decks"), {"name": "French"})
    listing = api.get(reverse("decks"), {"limit": 1, "offset": 0}).json()
    assert listing["pagination"] == {"total": 2, "limit": 1, "offset": 0}
    assert len(listing["decks"]) == 1


@pytest.mark.django_db
def test_deck_names_unique_per_user_case_insensitive(api, other_user):
    make_deck(other_user, name="Spanish")
    assert api.post(reverse("decks"), {"name": "Spanish"}).status_code == 201

    resp = api.post(reverse("decks"), {"name": "spanish"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"


@pytest.mark.django_db
def test_deck_stats_count_due_cards(api, user):
    deck = make_deck(user)
    make_card(user, deck)
    make_card(user, deck, due_in=-timedelta(hours=1))
    make_card(user, deck, box=2, due_in=timedelta(days=2))

    data = api.get(reverse("deck-detail", kwargs={"deck_id": deck.id})).json()
    assert data["cardsTotal"] == 3
    assert data["dueCount"] == 2


@pytest.mark.django_db
def test_update_deck(api, user):
    deck = make_deck(user, description="old")
    resp = api.patch(reverse("deck-detail", kwargs={"deck_id": deck.id}), {"name": "Español", "description": None})
    data = resp.json()
    assert resp.status_code == 200
    assert data["name"] == "Español"
    assert data["description"] is None
    assert set(data) == {"id", "name", "description", "updatedAt"}


@pytest.mark.django_db
def test_update_deck_requires_a_field(api, user):
    deck = make_deck(user)
    resp = api.patch(reverse("deck-detail", kwargs={"deck_id": deck.id}), {})
    assert resp.status_code == 400


@pytest.mark.django_db
def test_delete_deck_cascades(api, user):
    deck = make_deck(user)
    make_card(user, deck)
    resp = api.delete(reverse("deck-detail", kwargs={"deck_id": deck.id}))
    assert resp.status_code == 204
    assert Card.objects.count() == 0


@pytest.mark.django_db
def test_other_users_deck_is_not_found(api, other_user):
    deck = make_deck(other_user)
    resp = api.get(reverse("deck-detail", kwargs={"deck_id": deck.id}))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.django_db
def test_invalid_pagination_rejected(api):
    resp = api.get(reverse("decks"), {"limit": 500})
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["limit"]


# Cards

@pytest.mark.django_db
def test_create_and_list_cards(api, user):
    deck = make_deck(user)
    url = reverse("deck-cards", kwargs={"deck_id": deck.id})
    resp = api.post(url, {"question": "perro?", "answer": "dog"})
    card = resp.json()

    assert resp.status_code == 201
    assert card["origin"] == "manual"
    assert card["leitnerBox"] == 1
    assert card["lastReviewedAt"] is None

    listing = api.get(url).json()
    assert listing["pagination"]["total"] == 1
    assert listing["cards"][0]["id"] == card["id"]


@pytest.mark.django_db
def test_create_card_requires_question_and_answer(api, user):
    deck = make_deck(user)
    resp = api.post(reverse("deck-cards", kwargs={"deck_id": deck.id}), {"question": "  "})
    data = resp.json()
    assert resp.status_code == 400
    assert set(data["fields"]) == {"question", "answer"}


@pytest.mark.django_db
def test_update_card_resets_progress(api, user):
    deck = make_deck(user)
    card = make_card(user, deck, box=3, due_in=timedelta(days=7), last_reviewed_at=timezone.now())

    resp = api.patch(reverse("card-detail", kwargs={"card_id": card.id}), {"answer": "a dog"})
    data = resp.json()
    assert resp.status_code == 200
    assert data["answer"] == "a dog"
    assert data["leitnerBox"] == 1
    assert data["lastReviewedAt"] is None

    card.refresh_from_db()
    assert card.due_at <= timezone.now()


@pytest.mark.django_db
def test_delete_card(api, user):
    card = make_card(user, make_deck(user))
    assert api.delete(reverse("card-detail", kwargs={"card_id": card.id})).status_code == 204
    assert not Card.objects.filter(pk=card.pk).exists()


# Study sessions

@pytest.mark.django_db
def test_start_session_reports_due_cards(api, user):
    deck = make_deck(user)
    make_card(user, deck)
    make_card(user, deck, due_in=timedelta(days=1))

    data = start_session(api, deck)
    assert data["deckId"] == str(deck.id)
    assert data["dueCardsCount"] == 1


@pytest.mark.django_db
def test_session_due_cards_ordered_by_due_date(api, user):
    deck = make_deck(user)
    later = make_card(user, deck, question="later", due_in=-timedelta(minutes=1))
    earlier = make_card(user, deck, question="earlier", due_in=-timedelta(hours=2))
    make_card(user, deck, question="future", due_in=timedelta(days=1))

    session = start_session(api, deck)
    resp = api.get(reverse("session-cards", kwargs={"session_id": session["sessionId"]}), {"limit": 1})
    data = resp.json()

    assert resp.status_code == 200
    assert [c["id"] for c in data["cards"]] == [str(earlier.id)]
    assert data["remaining"] == 2
    assert set(data["cards"][0]) == {"id", "question", "answer", "leitnerBox", "dueAt"}
    assert later.id != earlier.id


@pytest.mark.django_db
def test_know_moves_card_up_and_updates_counters(api, user):
    deck = make_deck(user)
    card = make_card(user, deck)
    session = start_session(api, deck)

    resp = submit(api, session["sessionId"], card, "know", responseDurationMs=1500)
    data = resp.json()

    assert resp.status_code == 201
    assert data["previousBox"] == 1
    assert data["newBox"] == 2
    assert data["result"] == "know"

    card.refresh_from_db()
    assert card.leitner_box == 2
    assert card.last_reviewed_at is not None
    assert timedelta(days=3) - timedelta(minutes=1) < card.due_at - timezone.now() <= timedelta(days=3)

    stored = StudySession.objects.get(pk=session["sessionId"])
    assert (stored.cards_reviewed, stored.know_count, stored.dont_know_count) == (1, 1, 0)
    assert CardReview.objects.get().response_ms == 1500
    logger.info("✓ Passed: know → box 2, due in 3 days")


@pytest.mark.django_db
def test_dont_know_resets_box_and_makes_card_due(api, user):
    deck = make_deck(user)
    card = make_card(user, deck, box=3)
    session = start_session(api, deck)

    data = submit(api, session["sessionId"], card, "dont_know").json()
    assert data["previousBox"] == 3
    assert data["newBox"] == 1

    card.refresh_from_db()
    assert card.leitner_box == 1
    assert card.due_at <= timezone.now()

    stored = StudySession.objects.get(pk=session["sessionId"])
    assert (stored.cards_reviewed, stored.know_count, stored.dont_know_count) == (1, 0, 1)


@pytest.mark.django_db
def test_box_is_capped_at_three(api, user):
    deck = make_deck(user)
    card = make_card(user, deck)
    session = start_session(api, deck)

    boxes = []
    for _ in range(4):
        boxes.append(submit(api, session["sessionId"], card, "know").json()["newBox"])

    assert boxes == [2, 3, 3, 3]


@pytest.mark.django_db
def test_counters_match_review_log(api, user):
    deck = make_deck(user)
    cards = [make_card(user, deck, question=f"q{i}") for i in range(3)]
    session = start_session(api, deck)

    for card, result in zip(cards + cards[:1], ["know", "dont_know", "know", "dont_know"]):
        assert submit(api, session["sessionId"], card, result).status_code == 201

    stored = StudySession.objects.get(pk=session["sessionId"])
    reviews = CardReview.objects.filter(session=stored)
    assert stored.cards_reviewed == reviews.count() == 4
    assert stored.know_count == reviews.filter(result="know").count() == 2
    assert stored.dont_know_count == reviews.filter(result="dont_know").count() == 2


@pytest.mark.django_db
def test_review_rejects_card_from_other_deck(api, user):
    deck = make_deck(user)
    other_deck = make_deck(user, name="Other")
    card = make_card(user, other_deck)
    session = start_session(api, deck)

    resp = submit(api, session["sessionId"], card, "know")
    assert resp.status_code == 404
    assert CardReview.objects.count() == 0


@pytest.mark.django_db
def test_review_rejects_unknown_result(api, user):
    deck = make_deck(user)
    card = make_card(user, deck)
    session = start_session(api, deck)

    resp = submit(api, session["sessionId"], card, "maybe")
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["result"]


@pytest.mark.django_db
def test_end_session(api, user):
    deck = make_deck(user)
    card = make_card(user, deck)
    session = start_session(api, deck)
    submit(api, session["sessionId"], card, "know")

    url = reverse("session-end", kwargs={"session_id": session["sessionId"]})
    resp = api.patch(url)
    data = resp.json()

    assert resp.status_code == 200
    assert data["endedAt"] is not None
    assert data["cardsReviewed"] == 1
    assert data["knowCount"] == 1
    assert data["durationSeconds"] >= 0

    # Ended sessions accept neither reviews nor a second end
    assert api.patch(url).status_code == 409
    assert submit(api, session["sessionId"], card, "know").status_code == 409


# Issue reports

@pytest.mark.django_db
def test_report_and_list_issues(api, user):
    card = make_card(user, make_deck(user))
    url = reverse("card-issues", kwargs={"card_id": card.id})

    resp = api.post(url, {"description": "Answer is misspelled"})
    report = resp.json()
    assert resp.status_code == 201
    assert report["status"] == "open"
    assert report["cardId"] == str(card.id)
    assert report["resolutionNotes"] is None

    listing = api.get(url).json()
    assert [r["id"] for r in listing["issues"]] == [report["id"]]


@pytest.mark.django_db
def test_issue_on_other_users_card_not_found(api, other_user):
    card = make_card(other_user, make_deck(other_user))
    resp = api.post(reverse("card-issues", kwargs={"card_id": card.id}), {"description": "wrong"})
    assert resp.status_code == 404
