from django.utils import timezone
import structlog

from ..config import MIN_BOX
from ..data.models import Card
from ..data.repos import get_card, get_deck
from ..domain.enums import CardOrigin

logger = structlog.get_logger()


def list_cards(user_id, deck_id, limit, offset):
    deck = get_deck(user_id, deck_id)
    qs = Card.objects.filter(deck=deck).order_by("created_at", "id")
    total = qs.count()
    return list(qs[offset:offset + limit]), total


def create_card(user_id, deck_id, question, answer):
    deck = get_deck(user_id, deck_id)
    card = Card.objects.create(
        user_id=user_id, deck=deck, question=question, answer=answer, origin=CardOrigin.MANUAL
    )
    logger.info("card_created", user_id=str(user_id), deck_id=str(deck.id), card_id=str(card.id))
    return card


def update_card(user_id, card_id, question=None, answer=None):
    """Edit a card's content. Any edit resets its learning progress."""
    card = get_card(user_id, card_id)
    now = timezone.now()
    if question is not None:
        card.question = question
    if answer is not None:
        card.answer = answer
    card.leitner_box = MIN_BOX
    card.due_at = now
    card.last_reviewed_at = None
    card.updated_at = now
    card.save(update_fields=["question", "answer", "leitner_box", "due_at", "last_reviewed_at", "updated_at"])
    logger.info("card_updated", user_id=str(user_id), card_id=str(card.id))
    return card


def delete_card(user_id, card_id):
    card = get_card(user_id, card_id)
    card.delete()
    logger.info("card_deleted", user_id=str(user_id), card_id=str(card_id))
