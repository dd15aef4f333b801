from django.db import DatabaseError as DjangoDatabaseError, transaction
from django.utils import timezone
import structlog

from ..config import QUOTA_WINDOW
from ..data.models import AIGeneratedCard, AIGeneration, Card
from ..data.repos import get_deck_with_stats, lock_user, successful_attempt_times
from ..domain.enums import CardOrigin, ErrorCode, GenerationStatus
from ..domain.logic import evaluate_quota
from ..errors import (
    AIServiceError,
    ConflictError,
    DatabaseError,
    FlashcardsError,
    NotFoundError,
    QuotaExceededError,
    ValidationFailed,
)
from .ai import get_card_generator
from .decks import create_deck
from .quota import check_quota, record_failed_attempt, record_successful_attempt

logger = structlog.get_logger()


def generate_cards(user_id, prompt: str, generator=None):
    """
    Generate flashcards from ``prompt`` and store them for review.

    Returns ``(generation, cards, quota)`` where ``quota`` is the check made
    before this generation was recorded. Nothing is retried; AI and store
    failures leave a failed attempt behind (best effort) and surface as
    ``FlashcardsError``.
    """
    try:
        quota = check_quota(user_id)
    except DjangoDatabaseError as e:
        raise FlashcardsError("Failed to check quota") from e
    if not quota.allowed:
        logger.info("quota_exceeded", user_id=str(user_id), used=quota.used)
        raise QuotaExceededError(quota)

    generator = generator or get_card_generator()

    try:
        result = generator.generate(prompt)
    except Exception as e:
        logger.exception("ai_generation_failed", user_id=str(user_id))
        record_failed_attempt(user_id, ErrorCode.AI_SERVICE_ERROR)
        if isinstance(e, AIServiceError):
            raise
        raise AIServiceError("Failed to generate flashcards") from e

    try:
        with transaction.atomic():
            # Check-and-insert under the user lock so concurrent requests
            # cannot both take the last slot
            lock_user(user_id)
            now = timezone.now()
            times = successful_attempt_times(user_id, since=now - QUOTA_WINDOW)
            current = evaluate_quota(times, now)
            if not current.allowed:
                logger.info("quota_exceeded_concurrently", user_id=str(user_id), used=current.used)
                raise QuotaExceededError(current)

            generation = AIGeneration.objects.create(
                user_id=user_id,
                prompt=prompt,
                model=result.model,
                raw_response=result.raw_response,
                status=GenerationStatus.SUCCEEDED,
                completed_at=now,
            )
            cards = AIGeneratedCard.objects.bulk_create(
                AIGeneratedCard(
                    user_id=user_id,
                    generation=generation,
                    question=c.question,
                    answer=c.answer,
                    accepted=False,
                )
                for c in result.cards
            )
            record_successful_attempt(user_id, generation.id)
    except DjangoDatabaseError as e:
        logger.exception("generation_persist_failed", user_id=str(user_id))
        record_failed_attempt(user_id, ErrorCode.DATABASE_ERROR)
        raise DatabaseError("Failed to save generated flashcards") from e

    logger.info("cards_generated",
        user_id=str(user_id),
        generation_id=str(generation.id),
        model=generation.model,
        card_count=len(cards),
        remaining=max(0, quota.remaining - 1),
    )
    return generation, cards, quota


def get_generation(user_id, generation_id):
    try:
        return AIGeneration.objects.get(pk=generation_id, user_id=user_id)
    except AIGeneration.DoesNotExist:
        raise NotFoundError("Generation", generation_id)


def get_generated_cards(user_id, generation_id):
    generation = get_generation(user_id, generation_id)
    return generation, list(generation.cards.order_by("created_at", "id"))


def edit_generated_card(user_id, card_id, question=None, answer=None):
    try:
        card = AIGeneratedCard.objects.get(pk=card_id, user_id=user_id)
    except AIGeneratedCard.DoesNotExist:
        raise NotFoundError("Generated card", card_id)
    if card.accepted:
        raise ConflictError("Generated card has already been accepted")

    fields = []
    if question is not None:
        card.question = question
        fields.append("question")
    if answer is not None:
        card.answer = answer
        fields.append("answer")
    if fields:
        card.save(update_fields=fields)
    return card


def accept_generated_cards(user_id, generation_id, deck_name, deck_description, accepted_card_ids):
    """
    Create a deck from the selected generated cards.

    Runs in one transaction: either the deck and every accepted card exist
    afterwards, or nothing changed.
    """
    generation = get_generation(user_id, generation_id)
    wanted = list(dict.fromkeys(accepted_card_ids))

    with transaction.atomic():
        generated = {
            c.id: c
            for c in AIGeneratedCard.objects.select_for_update().filter(
                generation=generation, user_id=user_id, id__in=wanted
            )
        }
        unknown = [str(i) for i in wanted if i not in generated]
        if unknown:
            raise ValidationFailed(
                f"Cards do not belong to generation {generation_id}: {', '.join(unknown)}",
                fields=["acceptedCardIds"],
            )
        if any(c.accepted for c in generated.values()):
            raise ConflictError("Some cards have already been accepted")

        deck = create_deck(user_id, deck_name, deck_description)
        now = timezone.now()
        for card_id in wanted:
            gen_card = generated[card_id]
            card = Card.objects.create(
                user_id=user_id,
                deck=deck,
                question=gen_card.question,
                answer=gen_card.answer,
                origin=CardOrigin.AI,
                due_at=now,
            )
            gen_card.accepted = True
            gen_card.accepted_at = now
            gen_card.card = card
            gen_card.save(update_fields=["accepted", "accepted_at", "card"])

    logger.info("generated_cards_accepted",
        user_id=str(user_id),
        generation_id=str(generation_id),
        deck_id=str(deck.id),
        accepted_count=len(wanted),
    )
    return get_deck_with_stats(user_id, deck.id, timezone.now()), len(wanted)
