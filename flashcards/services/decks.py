from django.db import IntegrityError, transaction
from django.utils import timezone
import structlog

from ..data.models import Deck
from ..data.repos import decks_with_stats, get_deck, get_deck_with_stats
from ..errors import ConflictError

logger = structlog.get_logger()


def _ensure_name_free(user_id, name, exclude_id=None):
    qs = Deck.objects.filter(user_id=user_id, name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise ConflictError(f"A deck named '{name}' already exists")


def list_decks(user_id, limit, offset):
    qs = decks_with_stats(user_id, timezone.now()).order_by("-created_at", "id")
    total = qs.count()
    return list(qs[offset:offset + limit]), total


def create_deck(user_id, name, description=None):
    _ensure_name_free(user_id, name)
    try:
        with transaction.atomic():
            deck = Deck.objects.create(user_id=user_id, name=name, description=description)
    except IntegrityError as e:
        # Lost a race against a concurrent create with the same name
        raise ConflictError(f"A deck named '{name}' already exists") from e
    logger.info("deck_created", user_id=str(user_id), deck_id=str(deck.id))
    return deck


def update_deck(user_id, deck_id, name=None, description=None, description_set=False):
    deck = get_deck(user_id, deck_id)
    fields = ["updated_at"]
    if name is not None:
        _ensure_name_free(user_id, name, exclude_id=deck.pk)
        deck.name = name
        fields.append("name")
    if description_set:
        deck.description = description
        fields.append("description")
    deck.updated_at = timezone.now()
    try:
        with transaction.atomic():
            deck.save(update_fields=fields)
    except IntegrityError as e:
        raise ConflictError(f"A deck named '{name}' already exists") from e
    logger.info("deck_updated", user_id=str(user_id), deck_id=str(deck.id), fields=fields)
    return deck


def delete_deck(user_id, deck_id):
    deck = get_deck(user_id, deck_id)
    deck.delete()
    logger.info("deck_deleted", user_id=str(user_id), deck_id=str(deck_id))


def deck_detail(user_id, deck_id):
    return get_deck_with_stats(user_id, deck_id, timezone.now())
