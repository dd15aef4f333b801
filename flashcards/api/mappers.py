"""Row <-> DTO mapping.

Rows use snake_case attribute names, API payloads use camelCase keys. Each
``*_FIELDS`` tuple pairs the two; ``to_dto`` and ``from_dto`` only rename,
format timestamps as ISO-8601 (UTC, ``Z``) and stringify ids.
"""

import uuid
from datetime import datetime

from django.utils.dateparse import parse_datetime

from ..utils.time import to_iso

DECK_FIELDS = (
    ("id", "id"),
    ("name", "name"),
    ("description", "description"),
    ("created_at", "createdAt"),
    ("updated_at", "updatedAt"),
)
DECK_STATS_FIELDS = DECK_FIELDS + (
    ("cards_total", "cardsTotal"),
    ("due_count", "dueCount"),
)
DECK_UPDATE_FIELDS = (
    ("id", "id"),
    ("name", "name"),
    ("description", "description"),
    ("updated_at", "updatedAt"),
)

CARD_FIELDS = (
    ("id", "id"),
    ("question", "question"),
    ("answer", "answer"),
    ("origin", "origin"),
    ("leitner_box", "leitnerBox"),
    ("due_at", "dueAt"),
    ("last_reviewed_at", "lastReviewedAt"),
    ("created_at", "createdAt"),
    ("updated_at", "updatedAt"),
)
CARD_UPDATE_FIELDS = (
    ("id", "id"),
    ("question", "question"),
    ("answer", "answer"),
    ("leitner_box", "leitnerBox"),
    ("due_at", "dueAt"),
    ("last_reviewed_at", "lastReviewedAt"),
    ("updated_at", "updatedAt"),
)
STUDY_CARD_FIELDS = (
    ("id", "id"),
    ("question", "question"),
    ("answer", "answer"),
    ("leitner_box", "leitnerBox"),
    ("due_at", "dueAt"),
)

SESSION_FIELDS = (
    ("id", "id"),
    ("deck_id", "deckId"),
    ("started_at", "startedAt"),
    ("ended_at", "endedAt"),
    ("cards_reviewed", "cardsReviewed"),
    ("know_count", "knowCount"),
    ("dont_know_count", "dontKnowCount"),
)

REVIEW_FIELDS = (
    ("id", "reviewId"),
    ("card_id", "cardId"),
    ("result", "result"),
    ("prev_box", "previousBox"),
    ("new_box", "newBox"),
    ("reviewed_at", "reviewedAt"),
)

GENERATED_CARD_FIELDS = (
    ("id", "id"),
    ("question", "question"),
    ("answer", "answer"),
    ("accepted", "accepted"),
    ("created_at", "createdAt"),
)
GENERATED_CARD_EDIT_FIELDS = (
    ("id", "id"),
    ("question", "question"),
    ("answer", "answer"),
    ("accepted", "accepted"),
)

ISSUE_FIELDS = (
    ("id", "id"),
    ("card_id", "cardId"),
    ("description", "description"),
    ("status", "status"),
    ("resolution_notes", "resolutionNotes"),
    ("created_at", "createdAt"),
    ("updated_at", "updatedAt"),
)


def _dump(value):
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def _load(attr, value):
    if value is None:
        return None
    if attr.endswith("_at"):
        return parse_datetime(value)
    if attr == "id" or attr.endswith("_id"):
        return uuid.UUID(value)
    return value


def to_dto(row, fields):
    if isinstance(row, dict):
        return {key: _dump(row.get(attr)) for attr, key in fields}
    return {key: _dump(getattr(row, attr)) for attr, key in fields}


def from_dto(dto, fields):
    return {attr: _load(attr, dto[key]) for attr, key in fields if key in dto}


def deck_to_dto(deck):
    return to_dto(deck, DECK_STATS_FIELDS)


def card_to_dto(card):
    return to_dto(card, CARD_FIELDS)


def study_card_to_dto(card):
    return to_dto(card, STUDY_CARD_FIELDS)


def session_to_dto(session):
    return to_dto(session, SESSION_FIELDS)


def generated_card_to_dto(card):
    return to_dto(card, GENERATED_CARD_FIELDS)


def issue_to_dto(report):
    return to_dto(report, ISSUE_FIELDS)
