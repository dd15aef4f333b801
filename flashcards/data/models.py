import uuid

from django.conf import settings
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from ..config import (
    ANSWER_MAX_LENGTH,
    DECK_DESCRIPTION_MAX_LENGTH,
    DECK_NAME_MAX_LENGTH,
    ISSUE_DESCRIPTION_MAX_LENGTH,
    MIN_BOX,
    QUESTION_MAX_LENGTH,
)
from ..domain.enums import CardOrigin, GenerationStatus, IssueStatus, ReviewResult


class Deck(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="decks")
    name = models.CharField(max_length=DECK_NAME_MAX_LENGTH)
    description = models.CharField(max_length=DECK_DESCRIPTION_MAX_LENGTH, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "decks"
        constraints = [
            models.UniqueConstraint(Lower("name"), "user", name="uniq_deck_name_per_user"),
        ]
        indexes = [
            models.Index(fields=["user", "created_at"], name="decks_user_id_5f1a2c_idx"),
        ]


class Card(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cards")
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE, related_name="cards")
    question = models.CharField(max_length=QUESTION_MAX_LENGTH)
    answer = models.CharField(max_length=ANSWER_MAX_LENGTH)
    origin = models.CharField(max_length=16, choices=CardOrigin.choices, default=CardOrigin.MANUAL)
    leitner_box = models.PositiveSmallIntegerField(default=MIN_BOX)
    due_at = models.DateTimeField(default=timezone.now)  # UTC
    last_reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "cards"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(leitner_box__gte=1, leitner_box__lte=3),
                name="card_leitner_box_range",
            ),
        ]
        indexes = [
            models.Index(fields=["deck", "due_at"], name="cards_deck_id_8c3e1f_idx"),
        ]


class StudySession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="study_sessions")
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE, related_name="study_sessions")
    started_at = models.DateTimeField(default=timezone.now)
    ended_at = models.DateTimeField(null=True, blank=True)
    cards_reviewed = models.PositiveIntegerField(default=0)
    know_count = models.PositiveIntegerField(default=0)
    dont_know_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "study_sessions"


class CardReview(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="card_reviews")
    session = models.ForeignKey(StudySession, on_delete=models.CASCADE, related_name="reviews")
    card = models.ForeignKey(Card, on_delete=models.CASCADE, related_name="reviews")
    result = models.CharField(max_length=16, choices=ReviewResult.choices)
    prev_box = models.PositiveSmallIntegerField()
    new_box = models.PositiveSmallIntegerField()
    response_ms = models.PositiveIntegerField(null=True, blank=True)
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "card_reviews"
        indexes = [
            models.Index(fields=["session", "reviewed_at"], name="card_review_session_4b7d2a_idx"),
        ]


class AIGeneration(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ai_generations")
    prompt = models.TextField()
    model = models.CharField(max_length=100, null=True, blank=True)
    raw_response = models.JSONField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=GenerationStatus.choices)
    error_code = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "ai_generations"


class AIGeneratedCard(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ai_generated_cards")
    generation = models.ForeignKey(AIGeneration, on_delete=models.CASCADE, related_name="cards")
    question = models.CharField(max_length=QUESTION_MAX_LENGTH)
    answer = models.CharField(max_length=ANSWER_MAX_LENGTH)
    accepted = models.BooleanField(default=False)
    accepted_at = models.DateTimeField(null=True, blank=True)
    card = models.OneToOneField(
        Card, on_delete=models.SET_NULL, null=True, blank=True, related_name="generated_from"
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "ai_generated_cards"


class AIGenerationAttempt(models.Model):
    """Append-only log of generation outcomes; successes feed the rolling quota."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ai_generation_attempts")
    generation = models.ForeignKey(
        AIGeneration, on_delete=models.SET_NULL, null=True, blank=True, related_name="attempts"
    )
    status = models.CharField(max_length=16, choices=GenerationStatus.choices)
    error_code = models.CharField(max_length=64, null=True, blank=True)
    advisory_lock_key = models.BigIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "ai_generation_attempts"
        indexes = [
            models.Index(fields=["user", "status", "created_at"], name="ai_generati_user_id_9e2f4b_idx"),
        ]


class CardIssueReport(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="card_issue_reports")
    card = models.ForeignKey(Card, on_delete=models.CASCADE, related_name="issue_reports")
    description = models.CharField(max_length=ISSUE_DESCRIPTION_MAX_LENGTH)
    status = models.CharField(max_length=16, choices=IssueStatus.choices, default=IssueStatus.OPEN)
    resolution_notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "card_issue_reports"
