from rest_framework import serializers

from ..config import (
    ANSWER_MAX_LENGTH,
    DECK_DESCRIPTION_MAX_LENGTH,
    DECK_NAME_MAX_LENGTH,
    DEFAULT_PAGE_LIMIT,
    ISSUE_DESCRIPTION_MAX_LENGTH,
    MAX_PAGE_LIMIT,
    PROMPT_MAX_LENGTH,
    QUESTION_MAX_LENGTH,
)
from ..domain.enums import ReviewResult


class StrictCharField(serializers.CharField):
    """CharField that refuses numbers and booleans instead of casting them."""

    default_error_messages = {"invalid": "Must be a string."}

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class PartialUpdateSerializer(serializers.Serializer):
    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field must be provided")
        return attrs


class GenerateCardsSerializer(serializers.Serializer):
    prompt = StrictCharField(
        max_length=PROMPT_MAX_LENGTH,
        error_messages={
            "required": "Prompt is required",
            "blank": "Prompt cannot be empty",
            "max_length": "Prompt cannot exceed 10,000 characters",
        },
    )


class PaginationSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_LIMIT, default=DEFAULT_PAGE_LIMIT)
    offset = serializers.IntegerField(min_value=0, default=0)


class DueCardsQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_LIMIT, default=DEFAULT_PAGE_LIMIT)


class CreateDeckSerializer(serializers.Serializer):
    name = StrictCharField(max_length=DECK_NAME_MAX_LENGTH)
    description = StrictCharField(
        max_length=DECK_DESCRIPTION_MAX_LENGTH, required=False, allow_null=True, allow_blank=True
    )


class UpdateDeckSerializer(PartialUpdateSerializer):
    name = StrictCharField(max_length=DECK_NAME_MAX_LENGTH, required=False)
    description = StrictCharField(
        max_length=DECK_DESCRIPTION_MAX_LENGTH, required=False, allow_null=True, allow_blank=True
    )


class CreateCardSerializer(serializers.Serializer):
    question = StrictCharField(max_length=QUESTION_MAX_LENGTH)
    answer = StrictCharField(max_length=ANSWER_MAX_LENGTH)


class UpdateCardSerializer(PartialUpdateSerializer):
    question = StrictCharField(max_length=QUESTION_MAX_LENGTH, required=False)
    answer = StrictCharField(max_length=ANSWER_MAX_LENGTH, required=False)


class SubmitReviewSerializer(serializers.Serializer):
    cardId = serializers.UUIDField()
    result = serializers.ChoiceField(choices=ReviewResult.choices)
    responseDurationMs = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class AcceptGeneratedCardsSerializer(serializers.Serializer):
    deckName = StrictCharField(max_length=DECK_NAME_MAX_LENGTH)
    deckDescription = StrictCharField(
        max_length=DECK_DESCRIPTION_MAX_LENGTH, required=False, allow_null=True, allow_blank=True
    )
    acceptedCardIds = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class CreateIssueSerializer(serializers.Serializer):
    description = StrictCharField(max_length=ISSUE_DESCRIPTION_MAX_LENGTH)
