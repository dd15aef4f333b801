import uuid

from rest_framework import status, views
from rest_framework.response import Response
import structlog

from ..services import cards as card_service
from ..services import decks as deck_service
from ..services import generation as generation_service
from ..services import issues as issue_service
from ..services import reviews as review_service
from ..services.quota import check_quota
from ..utils.time import to_iso
from .mappers import (
    CARD_UPDATE_FIELDS,
    DECK_UPDATE_FIELDS,
    GENERATED_CARD_EDIT_FIELDS,
    REVIEW_FIELDS,
    card_to_dto,
    deck_to_dto,
    generated_card_to_dto,
    issue_to_dto,
    session_to_dto,
    study_card_to_dto,
    to_dto,
)
from .serializers import (
    AcceptGeneratedCardsSerializer,
    CreateCardSerializer,
    CreateDeckSerializer,
    CreateIssueSerializer,
    DueCardsQuerySerializer,
    GenerateCardsSerializer,
    PaginationSerializer,
    SubmitReviewSerializer,
    UpdateCardSerializer,
    UpdateDeckSerializer,
)

base_logger = structlog.get_logger()


def request_logger(request):
    # Create a unique request_id
    return base_logger.bind(request_id=str(uuid.uuid4()), user_id=str(request.user.id))


def rate_limit_headers(quota):
    return {
        "X-RateLimit-Limit": str(quota.limit),
        "X-RateLimit-Remaining": str(quota.remaining),
        "X-RateLimit-Reset": str(quota.reset_timestamp),
    }


def pagination(request):
    qs = PaginationSerializer(data=request.query_params)
    qs.is_valid(raise_exception=True)
    return qs.validated_data["limit"], qs.validated_data["offset"]


# AI generation

class QuotaView(views.APIView):
    def get(self, request):
        quota = check_quota(request.user.id)
        return Response(
            {
                "limit": quota.limit,
                "used": quota.used,
                "remaining": quota.remaining,
                "resetAt": to_iso(quota.reset_at),
            },
            headers=rate_limit_headers(quota),
        )


class GenerateCardsView(views.APIView):
    def post(self, request):
        logger = request_logger(request)

        s = GenerateCardsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        prompt = s.validated_data["prompt"]

        generation, cards, quota = generation_service.generate_cards(request.user.id, prompt)

        logger.info(
            "generate_api_response",
            generation_id=str(generation.id),
            card_count=len(cards),
            remaining=quota.remaining,
            status=status.HTTP_201_CREATED,
        )

        return Response(
            {
                "generationId": str(generation.id),
                "status": generation.status,
                "cards": [generated_card_to_dto(c) for c in cards],
                "createdAt": to_iso(generation.created_at),
            },
            status=status.HTTP_201_CREATED,
            headers=rate_limit_headers(quota),
        )


class GeneratedCardsView(views.APIView):
    def get(self, request, generation_id):
        generation, cards = generation_service.get_generated_cards(request.user.id, generation_id)
        return Response(
            {
                "generationId": str(generation.id),
                "cards": [generated_card_to_dto(c) for c in cards],
            }
        )


class GeneratedCardDetailView(views.APIView):
    def patch(self, request, card_id):
        s = UpdateCardSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        card = generation_service.edit_generated_card(
            request.user.id,
            card_id,
            question=s.validated_data.get("question"),
            answer=s.validated_data.get("answer"),
        )
        return Response(to_dto(card, GENERATED_CARD_EDIT_FIELDS))


class AcceptGeneratedCardsView(views.APIView):
    def post(self, request, generation_id):
        logger = request_logger(request)

        s = AcceptGeneratedCardsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        deck, accepted = generation_service.accept_generated_cards(
            request.user.id,
            generation_id,
            deck_name=data["deckName"],
            deck_description=data.get("deckDescription"),
            accepted_card_ids=data["acceptedCardIds"],
        )

        logger.info(
            "accept_api_response",
            generation_id=str(generation_id),
            deck_id=str(deck.id),
            accepted_count=accepted,
        )
        return Response(
            {"deck": deck_to_dto(deck), "acceptedCount": accepted},
            status=status.HTTP_201_CREATED,
        )


# Decks and cards

class DeckListView(views.APIView):
    def get(self, request):
        limit, offset = pagination(request)
        decks, total = deck_service.list_decks(request.user.id, limit, offset)
        return Response(
            {
                "decks": [deck_to_dto(d) for d in decks],
                "pagination": {"total": total, "limit": limit, "offset": offset},
            }
        )

    def post(self, request):
        s = CreateDeckSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        deck = deck_service.create_deck(
            request.user.id, s.validated_data["name"], s.validated_data.get("description")
        )
        return Response(
            deck_to_dto(deck_service.deck_detail(request.user.id, deck.id)),
            status=status.HTTP_201_CREATED,
        )


class DeckDetailView(views.APIView):
    def get(self, request, deck_id):
        return Response(deck_to_dto(deck_service.deck_detail(request.user.id, deck_id)))

    def patch(self, request, deck_id):
        s = UpdateDeckSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        deck = deck_service.update_deck(
            request.user.id,
            deck_id,
            name=s.validated_data.get("name"),
            description=s.validated_data.get("description"),
            description_set="description" in s.validated_data,
        )
        return Response(to_dto(deck, DECK_UPDATE_FIELDS))

    def delete(self, request, deck_id):
        deck_service.delete_deck(request.user.id, deck_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DeckCardsView(views.APIView):
    def get(self, request, deck_id):
        limit, offset = pagination(request)
        cards, total = card_service.list_cards(request.user.id, deck_id, limit, offset)
        return Response(
            {
                "cards": [card_to_dto(c) for c in cards],
                "pagination": {"total": total, "limit": limit, "offset": offset},
            }
        )

    def post(self, request, deck_id):
        s = CreateCardSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        card = card_service.create_card(
            request.user.id, deck_id, s.validated_data["question"], s.validated_data["answer"]
        )
        return Response(card_to_dto(card), status=status.HTTP_201_CREATED)


class CardDetailView(views.APIView):
    def patch(self, request, card_id):
        s = UpdateCardSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        card = card_service.update_card(
            request.user.id,
            card_id,
            question=s.validated_data.get("question"),
            answer=s.validated_data.get("answer"),
        )
        return Response(to_dto(card, CARD_UPDATE_FIELDS))

    def delete(self, request, card_id):
        card_service.delete_card(request.user.id, card_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CardIssuesView(views.APIView):
    def get(self, request, card_id):
        reports = issue_service.list_issues(request.user.id, card_id)
        return Response({"issues": [issue_to_dto(r) for r in reports]})

    def post(self, request, card_id):
        s = CreateIssueSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        report = issue_service.report_issue(request.user.id, card_id, s.validated_data["description"])
        return Response(issue_to_dto(report), status=status.HTTP_201_CREATED)


# Study sessions

class StartStudySessionView(views.APIView):
    def post(self, request, deck_id):
        session, due_count = review_service.start_session(request.user.id, deck_id)
        return Response(
            {
                "sessionId": str(session.id),
                "deckId": str(session.deck_id),
                "startedAt": to_iso(session.started_at),
                "dueCardsCount": due_count,
            },
            status=status.HTTP_201_CREATED,
        )


class SessionDueCardsView(views.APIView):
    def get(self, request, session_id):
        qs = DueCardsQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        cards, remaining = review_service.session_due_cards(
            request.user.id, session_id, qs.validated_data["limit"]
        )
        return Response({"cards": [study_card_to_dto(c) for c in cards], "remaining": remaining})


class SubmitReviewView(views.APIView):
    def post(self, request, session_id):
        logger = request_logger(request)

        s = SubmitReviewSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        review, card = review_service.record_review(
            request.user.id,
            session_id,
            data["cardId"],
            data["result"],
            response_ms=data.get("responseDurationMs"),
        )

        body = to_dto(review, REVIEW_FIELDS)
        body["newDueAt"] = to_iso(card.due_at)

        logger.info(
            "review_api_response",
            session_id=str(session_id),
            card_id=str(card.id),
            result=review.result,
            new_box=review.new_box,
            status=status.HTTP_201_CREATED,
        )
        return Response(body, status=status.HTTP_201_CREATED)


class EndStudySessionView(views.APIView):
    def patch(self, request, session_id):
        session, duration = review_service.end_session(request.user.id, session_id)
        body = session_to_dto(session)
        body["durationSeconds"] = duration
        return Response(body)
