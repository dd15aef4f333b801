from django.urls import path

from .views import (
    AcceptGeneratedCardsView,
    CardDetailView,
    CardIssuesView,
    DeckCardsView,
    DeckDetailView,
    DeckListView,
    EndStudySessionView,
    GenerateCardsView,
    GeneratedCardDetailView,
    GeneratedCardsView,
    QuotaView,
    SessionDueCardsView,
    StartStudySessionView,
    SubmitReviewView,
)

urlpatterns = [
    path("ai/quota", QuotaView.as_view(), name="ai-quota"),
    path("ai/generate", GenerateCardsView.as_view(), name="ai-generate"),
    path("ai/generations/<uuid:generation_id>/cards", GeneratedCardsView.as_view(), name="ai-generation-cards"),
    path("ai/generations/<uuid:generation_id>/accept", AcceptGeneratedCardsView.as_view(), name="ai-generation-accept"),
    path("ai/generated-cards/<uuid:card_id>", GeneratedCardDetailView.as_view(), name="ai-generated-card"),
    path("decks", DeckListView.as_view(), name="decks"),
    path("decks/<uuid:deck_id>", DeckDetailView.as_view(), name="deck-detail"),
    path("decks/<uuid:deck_id>/cards", DeckCardsView.as_view(), name="deck-cards"),
    path("decks/<uuid:deck_id>/study-sessions", StartStudySessionView.as_view(), name="study-sessions"),
    path("cards/<uuid:card_id>", CardDetailView.as_view(), name="card-detail"),
    path("cards/<uuid:card_id>/issues", CardIssuesView.as_view(), name="card-issues"),
    path("study-sessions/<uuid:session_id>/cards", SessionDueCardsView.as_view(), name="session-cards"),
    path("study-sessions/<uuid:session_id>/reviews", SubmitReviewView.as_view(), name="session-reviews"),
    path("study-sessions/<uuid:session_id>/end", EndStudySessionView.as_view(), name="session-end"),
]
