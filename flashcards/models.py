from .data.models import (  # noqa: F401
    AIGeneratedCard,
    AIGeneration,
    AIGenerationAttempt,
    Card,
    CardIssueReport,
    CardReview,
    Deck,
    StudySession,
)
