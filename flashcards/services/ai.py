"""AI card generators.

``get_card_generator()`` returns the provider selected by the ``AI_PROVIDER``
setting: ``mock`` builds cards from the prompt itself and needs no network,
``openai`` asks a chat model for question/answer pairs.
"""

import json
import re
from dataclasses import dataclass, field

from django.conf import settings
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError
import structlog

from ..config import ANSWER_MAX_LENGTH, QUESTION_MAX_LENGTH
from ..errors import AIServiceError, ConfigurationError

logger = structlog.get_logger()

MAX_CARDS = 10

SYSTEM_PROMPT = (
    "You turn study material into flashcards. Each card tests one fact, "
    "the question must stand alone without the source text and the answer "
    "must be short and precise. Return a JSON object of the form "
    '{"cards": [{"question": "...", "answer": "..."}]} with at most '
    f"{MAX_CARDS} cards."
)


class GeneratedCard(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(min_length=1, max_length=QUESTION_MAX_LENGTH)
    answer: str = Field(min_length=1, max_length=ANSWER_MAX_LENGTH)


class CardBatch(BaseModel):
    cards: list[GeneratedCard] = Field(min_length=1, max_length=MAX_CARDS)


@dataclass
class GenerationResult:
    model: str
    cards: list[GeneratedCard]
    raw_response: dict = field(default_factory=dict)


class MockCardGenerator:
    """Builds one card per sentence of the prompt."""

    model = "mock-generator"

    def generate(self, prompt: str) -> GenerationResult:
        sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", prompt) if s.strip()]
        cards = []
        for i, sentence in enumerate(sentences[:MAX_CARDS], start=1):
            words = sentence.split()
            topic = " ".join(words[:6])
            cards.append(
                GeneratedCard(
                    question=f"Fact {i}: what does the material say about \"{topic}\"?"[:QUESTION_MAX_LENGTH],
                    answer=sentence[:ANSWER_MAX_LENGTH],
                )
            )
        return GenerationResult(
            model=self.model,
            cards=cards,
            raw_response={"cards": [c.model_dump() for c in cards]},
        )


class OpenAICardGenerator:
    def __init__(self, api_key: str, model: str, timeout: float):
        self.model = model
        self._client = OpenAI(api_key=api_key, timeout=timeout)

    def generate(self, prompt: str) -> GenerationResult:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as e:
            logger.error("openai_request_failed", model=self.model, error=str(e))
            raise AIServiceError("AI provider request failed") from e

        content = resp.choices[0].message.content or ""
        try:
            batch = CardBatch.model_validate(json.loads(content))
        except (ValueError, ValidationError) as e:
            logger.error("openai_response_invalid", model=self.model, error=str(e))
            raise AIServiceError("AI provider returned malformed cards") from e

        usage = resp.usage
        logger.info("openai_cards_generated",
            model=self.model,
            card_count=len(batch.cards),
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
        return GenerationResult(model=self.model, cards=batch.cards, raw_response=resp.model_dump())


def get_card_generator():
    provider = settings.AI_PROVIDER
    if provider == "mock":
        return MockCardGenerator()
    if provider == "openai":
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is required for AI_PROVIDER=openai")
        return OpenAICardGenerator(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            timeout=settings.OPENAI_TIMEOUT,
        )
    raise ConfigurationError(f"Unknown AI_PROVIDER: {provider}")
