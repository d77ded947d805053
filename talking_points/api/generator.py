"""
Talking Points Generation

Shared pieces for every content provider:
- TalkingPointsBundle (the immutable content unit)
- Prompt text and the JSON schema the model must return
- Deterministic fallback when a provider fails
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import List, Protocol, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


MIN_ITEMS = 3
MAX_ITEMS = 5

FALLBACK_TOPICS = (
    "Ask about their interests and hobbies",
    "Discuss current events or shared experiences",
    "Talk about work or professional background",
)

FALLBACK_QUESTIONS = (
    "What brings you here today?",
    "What are you passionate about?",
    "What's been keeping you busy lately?",
)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates conversation talking points. "
    "Always respond with valid JSON."
)

USER_PROMPT_TEMPLATE = """Generate talking points for a conversation about "{query}".

Please provide:
1. A brief background summary (if this is a known public figure or topic, or general conversation starters if not)
2. 3-5 interesting conversation topics
3. 3-5 thoughtful questions to ask

Format your response as JSON with the following structure:
{{
  "background": "Brief background or general info",
  "topics": ["topic1", "topic2", "topic3"],
  "questions": ["question1", "question2", "question3"]
}}

Keep responses concise and conversational. If the subject is not recognizable, focus on general conversation starters and getting-to-know-you topics."""


class GeneratorError(Exception):
    """Content generation failed."""
    pass


class GeneratorUnavailableError(GeneratorError):
    """Provider is not configured (missing API key)."""
    pass


class MalformedResponseError(GeneratorError):
    """Provider answered, but not with usable talking points."""
    pass


@dataclass(frozen=True)
class TalkingPointsBundle:
    """Background, topics and questions produced for one query."""
    query: str
    background: str
    topics: Tuple[str, ...]
    questions: Tuple[str, ...]
    is_fallback: bool = False


class ContentGenerator(Protocol):
    """Anything that can turn a query into talking points."""

    async def generate(self, query: str) -> TalkingPointsBundle:
        ...


class TalkingPointsPayload(BaseModel):
    """Schema for the JSON body returned by a provider."""

    background: str = Field(..., min_length=1)
    topics: List[str] = Field(..., min_length=MIN_ITEMS)
    questions: List[str] = Field(..., min_length=MIN_ITEMS)

    @field_validator("background")
    @classmethod
    def _strip_background(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("background is blank")
        return value

    @field_validator("topics", "questions")
    @classmethod
    def _clean_items(cls, items: List[str]) -> List[str]:
        cleaned = [item.strip() for item in items if item and item.strip()]
        if len(cleaned) < MIN_ITEMS:
            raise ValueError(f"expected at least {MIN_ITEMS} items")
        return cleaned[:MAX_ITEMS]


def build_prompt(query: str) -> str:
    """Build the user prompt for a query."""
    return USER_PROMPT_TEMPLATE.format(query=query)


def parse_talking_points(query: str, content: str) -> TalkingPointsBundle:
    """
    Parse a provider's JSON answer into a bundle.

    Tolerates a fenced ```json block around the body.

    Raises:
        MalformedResponseError: Empty, non-JSON or schema-violating content
    """
    if not content or not content.strip():
        raise MalformedResponseError("No content in response")

    body = content.strip()
    if body.startswith("```"):
        body = body.strip("`")
        if body.lower().startswith("json"):
            body = body[4:]

    try:
        payload = TalkingPointsPayload.model_validate(json.loads(body))
    except (json.JSONDecodeError, ValidationError) as e:
        raise MalformedResponseError(f"Unusable talking points: {e}") from e

    return TalkingPointsBundle(
        query=query,
        background=payload.background,
        topics=tuple(payload.topics),
        questions=tuple(payload.questions),
    )


def fallback_bundle(query: str) -> TalkingPointsBundle:
    """Deterministic bundle used whenever generation fails."""
    return TalkingPointsBundle(
        query=query,
        background=f"General conversation about: {query}",
        topics=FALLBACK_TOPICS,
        questions=FALLBACK_QUESTIONS,
        is_fallback=True,
    )


async def generate_with_fallback(
    generator: ContentGenerator,
    query: str
) -> TalkingPointsBundle:
    """
    Generate talking points, substituting the fallback on any failure.

    Never raises (cancellation excepted).
    """
    try:
        bundle = await generator.generate(query)
        if not isinstance(bundle, TalkingPointsBundle):
            raise MalformedResponseError(f"Unexpected result type: {type(bundle).__name__}")
        return bundle

    except asyncio.CancelledError:
        raise

    except GeneratorUnavailableError as e:
        logger.warning(f"Generator unavailable, using fallback: {e}")

    except asyncio.TimeoutError:
        logger.warning(f"Generation timed out for {query!r}, using fallback")

    except Exception as e:
        logger.error(f"Error generating talking points for {query!r}: {e}")

    return fallback_bundle(query)
