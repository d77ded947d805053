"""Content providers for talking point generation."""

from .generator import (
    TalkingPointsBundle,
    ContentGenerator,
    GeneratorError,
    GeneratorUnavailableError,
    MalformedResponseError,
    fallback_bundle,
    generate_with_fallback,
)
from .openai_client import OpenAITalkingPointsClient
from .claude_client import ClaudeTalkingPointsClient

__all__ = [
    "TalkingPointsBundle",
    "ContentGenerator",
    "GeneratorError",
    "GeneratorUnavailableError",
    "MalformedResponseError",
    "fallback_bundle",
    "generate_with_fallback",
    "OpenAITalkingPointsClient",
    "ClaudeTalkingPointsClient",
]
