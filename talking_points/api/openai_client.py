"""
OpenAI Client for talking point generation.
Default provider: gpt-3.5-turbo with a JSON response format.
"""
import asyncio
import logging
import os
import time
from typing import Optional

from openai import AsyncOpenAI

from .generator import (
    SYSTEM_PROMPT,
    TalkingPointsBundle,
    GeneratorUnavailableError,
    build_prompt,
    parse_talking_points,
)

logger = logging.getLogger(__name__)


class OpenAITalkingPointsClient:
    """
    OpenAI chat completions client.

    Raises on any failure; callers wrap it with generate_with_fallback().
    """

    MODEL = "gpt-3.5-turbo"
    MAX_TOKENS = 500
    TEMPERATURE = 0.7

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: float = 15.0,
        client: Optional[AsyncOpenAI] = None
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            model: Chat model name
            timeout_seconds: Hard limit for one generation
            client: Pre-built AsyncOpenAI instance (tests)
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or self.MODEL
        self.timeout_seconds = timeout_seconds
        self.client = client

        if self.client is None and self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key)
            logger.info(f"OpenAI client initialized ({self.model})")
        elif self.client is None:
            logger.warning("No OpenAI API key provided. Set OPENAI_API_KEY env var.")

    @property
    def is_available(self) -> bool:
        """Check if client is ready to use."""
        return self.client is not None

    async def generate(self, query: str) -> TalkingPointsBundle:
        """
        Generate talking points for a query.

        Raises:
            GeneratorUnavailableError: No API key configured
            MalformedResponseError: Empty or unusable answer
            asyncio.TimeoutError: Model took longer than timeout_seconds
        """
        if not self.is_available:
            raise GeneratorUnavailableError("OpenAI client not available")

        start = time.perf_counter()

        completion = await asyncio.wait_for(
            self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(query)},
                ],
                response_format={"type": "json_object"},
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
            ),
            timeout=self.timeout_seconds
        )

        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(f"OpenAI answered for {query!r} in {latency_ms:.0f}ms")

        content = completion.choices[0].message.content if completion.choices else None
        return parse_talking_points(query, content)
