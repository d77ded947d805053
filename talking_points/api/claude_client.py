"""
Claude Client for talking point generation.
Alternative provider, selected with TALKING_POINTS_PROVIDER=claude.
"""
import asyncio
import logging
import os
import time
from typing import Optional

import anthropic

from .generator import (
    SYSTEM_PROMPT,
    TalkingPointsBundle,
    GeneratorUnavailableError,
    MalformedResponseError,
    build_prompt,
    parse_talking_points,
)

logger = logging.getLogger(__name__)


class ClaudeTalkingPointsClient:
    """
    Claude client for talking points.

    The Anthropic SDK call is synchronous, so it runs in a worker thread.
    """

    MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 500
    TEMPERATURE = 0.7

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: float = 15.0,
        client: Optional[anthropic.Anthropic] = None
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Claude model name
            timeout_seconds: Hard limit for one generation
            client: Pre-built Anthropic instance (tests)
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.model = model or self.MODEL
        self.timeout_seconds = timeout_seconds
        self.client = client

        if self.client is None and self.api_key:
            self.client = anthropic.Anthropic(api_key=self.api_key)
            logger.info(f"Claude client initialized ({self.model})")
        elif self.client is None:
            logger.warning("No Anthropic API key provided. Set ANTHROPIC_API_KEY env var.")

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
            raise GeneratorUnavailableError("Claude client not available")

        start = time.perf_counter()

        response = await asyncio.wait_for(
            asyncio.to_thread(
                self.client.messages.create,
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(query)}]
            ),
            timeout=self.timeout_seconds
        )

        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Claude answered for {query!r} in {latency_ms:.0f}ms")

        if not response.content:
            raise MalformedResponseError("No response from Claude")

        return parse_talking_points(query, response.content[0].text)
