"""
Shared test fixtures.

Provides:
- Mock glasses sink that records display messages
- Sample talking points
- Controllable content generator (bypasses OpenAI/Claude)
"""

import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from talking_points.api.generator import TalkingPointsBundle
from talking_points.config import AppConfig
from talking_points.core.display import DisplayController


@pytest.fixture
def mock_sink():
    """Create a mock connection that records sent messages."""
    sink = AsyncMock()
    sink.sent_messages: List[Dict[str, Any]] = []

    async def record_send(data: dict):
        sink.sent_messages.append(data)
        return True

    sink.send = AsyncMock(side_effect=record_send)
    return sink


@pytest.fixture
def display(mock_sink) -> DisplayController:
    """DisplayController wired to the recording sink."""
    return DisplayController(mock_sink)


@pytest.fixture
def sample_bundle() -> TalkingPointsBundle:
    """Talking points for a well-known person."""
    return TalkingPointsBundle(
        query="Ada Lovelace",
        background="English mathematician, first published computer program.",
        topics=(
            "The Analytical Engine",
            "Poetical science",
            "Women in early computing",
        ),
        questions=(
            "What drew you to mathematics?",
            "How do you see machines and creativity?",
            "Which collaborators shaped your work?",
            "What would you build today?",
        ),
    )


def make_bundle(query: str) -> TalkingPointsBundle:
    return TalkingPointsBundle(
        query=query,
        background=f"Background on {query}",
        topics=("One", "Two", "Three"),
        questions=("First?", "Second?", "Third?"),
    )


class ControlledGenerator:
    """
    Generator whose calls finish only when the test releases them.

    release(query) completes the pending call for that query;
    fail(query) makes it raise instead.
    """

    def __init__(self):
        self.calls: List[str] = []
        self._gates: Dict[str, asyncio.Event] = {}
        self._errors: Dict[str, Exception] = {}

    def _gate(self, query: str) -> asyncio.Event:
        return self._gates.setdefault(query, asyncio.Event())

    async def generate(self, query: str) -> TalkingPointsBundle:
        self.calls.append(query)
        await self._gate(query).wait()

        error: Optional[Exception] = self._errors.get(query)
        if error is not None:
            raise error
        return make_bundle(query)

    def release(self, query: str):
        self._gate(query).set()

    def fail(self, query: str, error: Exception):
        self._errors[query] = error
        self._gate(query).set()


@pytest.fixture
def controlled_generator() -> ControlledGenerator:
    return ControlledGenerator()


@pytest.fixture
def app_config() -> AppConfig:
    """Config with a long scroll interval so timers never fire on their own."""
    config = AppConfig()
    config.presentation.auto_scroll_interval_ms = 60_000
    config.display.lines_per_screen = 6
    return config
