"""
Display Controller for the glasses text wall

Paints full-screen text blocks on the glasses:
- Persistent pages (duration 0, replaced by the next render)
- Timed one-shot screens (welcome, help, status, feedback)
"""

import logging
from typing import Any, Awaitable, Dict, Optional, Protocol

from talking_points.config import DisplayConfig

logger = logging.getLogger(__name__)


WELCOME_TEXT = """Talking Points App Ready!

Say 'chat' and a name or topic to get conversation topics.

Say 'help' for instructions."""

HELP_TEXT = """Talking Points App

How to use:
- Say 'chat' followed by a name or topic
- The app will research and provide:
  - Background information
  - Discussion topics
  - Questions to ask
- Long results scroll automatically

Examples:
- "Chat, who is Ada Lovelace"
- "Chat startup funding"

Say 'chat' and a name to start!"""


class MessageSink(Protocol):
    """Outbound channel to the glasses (see GlassesConnection)."""

    def send(self, data: Dict[str, Any]) -> Awaitable[bool]:
        ...


class DisplayController:
    """
    Controls the glasses' main view.

    With no sink attached it runs in mock mode and prints what would be
    shown, like a local simulator.
    """

    VIEW = "main"

    def __init__(
        self,
        sink: Optional[MessageSink] = None,
        config: Optional[DisplayConfig] = None
    ):
        """
        Initialize display controller.

        Args:
            sink: Connection that delivers display messages. If None, uses mock.
            config: Durations for one-shot screens
        """
        self.sink = sink
        self.config = config or DisplayConfig()
        self._mock_mode = sink is None
        self.last_text: Optional[str] = None

    async def render(self, text: str, duration_ms: int = 0) -> bool:
        """
        Paint a full-screen text block.

        Args:
            text: Text to show
            duration_ms: How long to show it (0 = until replaced)

        Returns:
            True if the render was delivered
        """
        self.last_text = text

        if self._mock_mode:
            print(f"[DISPLAY] ({duration_ms}ms)\n{text}\n")
            return True

        delivered = await self.sink.send({
            "type": "display",
            "view": self.VIEW,
            "text": text,
            "durationMs": duration_ms,
        })

        if not delivered:
            logger.warning("Display update was not delivered")
        return delivered

    # Convenience methods for one-shot screens

    async def show_welcome(self):
        """Show the welcome/instructions screen."""
        await self.render(WELCOME_TEXT, self.config.welcome_duration_ms)

    async def show_help(self):
        """Show the help screen."""
        await self.render(HELP_TEXT, self.config.help_duration_ms)

    async def show_researching(self, query: str):
        """Show the status screen while talking points are generated."""
        await self.render(
            f"Researching {query}...\n\nGenerating talking points...",
            self.config.status_duration_ms
        )

    async def show_no_match(self, text: str):
        """Show feedback for an unrecognized utterance."""
        await self.render(
            f"I didn't recognize \"{text}\".\n\n"
            "Say 'chat' and a name or topic, or 'help' for instructions.",
            self.config.feedback_duration_ms
        )
