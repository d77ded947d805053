"""
Talking Points Mode

Per-connection session controller:
- Welcome screen on connect
- "help" shows instructions without touching the live presentation
- "chat <name or topic>" researches talking points in the background
  and hands the pages to the PresentationScheduler

Queries never wait for each other. Every generation is tagged with a
request id; with stale suppression on, only the newest request's result
reaches the display.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from talking_points.api.generator import ContentGenerator, generate_with_fallback
from talking_points.config import AppConfig
from talking_points.core.display import DisplayController
from talking_points.core.scheduler import PresentationScheduler
from talking_points.core.state import SessionMetrics
from talking_points.input.voice import QueryExtractor, TranscriptEvent, VoiceCommand
from talking_points.rendering.paginator import paginate

logger = logging.getLogger(__name__)


class SessionController:
    """Wires transcripts to extraction, generation and presentation."""

    def __init__(
        self,
        display: DisplayController,
        generator: ContentGenerator,
        config: Optional[AppConfig] = None,
        scheduler: Optional[PresentationScheduler] = None,
        extractor: Optional[QueryExtractor] = None
    ):
        """
        Initialize the controller.

        Args:
            display: Display controller for one-shot screens
            generator: Talking points provider
            config: Application config (defaults if None)
            scheduler: Presentation scheduler (built from config if None)
            extractor: Query extractor (built from config if None)
        """
        self.config = config or AppConfig()
        self.display = display
        self.generator = generator
        self.scheduler = scheduler or PresentationScheduler(
            display,
            interval_ms=self.config.presentation.auto_scroll_interval_ms
        )
        self.extractor = extractor or QueryExtractor(
            marker=self.config.voice.marker,
            prefixes=self.config.voice.prefixes
        )
        self.metrics = SessionMetrics()
        self._request_id = 0
        self._pending: Set[asyncio.Task] = set()
        self._running = False

    @property
    def latest_request_id(self) -> int:
        return self._request_id

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def start(self):
        """Begin the session with the welcome screen."""
        self._running = True
        self.metrics = SessionMetrics()
        logger.info("Talking points session started")
        await self.display.show_welcome()

    async def stop(self) -> Dict[str, Any]:
        """
        End the session.

        Cancels outstanding generations and stops auto-scrolling.

        Returns:
            Session summary
        """
        self._running = False

        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self.scheduler.reset()
        self.metrics.page_advances = self.scheduler.advances

        summary = self.metrics.get_summary()
        logger.info(f"Talking points session ended: {summary}")
        return summary

    async def wait_for_pending(self):
        """Wait until every in-flight generation has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # Inbound events

    async def handle_transcription(self, data: Dict[str, Any]):
        """Handle a raw transcription message."""
        await self.handle_transcript(TranscriptEvent.from_message(data))

    async def handle_battery(self, data: Dict[str, Any]):
        """Log glasses battery updates."""
        logger.info(f"Glasses battery: {data}")

    async def handle_transcript(self, event: TranscriptEvent) -> Optional[asyncio.Task]:
        """
        React to one transcript event.

        Only final transcripts act. Returns the background generation task
        when a query was accepted.
        """
        if not event.is_final:
            return None

        self.metrics.transcripts_seen += 1
        result = self.extractor.extract(event.text)

        if result.command == VoiceCommand.HELP:
            self.metrics.help_requests += 1
            await self.display.show_help()
            return None

        if result.command == VoiceCommand.NO_MATCH:
            self.metrics.no_matches += 1
            logger.debug(f"No match for transcript: {event.text!r}")
            if self.config.voice.on_no_match == "feedback":
                await self.display.show_no_match(event.text)
            return None

        return await self._accept_query(result.query)

    # Query processing

    async def _accept_query(self, query: str) -> asyncio.Task:
        self._request_id += 1
        request_id = self._request_id
        self.metrics.queries_accepted += 1

        logger.info(f"Query #{request_id}: {query!r}")
        await self.display.show_researching(query)

        task = asyncio.create_task(self._generate_and_present(request_id, query))
        self._pending.add(task)
        task.add_done_callback(self._on_generation_done)
        return task

    def _on_generation_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logger.error(f"Query processing failed: {error!r}", exc_info=error)

    async def _generate_and_present(self, request_id: int, query: str):
        bundle = await generate_with_fallback(self.generator, query)

        if bundle.is_fallback:
            self.metrics.generation_failures += 1

        if not self._running:
            logger.debug(f"Session stopped, discarding result for query #{request_id}")
            return

        if self.config.presentation.suppress_stale_results and request_id != self._request_id:
            self.metrics.stale_results_dropped += 1
            logger.info(
                f"Dropping stale result for query #{request_id} "
                f"(latest is #{self._request_id})"
            )
            return

        pages = paginate(
            bundle,
            self.config.display.lines_per_screen,
            max_chars=self.config.display.max_chars
        )
        self.metrics.presentations += 1
        await self.scheduler.present(pages)
