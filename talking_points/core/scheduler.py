"""
Presentation Scheduler

Owns the single presentation on the glasses and auto-scrolls it.

    IDLE    --present(pages)-->  SHOWING   render page 1, arm timer if n > 1
    SHOWING --tick-->            SHOWING   next page (wraps around)
    SHOWING --present(new)-->    SHOWING   cancel timer, start over with new
    SHOWING --reset-->           IDLE      cancel timer, drop session

At most one advance task exists at a time. The old task is cancelled
before the first page is sent; the new one is armed only after that
page is delivered, and only if its session is still the live one.
"""

import asyncio
import logging
from typing import List, Optional

from talking_points.core.display import DisplayController
from talking_points.core.state import PresentationSession, SchedulerState
from talking_points.rendering.paginator import Page

logger = logging.getLogger(__name__)


class PresentationScheduler:
    """Shows paginated content and advances it on a fixed interval."""

    DEFAULT_INTERVAL_MS = 8000

    def __init__(
        self,
        display: DisplayController,
        interval_ms: int = DEFAULT_INTERVAL_MS
    ):
        """
        Initialize the scheduler.

        Args:
            display: Display surface for the pages
            interval_ms: Time each page stays up before advancing
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        self.display = display
        self.interval_ms = interval_ms
        self._session: Optional[PresentationSession] = None
        self._advance_task: Optional[asyncio.Task] = None
        self.advances = 0

    @property
    def state(self) -> SchedulerState:
        if self._session is not None and self._session.active:
            return SchedulerState.SHOWING
        return SchedulerState.IDLE

    @property
    def session(self) -> Optional[PresentationSession]:
        return self._session

    @property
    def timer_armed(self) -> bool:
        return self._advance_task is not None and not self._advance_task.done()

    async def present(self, pages: List[Page]):
        """
        Replace whatever is showing with new pages.

        Renders the first page immediately. Multi-page content starts
        auto-scrolling; single pages stay until replaced.
        """
        self._cancel_timer()
        self._clear()

        if not pages:
            return

        session = PresentationSession(pages=list(pages))
        self._session = session

        logger.info(f"Presenting {session.page_count} page(s)")
        await self._render(session)

        # A newer present() may have taken over while the first page was sent
        if session is not self._session or session.page_count < 2:
            return

        self._cancel_timer()
        self._advance_task = asyncio.create_task(self._advance_loop(session))

    async def tick(self):
        """Advance the live session by one page."""
        session = self._session
        if session is None or not session.active:
            return

        session.advance()
        self.advances += 1
        await self._render(session)

    def reset(self):
        """Stop auto-scrolling and drop the live session."""
        self._cancel_timer()
        self._clear()
        logger.debug("Scheduler reset")

    async def _advance_loop(self, session: PresentationSession):
        """Background loop: advance every interval until cancelled."""
        interval = self.interval_ms / 1000

        while session is self._session and session.active:
            await asyncio.sleep(interval)
            if session is not self._session:
                break
            await self.tick()

    async def _render(self, session: PresentationSession):
        page = session.current_page
        logger.debug(f"Rendering page {page.number}/{page.total}")
        await self.display.render(page.text, duration_ms=0)

    def _cancel_timer(self):
        task = self._advance_task
        self._advance_task = None

        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _clear(self):
        if self._session is not None:
            self._session.active = False
        self._session = None
