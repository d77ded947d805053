"""
Session State

State shared across one glasses connection:
- Scheduler state and the live presentation session
- Per-connection metrics
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from talking_points.rendering.paginator import Page


class SchedulerState(Enum):
    """Presentation scheduler states."""
    IDLE = "idle"
    SHOWING = "showing"


@dataclass
class PresentationSession:
    """The pages currently on screen and which one is showing."""
    pages: List[Page]
    current_index: int = 0
    active: bool = True

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Optional[Page]:
        if not self.pages:
            return None
        return self.pages[self.current_index]

    def advance(self) -> Page:
        """Move to the next page, wrapping around to the first."""
        self.current_index = (self.current_index + 1) % len(self.pages)
        return self.pages[self.current_index]


@dataclass
class SessionMetrics:
    """Counters for the current connection."""
    started_at: datetime = field(default_factory=datetime.utcnow)
    transcripts_seen: int = 0
    queries_accepted: int = 0
    help_requests: int = 0
    no_matches: int = 0
    generation_failures: int = 0
    stale_results_dropped: int = 0
    presentations: int = 0
    page_advances: int = 0

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the session."""
        duration = (datetime.utcnow() - self.started_at).total_seconds()

        return {
            "duration_seconds": round(duration, 1),
            "transcripts_seen": self.transcripts_seen,
            "queries_accepted": self.queries_accepted,
            "help_requests": self.help_requests,
            "no_matches": self.no_matches,
            "generation_failures": self.generation_failures,
            "stale_results_dropped": self.stale_results_dropped,
            "presentations": self.presentations,
            "page_advances": self.page_advances,
        }
