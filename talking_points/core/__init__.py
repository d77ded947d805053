"""Core components for the talking points client."""

from .display import DisplayController
from .connection import GlassesConnection
from .scheduler import PresentationScheduler
from .state import SchedulerState, PresentationSession, SessionMetrics

__all__ = [
    "DisplayController",
    "GlassesConnection",
    "PresentationScheduler",
    "SchedulerState",
    "PresentationSession",
    "SessionMetrics",
]
