"""Input handlers for voice transcripts."""

from .voice import QueryExtractor, TranscriptEvent, VoiceCommand, VoiceResult

__all__ = [
    "QueryExtractor",
    "TranscriptEvent",
    "VoiceCommand",
    "VoiceResult",
]
