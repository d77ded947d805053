"""
Voice Query Extraction

Turns final speech-to-text transcripts into talking-point commands.
Supports:
- Help requests ("help", "instructions")
- Marker-prefixed queries ("chat, who is Ada Lovelace")
"""

import logging
import re
from typing import Optional, Sequence, Dict, Any
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class VoiceCommand(Enum):
    """Recognized voice commands."""
    HELP = "help"
    QUERY = "query"
    NO_MATCH = "no_match"


# Words that request the help screen anywhere in the utterance
HELP_KEYWORDS = ("help", "instructions")

DEFAULT_MARKER = "chat"
DEFAULT_PREFIXES = ("who is ",)

# Trailing sentence punctuation left behind by the recognizer
_TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")


@dataclass(frozen=True)
class TranscriptEvent:
    """One delivery of recognized speech, partial or final."""
    text: str
    is_final: bool = False
    confidence: Optional[float] = None

    @classmethod
    def from_message(cls, data: Dict[str, Any]) -> "TranscriptEvent":
        """Build an event from a transcription message."""
        is_final = data.get("isFinal", data.get("is_final", False))
        if isinstance(is_final, str):
            is_final = is_final.strip().lower() == "true"
        confidence = data.get("confidence")

        return cls(
            text=str(data.get("text") or ""),
            is_final=is_final is True,
            confidence=float(confidence) if confidence is not None else None,
        )


@dataclass(frozen=True)
class VoiceResult:
    """Result of query extraction."""
    command: VoiceCommand
    raw_text: str
    query: Optional[str] = None


class QueryExtractor:
    """
    Extracts a command from a raw transcript.

    The query payload is cut from the original text rather than the
    normalized one so the speaker's casing survives ("Ada Lovelace").
    The marker only counts as a whole word, so "chatting" does not
    introduce a query. Never raises: anything unrecognized is NO_MATCH.
    """

    def __init__(
        self,
        marker: str = DEFAULT_MARKER,
        prefixes: Sequence[str] = DEFAULT_PREFIXES
    ):
        """
        Initialize the extractor.

        Args:
            marker: Token that introduces a query ("chat")
            prefixes: Leading phrases stripped from the query payload
        """
        self.marker = marker.lower()
        self.prefixes = tuple(p.lower() for p in prefixes)
        self._marker_pattern = re.compile(
            r"(?<!\w)" + re.escape(marker) + r"(?!\w)[,\s]*",
            re.IGNORECASE
        )

    def extract(self, text: Optional[str]) -> VoiceResult:
        """
        Parse a transcript into a VoiceResult.

        Args:
            text: Transcript text as delivered by the recognizer

        Returns:
            VoiceResult tagged HELP, QUERY or NO_MATCH
        """
        raw = text or ""
        normalized = raw.lower().strip()

        if any(keyword in normalized for keyword in HELP_KEYWORDS):
            return VoiceResult(command=VoiceCommand.HELP, raw_text=raw)

        match = self._marker_pattern.search(raw)
        if match is None:
            return self._no_match(raw)

        query = _TRAILING_PUNCTUATION.sub("", raw[match.end():].strip()).strip()

        # Trailing space lets a bare "who is" count as the prefix
        for prefix in self.prefixes:
            if (query.lower() + " ").startswith(prefix):
                query = query[len(prefix):].strip()
                break

        if not query:
            return self._no_match(raw)

        logger.debug(f"Extracted query: {query!r}")
        return VoiceResult(command=VoiceCommand.QUERY, raw_text=raw, query=query)

    def _no_match(self, raw: str) -> VoiceResult:
        return VoiceResult(command=VoiceCommand.NO_MATCH, raw_text=raw)
