"""
Query extraction tests.
Covers help detection, marker handling, prefix stripping and no-match cases.
"""

import pytest

from talking_points.input.voice import (
    QueryExtractor,
    TranscriptEvent,
    VoiceCommand,
)


@pytest.fixture
def extractor():
    return QueryExtractor()


class TestHelp:
    """Help requests win over everything else."""

    @pytest.mark.parametrize("text", [
        "help",
        "HELP me please",
        "chat help",
        "Show me the Instructions",
        "chat, who is Help Desk",
    ])
    def test_help_detected(self, extractor, text):
        assert extractor.extract(text).command == VoiceCommand.HELP

    def test_help_has_no_query(self, extractor):
        assert extractor.extract("help").query is None


class TestQueries:
    """Marker-prefixed utterances become queries."""

    def test_who_is_prefix_stripped(self, extractor):
        result = extractor.extract("chat, who is Ada Lovelace")

        assert result.command == VoiceCommand.QUERY
        assert result.query == "Ada Lovelace"

    def test_trailing_period_stripped(self, extractor):
        result = extractor.extract("Chat artificial intelligence.")

        assert result.command == VoiceCommand.QUERY
        assert result.query == "artificial intelligence"

    def test_repeated_punctuation_stripped(self, extractor):
        assert extractor.extract("chat quantum computing?!").query == "quantum computing"

    def test_casing_of_payload_preserved(self, extractor):
        assert extractor.extract("CHAT Grace Hopper").query == "Grace Hopper"

    def test_text_before_marker_ignored(self, extractor):
        result = extractor.extract("okay so chat, startup funding")
        assert result.query == "startup funding"

    def test_who_is_case_insensitive(self, extractor):
        assert extractor.extract("chat WHO IS Alan Turing.").query == "Alan Turing"

    def test_raw_text_kept(self, extractor):
        text = "chat, who is Ada Lovelace"
        assert extractor.extract(text).raw_text == text

    def test_custom_marker_and_prefixes(self):
        extractor = QueryExtractor(marker="jarvis", prefixes=("tell me about ",))
        result = extractor.extract("Jarvis, tell me about Marie Curie")

        assert result.command == VoiceCommand.QUERY
        assert result.query == "Marie Curie"

    def test_marker_inside_word_skipped(self, extractor):
        result = extractor.extract("I was chatting, chat Ada")

        assert result.command == VoiceCommand.QUERY
        assert result.query == "Ada"


class TestNoMatch:
    """Anything else is NO_MATCH, never an exception."""

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "John Smith",
        "what time is it",
        "tell me about Mike",
        "chatting about the weather",
        "chatbot who is Ada",
    ])
    def test_no_marker(self, extractor, text):
        assert extractor.extract(text).command == VoiceCommand.NO_MATCH

    def test_none_input(self, extractor):
        assert extractor.extract(None).command == VoiceCommand.NO_MATCH

    @pytest.mark.parametrize("text", [
        "chat",
        "chat.",
        "chat,  ",
        "chat, who is ",
        "Chat ...",
    ])
    def test_empty_payload(self, extractor, text):
        assert extractor.extract(text).command == VoiceCommand.NO_MATCH


class TestTranscriptEvent:
    """Transcription message parsing."""

    def test_from_message_camel_case(self):
        event = TranscriptEvent.from_message(
            {"type": "transcription", "text": "chat x", "isFinal": True, "confidence": 0.9}
        )

        assert event.text == "chat x"
        assert event.is_final is True
        assert event.confidence == 0.9

    def test_from_message_defaults(self):
        event = TranscriptEvent.from_message({"type": "transcription"})

        assert event.text == ""
        assert event.is_final is False
        assert event.confidence is None

    def test_from_message_snake_case(self):
        event = TranscriptEvent.from_message({"text": "hi", "is_final": True})
        assert event.is_final is True

    @pytest.mark.parametrize("value", ["false", "False", "no", "", 0, None])
    def test_from_message_not_final(self, value):
        event = TranscriptEvent.from_message({"text": "chat Ada", "isFinal": value})
        assert event.is_final is False

    def test_from_message_string_true(self):
        event = TranscriptEvent.from_message({"text": "chat Ada", "isFinal": "true"})
        assert event.is_final is True
