"""
Session controller tests.

Tests:
1. Welcome, help and no-match handling
2. Query flow: status screen, background generation, presentation
3. Concurrent queries and stale result suppression
4. Teardown
"""

import asyncio

import pytest

from talking_points.api.generator import FALLBACK_QUESTIONS, FALLBACK_TOPICS
from talking_points.core.display import HELP_TEXT, WELCOME_TEXT
from talking_points.core.state import SchedulerState
from talking_points.input.voice import TranscriptEvent
from talking_points.modes.talking_points import SessionController


pytestmark = pytest.mark.asyncio


def final(text: str) -> TranscriptEvent:
    return TranscriptEvent(text=text, is_final=True)


def texts(sink):
    return [m["text"] for m in sink.sent_messages]


@pytest.fixture
def controller(display, controlled_generator, app_config):
    return SessionController(display, controlled_generator, config=app_config)


class TestScreens:
    """One-shot screens that bypass the scheduler."""

    async def test_start_shows_welcome(self, controller, mock_sink):
        await controller.start()

        assert texts(mock_sink) == [WELCOME_TEXT]
        assert mock_sink.sent_messages[0]["durationMs"] == 5000
        assert controller.scheduler.state == SchedulerState.IDLE

    async def test_help(self, controller, mock_sink):
        await controller.start()
        await controller.handle_transcript(final("Help me"))

        assert texts(mock_sink)[-1] == HELP_TEXT
        assert mock_sink.sent_messages[-1]["durationMs"] == 8000
        assert controller.metrics.help_requests == 1

    async def test_help_leaves_presentation_alone(
        self, controller, controlled_generator, mock_sink
    ):
        await controller.start()
        task = await controller.handle_transcript(final("chat Ada"))
        controlled_generator.release("Ada")
        await task
        session = controller.scheduler.session

        await controller.handle_transcript(final("instructions"))

        assert controller.scheduler.session is session
        assert controller.scheduler.state == SchedulerState.SHOWING
        await controller.stop()

    async def test_no_match_silent_by_default(self, controller, mock_sink):
        await controller.start()
        await controller.handle_transcript(final("what a nice day"))

        assert texts(mock_sink) == [WELCOME_TEXT]
        assert controller.metrics.no_matches == 1

    async def test_no_match_feedback_policy(
        self, display, controlled_generator, app_config, mock_sink
    ):
        app_config.voice.on_no_match = "feedback"
        controller = SessionController(display, controlled_generator, config=app_config)

        await controller.start()
        await controller.handle_transcript(final("John Smith"))

        assert len(mock_sink.sent_messages) == 2
        assert "John Smith" in texts(mock_sink)[-1]
        assert mock_sink.sent_messages[-1]["durationMs"] == 3000

    async def test_partial_transcripts_ignored(self, controller, mock_sink):
        await controller.start()
        result = await controller.handle_transcript(
            TranscriptEvent(text="chat Ada", is_final=False)
        )

        assert result is None
        assert texts(mock_sink) == [WELCOME_TEXT]
        assert controller.metrics.transcripts_seen == 0

    async def test_transcription_message(self, controller, controlled_generator, mock_sink):
        await controller.start()
        await controller.handle_transcription(
            {"type": "transcription", "text": "chat, who is Ada Lovelace", "isFinal": True}
        )

        assert controlled_generator.calls == []  # task not started yet
        await asyncio.sleep(0)
        assert controlled_generator.calls == ["Ada Lovelace"]
        await controller.stop()


class TestQueryFlow:
    """Accepted queries end up on the scheduler."""

    async def test_status_then_presentation(self, controller, controlled_generator, mock_sink):
        await controller.start()

        task = await controller.handle_transcript(final("chat, who is Ada Lovelace"))

        assert texts(mock_sink)[-1].startswith("Researching Ada Lovelace...")
        assert mock_sink.sent_messages[-1]["durationMs"] == 3000

        controlled_generator.release("Ada Lovelace")
        await task

        assert controller.scheduler.state == SchedulerState.SHOWING
        first_page = texts(mock_sink)[-1]
        assert first_page.startswith("Talking with: Ada Lovelace")
        assert mock_sink.sent_messages[-1]["durationMs"] == 0
        assert controller.metrics.presentations == 1

        await controller.stop()

    async def test_generation_failure_uses_fallback(
        self, controller, controlled_generator, mock_sink
    ):
        await controller.start()
        task = await controller.handle_transcript(final("chat startup funding"))

        controlled_generator.fail("startup funding", RuntimeError("model down"))
        await task

        session = controller.scheduler.session
        lines = [line for page in session.pages for line in page.lines]
        assert "General conversation about: startup funding" in lines
        for i, topic in enumerate(FALLBACK_TOPICS, 1):
            assert f"{i}. {topic}" in lines
        for i, question in enumerate(FALLBACK_QUESTIONS, 1):
            assert f"{i}. {question}" in lines
        assert session.page_count > 1
        assert controller.scheduler.timer_armed
        assert controller.metrics.generation_failures == 1

        await controller.stop()

    async def test_pages_follow_lines_per_screen(
        self, display, controlled_generator, app_config
    ):
        app_config.display.lines_per_screen = 100
        controller = SessionController(display, controlled_generator, config=app_config)

        await controller.start()
        task = await controller.handle_transcript(final("chat Ada"))
        controlled_generator.release("Ada")
        await task

        assert controller.scheduler.session.page_count == 1
        assert not controller.scheduler.timer_armed


class TestConcurrentQueries:
    """Queries never block each other; stale results are dropped."""

    async def test_second_query_not_blocked(self, controller, controlled_generator):
        await controller.start()

        await controller.handle_transcript(final("chat Ada"))
        await controller.handle_transcript(final("chat Grace"))
        await asyncio.sleep(0)

        assert controlled_generator.calls == ["Ada", "Grace"]
        assert controller.pending_count == 2
        assert controller.latest_request_id == 2

        await controller.stop()

    async def test_stale_completion_suppressed(self, controller, controlled_generator):
        await controller.start()
        slow = await controller.handle_transcript(final("chat Ada"))
        fast = await controller.handle_transcript(final("chat Grace"))

        controlled_generator.release("Grace")
        await fast
        controlled_generator.release("Ada")
        await slow

        pages = controller.scheduler.session.pages
        assert pages[0].lines[0] == "Talking with: Grace"
        assert controller.metrics.stale_results_dropped == 1
        assert controller.metrics.presentations == 1

        await controller.stop()

    async def test_older_result_finishing_first_is_dropped(
        self, controller, controlled_generator, mock_sink
    ):
        await controller.start()
        first = await controller.handle_transcript(final("chat Ada"))
        second = await controller.handle_transcript(final("chat Grace"))

        controlled_generator.release("Ada")
        await first

        assert controller.scheduler.state == SchedulerState.IDLE
        assert texts(mock_sink)[-1].startswith("Researching Grace")

        controlled_generator.release("Grace")
        await second
        assert controller.scheduler.session.pages[0].lines[0] == "Talking with: Grace"

        await controller.stop()

    async def test_last_completed_wins_without_suppression(
        self, display, controlled_generator, app_config
    ):
        app_config.presentation.suppress_stale_results = False
        controller = SessionController(display, controlled_generator, config=app_config)

        await controller.start()
        slow = await controller.handle_transcript(final("chat Ada"))
        fast = await controller.handle_transcript(final("chat Grace"))

        controlled_generator.release("Grace")
        await fast
        controlled_generator.release("Ada")
        await slow

        assert controller.scheduler.session.pages[0].lines[0] == "Talking with: Ada"
        assert controller.metrics.presentations == 2
        assert controller.scheduler.timer_armed

        await controller.stop()


class TestTeardown:
    """stop() cancels work and returns a summary."""

    async def test_stop_cancels_pending_and_resets(self, controller, controlled_generator):
        await controller.start()
        task = await controller.handle_transcript(final("chat Ada"))

        summary = await controller.stop()

        assert task.cancelled()
        assert controller.pending_count == 0
        assert controller.scheduler.state == SchedulerState.IDLE
        assert summary["queries_accepted"] == 1
        assert summary["presentations"] == 0

    async def test_battery_is_logged_only(self, controller, mock_sink, caplog):
        await controller.start()

        with caplog.at_level("INFO"):
            await controller.handle_battery({"type": "battery", "level": 80})

        assert texts(mock_sink) == [WELCOME_TEXT]
        assert "Glasses battery" in caplog.text

    async def test_presentation_error_is_logged(
        self, controller, controlled_generator, mock_sink, caplog
    ):
        await controller.start()
        await controller.handle_transcript(final("chat Ada"))

        mock_sink.send.side_effect = RuntimeError("relay gone")
        controlled_generator.release("Ada")

        with caplog.at_level("ERROR"):
            await controller.wait_for_pending()

        assert controller.pending_count == 0
        assert "Query processing failed" in caplog.text
        assert "relay gone" in caplog.text

        await controller.stop()
