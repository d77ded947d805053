"""
Talking Points for AR Glasses - Main Entry Point

Listens to the wearer's speech and shows researched talking points for
whoever (or whatever) they ask about.
"""

import asyncio
import logging
import sys
from typing import Optional

from talking_points.api.generator import ContentGenerator
from talking_points.api.claude_client import ClaudeTalkingPointsClient
from talking_points.api.openai_client import OpenAITalkingPointsClient
from talking_points.config import AppConfig, ConfigError, GeneratorConfig, load_config
from talking_points.core.connection import GlassesConnection
from talking_points.core.display import DisplayController
from talking_points.input.voice import TranscriptEvent
from talking_points.modes.talking_points import SessionController

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_generator(config: GeneratorConfig) -> ContentGenerator:
    """Build the configured talking points provider."""
    if config.provider == "claude":
        return ClaudeTalkingPointsClient(
            api_key=config.anthropic_api_key,
            model=config.model,
            timeout_seconds=config.timeout_seconds
        )

    return OpenAITalkingPointsClient(
        api_key=config.openai_api_key,
        model=config.model,
        timeout_seconds=config.timeout_seconds
    )


class TalkingPointsApp:
    """
    Main application.

    Manages:
    - Connection to the glasses relay (or mock mode on stdin)
    - The per-connection SessionController
    - Clean shutdown
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.connection: Optional[GlassesConnection] = None
        self.display: Optional[DisplayController] = None
        self.controller: Optional[SessionController] = None

    async def setup(self) -> bool:
        """
        Set up the application.

        Returns:
            True if setup succeeded
        """
        logger.info("Setting up talking points application...")

        if self.config.connection.ws_url:
            self.connection = GlassesConnection(self.config.connection)
            if not await self.connection.connect():
                return False
        else:
            logger.warning("No glasses relay configured. Using mock mode (stdin).")

        self.display = DisplayController(self.connection, self.config.display)
        self.controller = SessionController(
            display=self.display,
            generator=create_generator(self.config.generator),
            config=self.config
        )

        if self.connection:
            self.connection.set_handler("transcription", self.controller.handle_transcription)
            self.connection.set_handler("battery", self.controller.handle_battery)

        return True

    async def run(self) -> int:
        """Run until the connection closes. Returns the exit code."""
        if not await self.setup():
            logger.error("Setup failed")
            return 1

        try:
            await self.controller.start()

            if self.connection:
                await self.connection.wait_closed()
            else:
                await self._run_mock()

        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            await self.shutdown()

        return 0

    async def _run_mock(self):
        """Read one final transcript per stdin line until EOF."""
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            await self.controller.handle_transcript(
                TranscriptEvent(text=line.strip(), is_final=True)
            )

        await self.controller.wait_for_pending()

    async def shutdown(self):
        """Clean up and shut down."""
        logger.info("Shutting down...")

        if self.controller:
            await self.controller.stop()

        if self.connection:
            await self.connection.disconnect()

        logger.info("Goodbye!")


async def main(argv=None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Talking points for AR glasses")
    parser.add_argument(
        "--ws-url",
        default=None,
        help="Glasses relay WebSocket URL (omit for mock mode)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if args.ws_url:
        config.connection.ws_url = args.ws_url

    app = TalkingPointsApp(config)
    return await app.run()


def cli():
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
