"""
Glasses Connection

WebSocket link to the glasses relay. The relay pushes "transcription" and
"battery" events as JSON objects; display updates go back the same way.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets

from talking_points.config import ConnectionConfig

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class GlassesConnection:
    """One relay session: connect, route events by "type", send displays."""

    def __init__(self, config: Optional[ConnectionConfig] = None):
        self.config = config or ConnectionConfig()
        self._ws = None
        self._handlers: Dict[str, EventHandler] = {}
        self._reader: Optional[asyncio.Task] = None
        self._open = False

    @property
    def is_connected(self) -> bool:
        return self._open and self._ws is not None

    def set_handler(self, event_type: str, handler: EventHandler):
        """Route relay events of the given type to handler."""
        self._handlers[event_type] = handler

    async def connect(self, url: Optional[str] = None) -> bool:
        """
        Open the relay socket, retrying with a growing delay.

        Args:
            url: Relay URL (defaults to config.ws_url)

        Returns:
            True once the socket is open and the reader is running
        """
        url = url or self.config.ws_url
        if not url:
            logger.error("No relay URL configured")
            return False

        attempts = self.config.reconnect_attempts
        for attempt in range(1, attempts + 1):
            try:
                self._ws = await websockets.connect(
                    url,
                    ping_interval=self.config.ping_interval_seconds,
                    ping_timeout=self.config.ping_timeout_seconds
                )
            except (OSError, websockets.WebSocketException) as e:
                logger.warning(f"Relay connect attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    await asyncio.sleep(self.config.reconnect_delay_seconds * attempt)
                continue

            logger.info(f"Connected to glasses relay at {url}")
            self._open = True
            self._reader = asyncio.create_task(self._read_events())
            return True

        logger.error(f"Giving up on relay {url}")
        return False

    async def disconnect(self):
        """Stop reading and close the socket."""
        self._open = False
        if self._reader is not None:
            self._reader.cancel()
            await self.wait_closed()
            self._reader = None

        if self._ws is not None:
            await self._ws.close()
            self._ws = None

        logger.info("Relay connection closed")

    async def wait_closed(self):
        """Return when the reader stops, normally because the relay hung up."""
        if self._reader is None:
            return
        try:
            await self._reader
        except asyncio.CancelledError:
            pass

    async def send(self, data: Dict[str, Any]) -> bool:
        """Send one JSON message. Returns False if it could not go out."""
        if not self.is_connected:
            logger.warning(f"Relay not connected, dropping {data.get('type')} message")
            return False

        try:
            await self._ws.send(json.dumps(data))
        except websockets.WebSocketException as e:
            logger.error(f"Relay send failed: {e}")
            return False
        return True

    async def dispatch(self, data: Dict[str, Any]):
        """Hand one event to the handler registered for its type."""
        event_type = data.get("type")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug(f"No handler for relay event {event_type!r}")
            return
        await handler(data)

    async def _read_events(self):
        try:
            while True:
                await self._read_one()
        except websockets.ConnectionClosed:
            logger.info("Glasses relay hung up")
        finally:
            self._open = False

    async def _read_one(self):
        raw = await self._ws.recv()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Skipping non-JSON relay frame: {raw!r}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Skipping relay frame that is not an object: {raw!r}")
            return

        try:
            await self.dispatch(data)
        except Exception:
            logger.exception(f"Handler for {data.get('type')!r} failed")
