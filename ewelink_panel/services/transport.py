"""Push channel transport.

A transport turns socket activity into channel events on an EventBus:

    opened -> (message | error)* -> closed

`closed` is always the final event for a channel, including when the
handshake fails or the connection is cancelled before it opens. The
transport holds no controller state; the ChannelManager decides what
each event means.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..models.messages import InboundMessage
from .events import (
    ChannelClosedEvent,
    ChannelErrorEvent,
    ChannelMessageEvent,
    ChannelOpenedEvent,
    EventBus,
)

logger = logging.getLogger(__name__)


class ChannelConnection(ABC):
    """One channel instance, as seen by its owner."""

    @abstractmethod
    def close(self) -> None:
        """Request close. Safe to call more than once."""

    async def wait_closed(self) -> None:
        """Wait until the connection has fully shut down."""
        return None


class ChannelTransport(ABC):
    """Factory for channel connections."""

    @abstractmethod
    def open(self, channel_id: int, bus: EventBus) -> ChannelConnection:
        """Start connecting; events for `channel_id` are emitted on `bus`."""


class WebSocketConnection(ChannelConnection):
    """Receive-only WebSocket channel running as an asyncio task."""

    def __init__(
        self,
        channel_id: int,
        bus: EventBus,
        url: str,
        headers: dict[str, str] | None = None,
        open_timeout: float | None = None,
    ):
        self.channel_id = channel_id
        self._bus = bus
        self._url = url
        self._headers = headers or {}
        self._open_timeout = open_timeout
        self._ws = None
        self._close_requested = False
        self._closer: asyncio.Task | None = None
        self._close_code: int | None = None
        self._close_reason = ""
        self._task = asyncio.create_task(self._run(), name=f"channel-{channel_id}")
        # Runs even when the task is cancelled before its first step
        self._task.add_done_callback(self._on_task_done)

    def close(self) -> None:
        if self._close_requested:
            return
        self._close_requested = True

        if self._ws is None:
            # Still in the handshake: cancel so it can never open
            self._task.cancel()
        else:
            self._closer = asyncio.create_task(self._ws.close())

    async def wait_closed(self) -> None:
        """Wait until the channel task has finished."""
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        try:
            async with connect(
                self._url,
                additional_headers=self._headers,
                open_timeout=self._open_timeout,
            ) as ws:
                self._ws = ws
                if self._close_requested:
                    return
                logger.info(f"Channel {self.channel_id} open: {self._url}")
                self._bus.emit(ChannelOpenedEvent(channel_id=self.channel_id))
                try:
                    async for frame in ws:
                        self._deliver(frame)
                except ConnectionClosed as e:
                    self._emit_error(f"connection lost: {e}")
                self._close_code = ws.close_code
                self._close_reason = ws.close_reason or ""
        except asyncio.CancelledError:
            if not self._close_requested:
                raise
            logger.debug(f"Channel {self.channel_id} cancelled before open")
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            self._emit_error(f"{type(e).__name__}: {e}")
        finally:
            self._ws = None

    def _on_task_done(self, task: asyncio.Task) -> None:
        """Emit the final `closed` event, however the task ended."""
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Channel {self.channel_id} task failed: {task.exception()!r}")
        logger.info(f"Channel {self.channel_id} closed (code={self._close_code})")
        self._bus.emit(
            ChannelClosedEvent(
                channel_id=self.channel_id,
                code=self._close_code,
                reason=self._close_reason,
            )
        )

    def _deliver(self, frame: str | bytes) -> None:
        try:
            message = InboundMessage.from_frame(frame)
        except ValueError as e:
            logger.warning(f"Channel {self.channel_id} dropped malformed frame: {e}")
            self._emit_error("malformed frame")
            return
        self._bus.emit(ChannelMessageEvent(channel_id=self.channel_id, message=message))

    def _emit_error(self, reason: str) -> None:
        logger.error(f"Channel {self.channel_id} error: {reason}")
        self._bus.emit(ChannelErrorEvent(channel_id=self.channel_id, reason=reason))


class WebSocketTransport(ChannelTransport):
    """Opens WebSocket channels to one URL with fixed credentials."""

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        open_timeout: float | None = None,
    ):
        self.url = url
        self._headers = headers or {}
        self._open_timeout = open_timeout

    def open(self, channel_id: int, bus: EventBus) -> WebSocketConnection:
        return WebSocketConnection(
            channel_id,
            bus,
            self.url,
            headers=self._headers,
            open_timeout=self._open_timeout,
        )
