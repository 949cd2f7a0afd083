"""ChannelManager: keeps the push channel in lockstep with authentication.

Invariant: a channel exists iff the session is authenticated and no close
is pending. At most one channel exists at a time.

State machine (per channel; NONE means no channel):

    NONE --auth true--> CONNECTING --opened--> OPEN
    CONNECTING | OPEN --close requested--> CLOSED
    any --closed event--> NONE

Events come from the transport over the EventBus, tagged with the id of
the channel that produced them. Events from a retired channel are
dropped; events that have no transition from the current state raise
ChannelStateError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..models.exceptions import (
    ChannelError,
    ChannelStateError,
    ChannelTransportError,
    UnexpectedCloseError,
)
from ..models.snapshot import (
    ErrorSource,
    SessionSnapshot,
    STATUS_CONNECTED,
    STATUS_DATA_RECEIVED,
    STATUS_DISCONNECTED,
)
from .events import (
    ChannelClosedEvent,
    ChannelErrorEvent,
    ChannelEvent,
    ChannelMessageEvent,
    ChannelOpenedEvent,
    ChannelStatus,
    ChannelStatusChangedEvent,
    EventBus,
)
from .reactive import Signal
from .transport import ChannelConnection, ChannelTransport

logger = logging.getLogger(__name__)


class ChannelInput(Enum):
    """Everything that can move a channel between states."""

    OPENED = "opened"
    MESSAGE = "message"
    ERROR = "error"
    CLOSE_REQUESTED = "close_requested"
    CLOSED = "closed"


_TRANSITIONS: dict[tuple[ChannelStatus, ChannelInput], ChannelStatus] = {
    (ChannelStatus.CONNECTING, ChannelInput.OPENED): ChannelStatus.OPEN,
    (ChannelStatus.CONNECTING, ChannelInput.ERROR): ChannelStatus.CONNECTING,
    (ChannelStatus.CONNECTING, ChannelInput.CLOSE_REQUESTED): ChannelStatus.CLOSED,
    (ChannelStatus.CONNECTING, ChannelInput.CLOSED): ChannelStatus.NONE,
    (ChannelStatus.OPEN, ChannelInput.MESSAGE): ChannelStatus.OPEN,
    (ChannelStatus.OPEN, ChannelInput.ERROR): ChannelStatus.OPEN,
    (ChannelStatus.OPEN, ChannelInput.CLOSE_REQUESTED): ChannelStatus.CLOSED,
    (ChannelStatus.OPEN, ChannelInput.CLOSED): ChannelStatus.NONE,
    # Close already requested: late traffic is absorbed, only `closed` moves on
    (ChannelStatus.CLOSED, ChannelInput.OPENED): ChannelStatus.CLOSED,
    (ChannelStatus.CLOSED, ChannelInput.MESSAGE): ChannelStatus.CLOSED,
    (ChannelStatus.CLOSED, ChannelInput.ERROR): ChannelStatus.CLOSED,
    (ChannelStatus.CLOSED, ChannelInput.CLOSE_REQUESTED): ChannelStatus.CLOSED,
    (ChannelStatus.CLOSED, ChannelInput.CLOSED): ChannelStatus.NONE,
}


def transition(status: ChannelStatus, channel_input: ChannelInput) -> ChannelStatus:
    """Next channel status, or ChannelStateError if the input is illegal here."""
    try:
        return _TRANSITIONS[(status, channel_input)]
    except KeyError:
        raise ChannelStateError(
            f"illegal channel input {channel_input.value!r} in state {status.value!r}"
        ) from None


_EVENT_INPUTS: dict[type[ChannelEvent], ChannelInput] = {
    ChannelOpenedEvent: ChannelInput.OPENED,
    ChannelMessageEvent: ChannelInput.MESSAGE,
    ChannelErrorEvent: ChannelInput.ERROR,
    ChannelClosedEvent: ChannelInput.CLOSED,
}


@dataclass
class ChannelHandle:
    """The one live channel. Never leaves the ChannelManager."""

    channel_id: int
    status: ChannelStatus
    connection: ChannelConnection | None = None


class ChannelManager:
    """Opens and closes the push channel as authentication changes.

    Writes channel outcomes into the shared snapshot signal; other
    components only see `status`, the snapshot, and status events.
    """

    def __init__(
        self,
        transport: ChannelTransport,
        authenticated: Signal[bool],
        snapshot: Signal[SessionSnapshot],
        bus: EventBus | None = None,
    ):
        self._transport = transport
        self._authenticated = authenticated
        self._snapshot = snapshot
        self._bus = bus or EventBus()
        self._handle: ChannelHandle | None = None
        self._next_id = 1
        self._torn_down = False

        self.channels_created = 0
        self.close_requests = 0
        self.last_fault: ChannelError | None = None

        for event_type in _EVENT_INPUTS:
            self._bus.subscribe(event_type, self.handle_event)
        self._unsubscribe_auth = authenticated.subscribe(self._on_authenticated_changed)

        if authenticated.value:
            self._open()

    # --- Queries ---

    @property
    def status(self) -> ChannelStatus:
        """Current channel status (NONE when no channel exists)."""
        return self._handle.status if self._handle else ChannelStatus.NONE

    @property
    def bus(self) -> EventBus:
        return self._bus

    # --- Authentication edges ---

    def _on_authenticated_changed(self, old: bool, new: bool) -> None:
        if new and not old:
            if self._handle is None:
                self._open()
            else:
                logger.debug(f"Channel {self._handle.channel_id} already exists, not opening another")
        elif old and not new:
            self.close()

    def _open(self) -> None:
        if self._torn_down:
            return
        channel_id = self._next_id
        self._next_id += 1
        logger.info(f"Opening channel {channel_id}")
        self._handle = ChannelHandle(
            channel_id=channel_id,
            status=ChannelStatus.CONNECTING,
        )
        self.channels_created += 1
        self._emit_status(channel_id, ChannelStatus.NONE, ChannelStatus.CONNECTING)
        # The transport may deliver events synchronously, so the handle
        # must exist before open() is called.
        connection = self._transport.open(channel_id, self._bus)
        if self._handle is not None and self._handle.channel_id == channel_id:
            self._handle.connection = connection
            if self._handle.status == ChannelStatus.CLOSED:
                connection.close()

    def close(self) -> None:
        """Request close of the current channel. No-op without one or when already closing."""
        handle = self._handle
        if handle is None or handle.status == ChannelStatus.CLOSED:
            return
        self._apply(handle, ChannelInput.CLOSE_REQUESTED)
        self.close_requests += 1
        logger.info(f"Closing channel {handle.channel_id}")
        if handle.connection is not None:
            handle.connection.close()

    def teardown(self) -> None:
        """Leave: close an open channel gracefully, then stop following authentication.

        A channel that is still connecting or already closing is left alone.
        If a connecting channel opens afterwards, it is closed on arrival.
        """
        if self._torn_down:
            return
        self._torn_down = True
        self._unsubscribe_auth()
        if self.status == ChannelStatus.OPEN:
            self.close()

    async def wait_closed(self) -> None:
        """Wait for a requested close to finish. Returns at once otherwise."""
        handle = self._handle
        if (
            handle is not None
            and handle.status == ChannelStatus.CLOSED
            and handle.connection is not None
        ):
            await handle.connection.wait_closed()

    # --- Transport events ---

    def handle_event(self, event: ChannelEvent) -> None:
        """Apply one transport event.

        Raises:
            ChannelStateError: The event has no transition from the current state,
                or names a channel that was never opened
        """
        channel_input = _EVENT_INPUTS[type(event)]
        handle = self._handle

        if handle is None or event.channel_id != handle.channel_id:
            if 0 < event.channel_id < self._next_id:
                logger.debug(
                    f"Dropping {channel_input.value} for retired channel {event.channel_id}"
                )
                return
            raise ChannelStateError(
                f"{channel_input.value} for unknown channel {event.channel_id}"
            )

        previous = handle.status
        self._apply(handle, channel_input)

        if channel_input == ChannelInput.OPENED:
            if self._torn_down and previous == ChannelStatus.CONNECTING:
                logger.info(f"Channel {handle.channel_id} opened after teardown, closing")
                self.close()
            elif previous == ChannelStatus.CONNECTING:
                self._set_snapshot(lambda s: s.evolve(status_message=STATUS_CONNECTED))
            else:
                logger.debug(f"Channel {handle.channel_id} opened after close was requested")

        elif channel_input == ChannelInput.MESSAGE:
            if previous == ChannelStatus.OPEN:
                self._on_message(event)  # type: ignore[arg-type]

        elif channel_input == ChannelInput.ERROR:
            if previous != ChannelStatus.CLOSED:
                self.last_fault = ChannelTransportError(event.reason)  # type: ignore[attr-defined]
                self._set_snapshot(
                    lambda s: s.with_error(self.last_fault.message, ErrorSource.CHANNEL)
                )

        elif channel_input == ChannelInput.CLOSED:
            self._on_closed(handle, previous, event)  # type: ignore[arg-type]

    def _on_message(self, event: ChannelMessageEvent) -> None:
        message = event.message
        if message is None:
            return
        if message.is_error:
            text = message.error_text
            logger.info(f"Server reported error: {text}")
            self._set_snapshot(
                lambda s: s.evolve(
                    data=None,
                    error=text,
                    error_source=ErrorSource.SERVER,
                    status_message=STATUS_DATA_RECEIVED,
                )
            )
        else:
            payload = message.payload
            self._set_snapshot(
                lambda s: s.with_data(payload).evolve(status_message=STATUS_DATA_RECEIVED)
            )

    def _on_closed(
        self,
        handle: ChannelHandle,
        previous: ChannelStatus,
        event: ChannelClosedEvent,
    ) -> None:
        self._handle = None
        if previous != ChannelStatus.CLOSED:
            self.last_fault = UnexpectedCloseError(event.code, event.reason)
            logger.warning(f"Channel {handle.channel_id}: {self.last_fault}")
        self._set_snapshot(lambda s: s.evolve(status_message=STATUS_DISCONNECTED))

        # Authentication came back while the previous channel was closing
        if previous == ChannelStatus.CLOSED and self._authenticated.value:
            self._open()

    # --- Helpers ---

    def _apply(self, handle: ChannelHandle, channel_input: ChannelInput) -> None:
        new_status = transition(handle.status, channel_input)
        if new_status != handle.status:
            old_status = handle.status
            handle.status = new_status
            self._emit_status(handle.channel_id, old_status, new_status)

    def _emit_status(self, channel_id: int, old: ChannelStatus, new: ChannelStatus) -> None:
        logger.debug(f"Channel {channel_id}: {old.value} -> {new.value}")
        self._bus.emit(
            ChannelStatusChangedEvent(channel_id=channel_id, old_status=old, new_status=new)
        )

    def _set_snapshot(self, fn: Callable[[SessionSnapshot], SessionSnapshot]) -> None:
        self._snapshot.update(fn)
