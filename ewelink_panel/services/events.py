"""EventBus: typed channel events between transport and controller.

The transport never touches controller state directly. It publishes what
happened on the socket, and the ChannelManager subscribes to the event
types it handles. Tests drive the manager by emitting synthetic events.

Usage:
    bus = EventBus()
    bus.subscribe(ChannelOpenedEvent, manager.handle_event)
    bus.emit(ChannelOpenedEvent(channel_id=1))
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, TypeVar
import logging

from ..models.messages import InboundMessage

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")


@dataclass
class Event:
    """Base class for all events."""

    timestamp: datetime = field(default_factory=datetime.now)


class ChannelStatus(Enum):
    """Lifecycle states of the push channel."""

    NONE = "none"  # No channel exists
    CONNECTING = "connecting"  # Handshake in progress
    OPEN = "open"  # Receiving frames
    CLOSED = "closed"  # Close requested, waiting for the close event


# Transport events (one channel_id per channel instance)


@dataclass
class ChannelEvent(Event):
    """Something happened on a specific channel."""

    channel_id: int = 0


@dataclass
class ChannelOpenedEvent(ChannelEvent):
    """Handshake completed."""

    pass


@dataclass
class ChannelMessageEvent(ChannelEvent):
    """A frame was received and decoded."""

    message: InboundMessage | None = None


@dataclass
class ChannelErrorEvent(ChannelEvent):
    """Transport reported an error. A close may or may not follow."""

    reason: str = ""


@dataclass
class ChannelClosedEvent(ChannelEvent):
    """Channel is gone. Always the last event for a channel."""

    code: int | None = None
    reason: str = ""


# Manager events


@dataclass
class ChannelStatusChangedEvent(Event):
    """Emitted by the ChannelManager on every state change."""

    channel_id: int = 0
    old_status: ChannelStatus = ChannelStatus.NONE
    new_status: ChannelStatus = ChannelStatus.NONE


EventHandler = Callable[[Any], None]


class EventBus:
    """Event bus for transport-to-manager communication. One bus per controller."""

    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[EventHandler]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Subscribe to an event type. Subscribing the same handler twice is a no-op."""
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Unsubscribe from an event type."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(handler)
            except ValueError:
                pass  # Handler not in list

    def emit(self, event: Event) -> None:
        """Deliver an event to every subscriber of its exact type.

        Logs errors but doesn't let one subscriber's failure affect others.
        """
        event_type = type(event)
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event_type.__name__}: {e}")
