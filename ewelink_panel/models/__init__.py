"""Data models for ewelink-panel."""

from .snapshot import (
    ErrorSource,
    SessionSnapshot,
    STATUS_CONNECTED,
    STATUS_DATA_RECEIVED,
    STATUS_DISCONNECTED,
    STATUS_REQUESTING,
)
from .messages import InboundMessage
from .exceptions import (
    PanelError,
    ConfigError,
    ProbeError,
    StatusCheckFailedError,
    BackendUnreachableError,
    TriggerError,
    TriggerRejectedError,
    TriggerUnreachableError,
    ChannelError,
    ChannelTransportError,
    UnexpectedCloseError,
    ChannelStateError,
)

__all__ = [
    # Snapshot
    "ErrorSource",
    "SessionSnapshot",
    "STATUS_CONNECTED",
    "STATUS_DATA_RECEIVED",
    "STATUS_DISCONNECTED",
    "STATUS_REQUESTING",
    # Messages
    "InboundMessage",
    # Exceptions
    "PanelError",
    "ConfigError",
    "ProbeError",
    "StatusCheckFailedError",
    "BackendUnreachableError",
    "TriggerError",
    "TriggerRejectedError",
    "TriggerUnreachableError",
    "ChannelError",
    "ChannelTransportError",
    "UnexpectedCloseError",
    "ChannelStateError",
]
