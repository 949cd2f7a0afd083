"""Session snapshot: the single immutable state the view renders from."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class ErrorSource(Enum):
    """Where the current error came from (diagnostics only)."""

    PROBE = "probe"
    TRIGGER = "trigger"
    CHANNEL = "channel"
    SERVER = "server"


# Status messages shown under the fetch button
STATUS_CONNECTED = "connected, ready"
STATUS_DATA_RECEIVED = "data received"
STATUS_DISCONNECTED = "disconnected"
STATUS_REQUESTING = "requesting…"


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable point-in-time view of the session.

    Attributes:
        authenticated: Whether the backend considers us logged in
        data: Latest pushed payload (opaque JSON), None when cleared
        error: User-facing error string, None when clear
        status_message: Short connection/progress line
        loading: True until the startup status check completes
        error_source: Category of `error`, for logging and debugging
    """

    authenticated: bool = False
    data: Any = None
    error: str | None = None
    status_message: str = ""
    loading: bool = True
    error_source: ErrorSource | None = None

    def evolve(self, **changes: Any) -> "SessionSnapshot":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def with_data(self, data: Any) -> "SessionSnapshot":
        """Show a payload, clearing any error."""
        return replace(self, data=data, error=None, error_source=None)

    def with_error(self, error: str, source: ErrorSource) -> "SessionSnapshot":
        """Show an error, keeping the current payload."""
        return replace(self, error=error, error_source=source)

    def cleared(self) -> "SessionSnapshot":
        """Drop both payload and error."""
        return replace(self, data=None, error=None, error_source=None)
