"""Exception hierarchy for ewelink-panel.

Every failure the controller can surface maps to one of these. The
SessionController turns them into the snapshot's error string; nothing
here is retried automatically.
"""


class PanelError(Exception):
    """Base exception for all ewelink-panel errors.

    Carries a short user-facing message and an optional hint on how to
    recover.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class ConfigError(PanelError):
    """Configuration is invalid or missing."""

    pass


class ProbeError(PanelError):
    """Authentication status check failed."""

    pass


class StatusCheckFailedError(ProbeError):
    """Backend answered the status check with a non-success status."""

    def __init__(self, status: int | None = None) -> None:
        super().__init__("failed to check authentication status")
        self.status = status


class BackendUnreachableError(ProbeError):
    """Backend could not be reached for the status check."""

    def __init__(self, reason: str = "") -> None:
        super().__init__("cannot connect to the backend, is it running?")
        self.reason = reason


class TriggerError(PanelError):
    """Data fetch trigger failed."""

    pass


class TriggerRejectedError(TriggerError):
    """Backend refused the trigger request.

    The message is whatever the backend put in its error detail.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TriggerUnreachableError(TriggerError):
    """Trigger request never reached the backend."""

    def __init__(self, reason: str = "") -> None:
        super().__init__("failed to send data request to backend")
        self.reason = reason


class ChannelError(PanelError):
    """Realtime channel fault."""

    pass


class ChannelTransportError(ChannelError):
    """Transport reported an error on the channel."""

    def __init__(self, reason: str = "") -> None:
        super().__init__("channel error, connection may be lost")
        self.reason = reason


class UnexpectedCloseError(ChannelError):
    """Channel closed while still authenticated."""

    def __init__(self, code: int | None = None, reason: str = "") -> None:
        super().__init__("channel closed by server")
        self.code = code
        self.reason = reason


class ChannelStateError(ChannelError):
    """Channel event has no transition from the current state."""

    pass
