"""Inbound channel messages.

The backend pushes JSON text frames of two shapes:
- data:  any other JSON document
- error: {"error": "<code>", "details": "<optional text>"}

Only a non-empty string `error` marks an error. Anything else (lists,
scalars, `"error": null` or `""`) counts as data.
"""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class InboundMessage:
    """A decoded frame received over the channel."""

    payload: Any

    @property
    def is_error(self) -> bool:
        """True for server-reported error messages."""
        if not isinstance(self.payload, dict):
            return False
        error = self.payload.get("error")
        return isinstance(error, str) and error != ""

    @property
    def error_text(self) -> str:
        """Human-readable error: details, falling back to the error code."""
        if not self.is_error:
            return ""
        details = self.payload.get("details")
        if details:
            return str(details)
        return str(self.payload["error"])

    @classmethod
    def from_frame(cls, frame: str | bytes) -> "InboundMessage":
        """Decode a text frame.

        Raises:
            ValueError: If the frame is not valid JSON
        """
        if isinstance(frame, bytes):
            frame = frame.decode("utf-8")
        return cls(payload=json.loads(frame))
