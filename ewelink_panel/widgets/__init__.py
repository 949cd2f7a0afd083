"""Widgets for ewelink-panel."""

from .payload_view import PayloadView, format_payload
from .status import StatusLine

__all__ = ["PayloadView", "StatusLine", "format_payload"]
