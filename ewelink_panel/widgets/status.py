"""Status line widget showing channel state and the status message."""

from textual.reactive import reactive
from textual.widgets import Static

from ..services.events import ChannelStatus


class StatusLine(Static):
    """One-line connection indicator under the fetch button."""

    DEFAULT_CSS = """
    StatusLine {
        height: 1;
        color: $text-muted;
        content-align: center middle;
        width: 100%;
    }
    """

    channel_status = reactive(ChannelStatus.NONE)
    message = reactive("")

    SYMBOLS = {
        ChannelStatus.NONE: "○",
        ChannelStatus.CONNECTING: "◐",
        ChannelStatus.OPEN: "●",
        ChannelStatus.CLOSED: "◌",
    }

    def render(self) -> str:
        symbol = self.SYMBOLS.get(self.channel_status, "?")
        if self.message:
            return f"{symbol} {self.channel_status.value}  │  {self.message}"
        return f"{symbol} {self.channel_status.value}"
