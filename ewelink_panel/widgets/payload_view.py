"""PayloadView widget: latest pushed data as pretty-printed JSON."""

import json
from typing import Any

from textual.widgets import Static

EMPTY_HINT = "press f to fetch your device data"


def format_payload(data: Any) -> str:
    """Render a payload for display, or the empty hint when there is none."""
    if data is None:
        return EMPTY_HINT
    return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=False)


class PayloadView(Static):
    """Shows the latest payload; falls back to a hint when cleared."""

    DEFAULT_CSS = """
    PayloadView {
        height: auto;
        padding: 1 2;
        background: $surface;
        color: $success;
    }

    PayloadView.-empty {
        color: $text-muted;
        content-align: center middle;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(EMPTY_HINT, markup=False, **kwargs)
        self.add_class("-empty")

    def show(self, data: Any) -> None:
        self.set_class(data is None, "-empty")
        self.update(format_payload(data))
