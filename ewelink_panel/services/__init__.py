"""Services for ewelink-panel."""

from ewelink_panel.services.backend import BackendClient, BackendResponse
from ewelink_panel.services.channel_manager import ChannelManager
from ewelink_panel.services.config import ConfigManager, PanelConfig
from ewelink_panel.services.events import ChannelStatus, EventBus
from ewelink_panel.services.session_controller import SessionController
from ewelink_panel.services.session_probe import SessionProbe
from ewelink_panel.services.transport import ChannelTransport, WebSocketTransport
from ewelink_panel.services.trigger import TriggerRequester

__all__ = [
    "BackendClient",
    "BackendResponse",
    "ChannelManager",
    "ConfigManager",
    "PanelConfig",
    "ChannelStatus",
    "EventBus",
    "SessionController",
    "SessionProbe",
    "ChannelTransport",
    "WebSocketTransport",
    "TriggerRequester",
]
