"""ewelink-panel: terminal client for the eWeLink data fetcher backend.

Main Textual application. A thin view over SessionController: it renders
whatever snapshot the controller publishes and forwards key presses.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Button, Footer, Static

from ewelink_panel.models.exceptions import ConfigError
from ewelink_panel.models.snapshot import SessionSnapshot
from ewelink_panel.services.config import ENV_SESSION_COOKIE, ConfigManager, PanelConfig
from ewelink_panel.services.events import ChannelStatusChangedEvent
from ewelink_panel.services.session_controller import SessionController
from ewelink_panel.widgets import PayloadView, StatusLine

logger = logging.getLogger(__name__)

ENV_LOG_FILE = "EWELINK_PANEL_LOG_FILE"


def hint_text(snapshot: SessionSnapshot) -> str:
    """Line under the title telling the user what they can do next."""
    if snapshot.loading:
        return "checking authentication..."
    if snapshot.authenticated:
        return "control panel · o logout"
    # The browser login never reports back to the terminal
    return (
        "login to connect and view your device data in real time · l login\n"
        f"after login set {ENV_SESSION_COOKIE} and press r"
    )


@dataclass
class Services:
    """Application service container for dependency injection."""

    config: ConfigManager
    settings: PanelConfig

    @classmethod
    def create(cls, config_dir: Path | None = None) -> "Services":
        """Load configuration and resolve environment overrides.

        Raises:
            ConfigError: If the resolved configuration is unusable
        """
        config = ConfigManager(config_dir=config_dir)
        return cls(config=config, settings=config.resolve())

    def new_controller(self) -> SessionController:
        """Build a controller for one session lifetime."""
        return SessionController.from_config(self.settings)


def configure_logging(log_file: str | None = None) -> None:
    """Send logs to a file when asked; the terminal belongs to the UI."""
    log_file = log_file or os.environ.get(ENV_LOG_FILE)
    if not log_file:
        logging.getLogger("ewelink_panel").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class PanelApp(App):
    """The main ewelink-panel application."""

    TITLE = "eWeLink Panel"
    CSS = """
    Screen {
        align: center middle;
    }

    #panel {
        width: 80;
        max-width: 100%;
        height: auto;
        max-height: 100%;
        padding: 1 2;
        border: round $surface-lighten-1;
    }

    #title {
        text-style: bold;
        margin-bottom: 1;
    }

    #hint {
        color: $text-muted;
        margin-bottom: 1;
    }

    #fetch {
        width: 100%;
    }

    #error {
        background: $error 20%;
        color: $error;
        padding: 0 1;
        margin: 1 0;
    }
    """

    BINDINGS = [
        Binding("l", "login", "Login"),
        Binding("o", "logout", "Logout"),
        Binding("f", "fetch", "Fetch"),
        Binding("r", "reload", "Reload"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        services: Services | None = None,
        controller_factory: Callable[[], SessionController] | None = None,
        **kwargs,
    ):
        """Initialize the app.

        Args:
            services: Service container (created from config if not provided)
            controller_factory: Builds a SessionController per session lifetime
            **kwargs: Additional Textual app arguments
        """
        super().__init__(**kwargs)
        if controller_factory is None:
            self.services = services or Services.create()
            controller_factory = self.services.new_controller
        else:
            self.services = services
        self._controller_factory = controller_factory
        self.controller: SessionController | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="panel"):
            yield Static("eWeLink data fetcher", id="title")
            yield Static("checking authentication...", id="hint")
            yield Button("fetch device data", id="fetch", variant="success", disabled=True)
            yield StatusLine(id="status")
            yield Static("", id="error", markup=False)
            yield PayloadView(id="payload")
        yield Footer()

    async def on_mount(self) -> None:
        self._begin_session()

    async def on_unmount(self) -> None:
        await self._end_session()

    # --- Session lifetime ---

    def _begin_session(self) -> None:
        self.controller = self._controller_factory()
        self._unsubscribe = self.controller.subscribe(self._render_snapshot)
        self.controller.bus.subscribe(ChannelStatusChangedEvent, self._on_channel_status)
        self._render_snapshot(self.controller.snapshot)
        self.run_worker(self.controller.start(), name="status_check", exclusive=True)

    async def _end_session(self) -> None:
        if self.controller is None:
            return
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.controller.bus.unsubscribe(ChannelStatusChangedEvent, self._on_channel_status)
        await self.controller.shutdown()
        self.controller = None

    # --- Rendering ---

    def _on_channel_status(self, event: ChannelStatusChangedEvent) -> None:
        if self.controller is not None:
            self._render_snapshot(self.controller.snapshot)

    def _render_snapshot(self, snapshot: SessionSnapshot) -> None:
        if self.controller is None:
            return
        hint = self.query_one("#hint", Static)
        fetch = self.query_one("#fetch", Button)
        status = self.query_one("#status", StatusLine)
        error = self.query_one("#error", Static)
        payload = self.query_one("#payload", PayloadView)

        signed_in = snapshot.authenticated and not snapshot.loading
        hint.update(hint_text(snapshot))

        fetch.display = signed_in
        fetch.disabled = not self.controller.is_ready_to_fetch()
        status.display = signed_in
        status.channel_status = self.controller.channel_status
        status.message = snapshot.status_message
        payload.display = signed_in
        payload.show(snapshot.data)

        error.display = bool(snapshot.error)
        error.update(snapshot.error or "")

    # --- Actions ---

    def action_login(self) -> None:
        if self.controller and not self.controller.snapshot.authenticated:
            self.controller.login()

    def action_logout(self) -> None:
        if self.controller and self.controller.snapshot.authenticated:
            self.controller.logout()

    def action_fetch(self) -> None:
        if self.controller is None or not self.controller.is_ready_to_fetch():
            return
        self.run_worker(self.controller.request_data(), name="trigger")

    async def action_reload(self) -> None:
        """Start over with a fresh session, as a page reload would."""
        logger.info("Reloading session")
        await self._end_session()
        self._begin_session()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "fetch":
            self.action_fetch()


def main():
    """Run the ewelink-panel application."""
    configure_logging()
    try:
        services = Services.create()
    except ConfigError as e:
        print(f"Error: {e}")
        print("\nEdit ~/.config/ewelink-panel/config.json or set EWELINK_PANEL_BACKEND_URL.")
        sys.exit(1)

    if not services.settings.session_cookie:
        print("Note: no session cookie configured; the backend will report you as logged out.")
        print(f"  Set {ENV_SESSION_COOKIE} after logging in through the browser.\n")

    PanelApp(services=services).run()


if __name__ == "__main__":
    main()
