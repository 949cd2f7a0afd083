"""SessionController: the single state holder the view layer talks to.

Composes the probe, the trigger and the channel manager, and publishes
one immutable SessionSnapshot. Every transition replaces the snapshot;
observers registered with `subscribe()` receive each new one.

This is the only place where service exceptions become user-facing
error strings.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable

from ..models.exceptions import ProbeError, TriggerError
from ..models.snapshot import ErrorSource, SessionSnapshot, STATUS_REQUESTING
from .backend import BackendClient
from .channel_manager import ChannelManager
from .config import PanelConfig
from .events import ChannelStatus, EventBus
from .reactive import Signal
from .session_probe import SessionProbe
from .transport import ChannelTransport, WebSocketTransport
from .trigger import TriggerRequester

logger = logging.getLogger(__name__)

Navigator = Callable[[str], object]


class SessionController:
    """Owns the session snapshot for one page lifetime."""

    def __init__(
        self,
        probe: SessionProbe,
        requester: TriggerRequester,
        transport: ChannelTransport,
        login_url: str,
        logout_url: str,
        navigate: Navigator | None = None,
        bus: EventBus | None = None,
    ):
        self._probe = probe
        self._requester = requester
        self._login_url = login_url
        self._logout_url = logout_url
        self._navigate = navigate or webbrowser.open

        self._snapshot: Signal[SessionSnapshot] = Signal.of(SessionSnapshot())
        self._authenticated: Signal[bool] = Signal.of(False)
        # Mirror first so the snapshot agrees before the channel reacts
        self._authenticated.subscribe(self._mirror_authenticated)
        self._channel = ChannelManager(
            transport,
            self._authenticated,
            self._snapshot,
            bus=bus,
        )

        self._started = False
        self._trigger_in_flight = False
        self._shut_down = False

    @classmethod
    def from_config(
        cls,
        config: PanelConfig,
        navigate: Navigator | None = None,
        bus: EventBus | None = None,
    ) -> "SessionController":
        """Wire a controller against a real backend."""
        client = BackendClient(config)
        transport = WebSocketTransport(
            config.effective_channel_url,
            headers=client.credential_headers(),
            open_timeout=config.open_timeout,
        )
        return cls(
            probe=SessionProbe(client),
            requester=TriggerRequester(client),
            transport=transport,
            login_url=client.login_url,
            logout_url=client.logout_url,
            navigate=navigate,
            bus=bus,
        )

    # --- State access ---

    @property
    def snapshot(self) -> SessionSnapshot:
        """Latest snapshot."""
        return self._snapshot.value

    @property
    def channel_status(self) -> ChannelStatus:
        return self._channel.status

    @property
    def channel(self) -> ChannelManager:
        return self._channel

    @property
    def bus(self) -> EventBus:
        return self._channel.bus

    @property
    def trigger_in_flight(self) -> bool:
        return self._trigger_in_flight

    def subscribe(self, callback: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Call `callback` with every new snapshot. Returns unsubscribe function."""
        return self._snapshot.subscribe(lambda _old, new: callback(new))

    def is_ready_to_fetch(self) -> bool:
        """True iff the channel is open; fetch affordances are disabled otherwise."""
        return self._channel.status == ChannelStatus.OPEN

    # --- Operations ---

    async def start(self) -> SessionSnapshot:
        """Run the one-time authentication check.

        Always ends with loading cleared; a failed check leaves the
        session unauthenticated with the failure in `error`.
        """
        if self._started:
            logger.warning("start() called twice; the status check runs once per session")
            return self.snapshot
        self._started = True
        self._snapshot.update(lambda s: s.evolve(loading=True))

        try:
            authenticated = await self._probe.check_status()
        except ProbeError as e:
            logger.warning(f"Status check failed: {e}")
            self._snapshot.update(
                lambda s: s.with_error(e.message, ErrorSource.PROBE).evolve(loading=False)
            )
            self._authenticated.set(False)
            return self.snapshot

        if self._shut_down:
            return self.snapshot

        logger.info(f"Status check: authenticated={authenticated}")
        self._authenticated.set(authenticated)
        self._snapshot.update(lambda s: s.evolve(loading=False))
        return self.snapshot

    def set_authenticated(self, value: bool) -> None:
        """Record a new authentication state; the channel follows."""
        self._authenticated.set(value)

    def login(self) -> None:
        """Send the user to the backend's login page."""
        logger.info(f"Navigating to login: {self._login_url}")
        self._navigate(self._login_url)

    def logout(self) -> None:
        """Drop local authentication (closing the channel) and visit the logout page."""
        self._authenticated.set(False)
        logger.info(f"Navigating to logout: {self._logout_url}")
        self._navigate(self._logout_url)

    async def request_data(self) -> bool:
        """Ask the backend to push fresh data.

        Returns True if the request was accepted. The data itself arrives
        later over the channel. Only one request runs at a time; a call
        made while another is pending returns False without sending.
        """
        if self._trigger_in_flight:
            logger.debug("Trigger already in flight, ignoring request")
            return False

        self._trigger_in_flight = True
        self._snapshot.update(lambda s: s.cleared().evolve(status_message=STATUS_REQUESTING))
        try:
            await self._requester.trigger()
        except TriggerError as e:
            logger.warning(f"Trigger failed: {e}")
            self._snapshot.update(
                lambda s: s.with_error(e.message, ErrorSource.TRIGGER).evolve(status_message="")
            )
            return False
        finally:
            self._trigger_in_flight = False
        return True

    async def shutdown(self) -> None:
        """Leave the session: close an open channel and stop reacting."""
        if self._shut_down:
            return
        self._shut_down = True
        self._channel.teardown()
        await self._channel.wait_closed()

    # --- Internal ---

    def _mirror_authenticated(self, _old: bool, new: bool) -> None:
        self._snapshot.update(lambda s: s.evolve(authenticated=new))
