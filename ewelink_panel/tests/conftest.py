"""Shared test fixtures for ewelink-panel."""

import pytest

from ewelink_panel.models.snapshot import SessionSnapshot
from ewelink_panel.services.backend import BackendClient
from ewelink_panel.services.channel_manager import ChannelManager
from ewelink_panel.services.config import PanelConfig
from ewelink_panel.services.events import EventBus
from ewelink_panel.services.reactive import Signal
from ewelink_panel.services.session_controller import SessionController
from ewelink_panel.services.session_probe import SessionProbe
from ewelink_panel.services.trigger import TriggerRequester
from ewelink_panel.tests.fakes import BACKEND, FakeOpener, FakeTransport


@pytest.fixture
def bus() -> EventBus:
    """Fresh event bus."""
    return EventBus()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def authenticated() -> Signal:
    return Signal.of(False)


@pytest.fixture
def snapshot() -> Signal:
    return Signal.of(SessionSnapshot(loading=False))


@pytest.fixture
def manager(transport, authenticated, snapshot, bus) -> ChannelManager:
    """ChannelManager over a fake transport."""
    return ChannelManager(transport, authenticated, snapshot, bus=bus)


@pytest.fixture
def config() -> PanelConfig:
    return PanelConfig(backend_url=BACKEND, session_cookie="session=abc123")


@pytest.fixture
def opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def client(config, opener) -> BackendClient:
    return BackendClient(config, opener=opener)


@pytest.fixture
def navigated() -> list:
    """URLs the controller navigated to."""
    return []


@pytest.fixture
def controller(client, transport, bus, navigated) -> SessionController:
    """SessionController with fake HTTP and fake channel transport."""
    return SessionController(
        probe=SessionProbe(client),
        requester=TriggerRequester(client),
        transport=transport,
        login_url=client.login_url,
        logout_url=client.logout_url,
        navigate=navigated.append,
        bus=bus,
    )
