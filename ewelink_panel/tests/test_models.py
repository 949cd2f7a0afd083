"""Tests for inbound messages, the session snapshot and error types."""

import pytest

from ewelink_panel.models.exceptions import (
    ChannelTransportError,
    PanelError,
    UnexpectedCloseError,
)
from ewelink_panel.models.messages import InboundMessage
from ewelink_panel.models.snapshot import ErrorSource, SessionSnapshot


class TestInboundMessage:
    """Tests for frame decoding and error detection."""

    def test_data_frame(self):
        message = InboundMessage.from_frame('{"devices": [1, 2]}')
        assert message.payload == {"devices": [1, 2]}
        assert message.is_error is False
        assert message.error_text == ""

    def test_bytes_frame(self):
        message = InboundMessage.from_frame(b'{"a": 1}')
        assert message.payload == {"a": 1}

    def test_error_prefers_details(self):
        message = InboundMessage({"error": "E_AUTH", "details": "token expired"})
        assert message.is_error is True
        assert message.error_text == "token expired"

    def test_error_falls_back_to_code(self):
        message = InboundMessage({"error": "E_AUTH"})
        assert message.error_text == "E_AUTH"

    def test_empty_details_falls_back_to_code(self):
        message = InboundMessage({"error": "E_AUTH", "details": ""})
        assert message.error_text == "E_AUTH"

    def test_null_error_is_data(self):
        message = InboundMessage({"error": None, "temp": 21})
        assert message.is_error is False
        assert message.error_text == ""

    def test_empty_error_is_data(self):
        assert InboundMessage({"error": ""}).is_error is False

    def test_non_string_error_is_data(self):
        assert InboundMessage({"error": 500}).is_error is False

    def test_non_object_payloads_are_data(self):
        assert InboundMessage.from_frame("[1, 2]").is_error is False
        assert InboundMessage.from_frame("42").is_error is False
        assert InboundMessage.from_frame('"error"').is_error is False

    def test_malformed_frame_raises(self):
        with pytest.raises(ValueError):
            InboundMessage.from_frame("{not json")


class TestSessionSnapshot:
    """Tests for the immutable snapshot helpers."""

    def test_defaults(self):
        snapshot = SessionSnapshot()
        assert snapshot.authenticated is False
        assert snapshot.data is None
        assert snapshot.error is None
        assert snapshot.status_message == ""
        assert snapshot.loading is True

    def test_frozen(self):
        snapshot = SessionSnapshot()
        with pytest.raises(AttributeError):
            snapshot.loading = False

    def test_with_data_clears_error(self):
        snapshot = SessionSnapshot().with_error("bad", ErrorSource.SERVER)
        updated = snapshot.with_data({"x": 1})
        assert updated.data == {"x": 1}
        assert updated.error is None
        assert updated.error_source is None

    def test_with_error_keeps_data(self):
        snapshot = SessionSnapshot(data={"x": 1}).with_error("bad", ErrorSource.CHANNEL)
        assert snapshot.data == {"x": 1}
        assert snapshot.error == "bad"
        assert snapshot.error_source == ErrorSource.CHANNEL

    def test_cleared(self):
        snapshot = SessionSnapshot(data=[1], status_message="x").with_error("bad", ErrorSource.TRIGGER)
        cleared = snapshot.cleared()
        assert cleared.data is None
        assert cleared.error is None
        assert cleared.status_message == "x"

    def test_evolve(self):
        snapshot = SessionSnapshot().evolve(loading=False, authenticated=True)
        assert snapshot == SessionSnapshot(loading=False, authenticated=True)


class TestErrors:
    """Error messages shown to the user."""

    def test_suggestion_in_str(self):
        error = PanelError("broken", suggestion="try again")
        assert str(error) == "broken (try again)"
        assert error.message == "broken"

    def test_str_without_suggestion(self):
        assert str(PanelError("broken")) == "broken"

    def test_channel_errors_keep_details(self):
        error = UnexpectedCloseError(code=1006, reason="abnormal")
        assert error.code == 1006
        assert error.message == "channel closed by server"
        assert ChannelTransportError("reset").reason == "reset"
