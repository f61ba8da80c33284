"""
Tests for inbound message shape checks.
"""

import pytest
from herbalist_relay.messages import (
    ActionMessage,
    CursorMessage,
    JoinRoomMessage,
    MalformedMessage,
    PingMessage,
    SnapshotMessage,
    StateSyncMessage,
    normalize_code,
)


class TestNormalizeCode:

    def test_trims_and_uppercases(self):
        assert normalize_code("  k7qrx ") == "K7QRX"

    def test_empty_values(self):
        assert normalize_code(None) == ""
        assert normalize_code("") == ""
        assert normalize_code("   ") == ""


class TestRelayMessages:
    """Shape checks shared by the code-carrying relay messages."""

    @pytest.mark.parametrize('message_cls', [
        JoinRoomMessage, CursorMessage, PingMessage, ActionMessage, SnapshotMessage,
    ])
    def test_rejects_non_mapping(self, message_cls):
        for payload in (None, "K7QRX", 42, ["K7QRX"]):
            with pytest.raises(MalformedMessage):
                message_cls.parse(payload)

    @pytest.mark.parametrize('message_cls', [
        JoinRoomMessage, CursorMessage, PingMessage, ActionMessage, SnapshotMessage,
    ])
    def test_rejects_missing_or_non_string_code(self, message_cls):
        with pytest.raises(MalformedMessage):
            message_cls.parse({})
        with pytest.raises(MalformedMessage):
            message_cls.parse({'code': 12345})

    def test_cursor_fields(self):
        message = CursorMessage.parse({'code': "K7QRX", 'x': 10, 'y': 20.5})
        assert message == CursorMessage(code="K7QRX", x=10, y=20.5)

    def test_cursor_code_not_normalized(self):
        assert CursorMessage.parse({'code': " k7qrx "}).code == " k7qrx "

    def test_ping_missing_coordinates_default_to_none(self):
        message = PingMessage.parse({'code': "K7QRX"})
        assert message.x is None
        assert message.y is None

    def test_action_is_opaque(self):
        action = {'type': 'brew', 'herbs': ['sage', 'nettle']}
        assert ActionMessage.parse({'code': "K7QRX", 'action': action}).action == action

    def test_snapshot_state_is_opaque(self):
        assert SnapshotMessage.parse({'code': "K7QRX", 'state': [1, 2]}).state == [1, 2]

    def test_error_names_event(self):
        with pytest.raises(MalformedMessage) as excinfo:
            ActionMessage.parse(None)
        assert excinfo.value.event == 'action'
        assert "action" in str(excinfo.value)


class TestStateSyncMessage:
    """The peer-relayed state blob normalizes its code and checks ``json``."""

    def test_valid(self):
        message = StateSyncMessage.parse({'code': " k7qrx ", 'json': '{"a": 1}'})
        assert message.code == "K7QRX"
        assert message.json == '{"a": 1}'

    def test_empty_json_string_is_allowed(self):
        assert StateSyncMessage.parse({'code': "K7QRX", 'json': ""}).json == ""

    def test_blank_code_rejected(self):
        with pytest.raises(MalformedMessage):
            StateSyncMessage.parse({'code': "   ", 'json': "{}"})
        with pytest.raises(MalformedMessage):
            StateSyncMessage.parse({'json': "{}"})

    def test_non_string_json_rejected(self):
        for blob in ({'a': 1}, 5, None, ["{}"]):
            with pytest.raises(MalformedMessage):
                StateSyncMessage.parse({'code': "K7QRX", 'json': blob})

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedMessage):
            StateSyncMessage.parse("K7QRX")
