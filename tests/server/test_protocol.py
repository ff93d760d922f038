"""
Tests for the wire protocol helpers.
"""

import json

import pytest

from durak_online.protocol import ProtocolError, ServerMessage, make_message, parse_message


def test_make_message():
    message = make_message(ServerMessage.LOBBY_ERROR, {"message": "nope"})

    assert message["type"] == "lobbyError"
    assert message["data"] == {"message": "nope"}
    assert message["timestamp"] > 0
    assert json.loads(json.dumps(message)) == message


@pytest.mark.parametrize(
    "raw",
    [
        '{"type": "attack", "data": {"cardIndex": 2}}',
        b'{"type": "attack", "data": {"cardIndex": 2}}',
        {"type": "attack", "data": {"cardIndex": 2}},
    ],
)
def test_parse_message(raw):
    assert parse_message(raw) == ("attack", {"cardIndex": 2})


def test_parse_message_without_data():
    assert parse_message('{"type": "pickUp"}') == ("pickUp", {})
    assert parse_message('{"type": "pickUp", "data": null}') == ("pickUp", {})


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '"attack"',
        "{}",
        '{"type": ""}',
        '{"type": 5}',
        '{"type": "attack", "data": [1]}',
        b"\xff\xfe",
    ],
)
def test_parse_message_rejects_malformed_frames(raw):
    with pytest.raises(ProtocolError):
        parse_message(raw)
