"""
Tests for the session hub: client bookkeeping and message translation.
"""

import json

import pytest

from durak_online.lobby import LobbyManager
from durak_online.protocol import ServerMessage
from durak_online.server.hub import ConnectedClient, SessionHub


class Client:
    """Collects the messages the hub sends to one client."""

    def __init__(self):
        self.messages = []
        self.id = None

    def __call__(self, message):
        self.messages.append(message)

    def types(self):
        return [m["type"] for m in self.messages]

    def last(self, message_type):
        for message in reversed(self.messages):
            if message["type"] == message_type:
                return message["data"]
        return None


async def connect(hub, client_id=None):
    client = Client()
    client.id = await hub.connect_client(client_id, client)
    return client


async def send(hub, client, message_type, **data):
    await hub.handle_client_message(
        client.id, json.dumps({"type": message_type, "data": data})
    )


async def seated_pair(hub):
    alice = await connect(hub, "alice")
    bob = await connect(hub, "bob")
    await send(hub, alice, "createLobby", name="Alice")
    code = alice.last(ServerMessage.LOBBY_CREATED)["code"]
    await send(hub, bob, "joinLobby", name="Bob", code=code)
    return alice, bob, code


def test_connected_client_send():
    sent = []
    client = ConnectedClient("c1", sent.append)

    client.send(ServerMessage.HEARTBEAT, {"timestamp": 1})

    assert sent[0]["type"] == "heartbeat"
    assert sent[0]["data"] == {"timestamp": 1}
    assert client.last_activity >= client.connected_at


@pytest.mark.asyncio
async def test_connect_sends_client_id():
    hub = SessionHub(LobbyManager())

    client = await connect(hub)

    assert client.id in hub.clients
    assert client.messages[0]["type"] == ServerMessage.CONNECTED
    assert client.messages[0]["data"] == {"clientId": client.id}


@pytest.mark.asyncio
async def test_create_and_join_lobby():
    hub = SessionHub(LobbyManager(config={"seed": 2}))

    alice, bob, code = await seated_pair(hub)

    assert bob.last(ServerMessage.LOBBY_JOINED) == {"code": code, "playerId": "bob"}
    view = alice.last(ServerMessage.STATE_VIEW)
    assert view["phase"] == "playing"
    assert view["currentTurnPlayerId"] == "alice"
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_join_frame_opens_or_joins_lobby():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice = await connect(hub, "alice")
    bob = await connect(hub, "bob")

    await send(hub, alice, "join", name="Alice")
    code = alice.last(ServerMessage.LOBBY_CREATED)["code"]
    await send(hub, bob, "join", name="Bob", code=code.lower())

    assert bob.last(ServerMessage.LOBBY_JOINED) == {"code": code, "playerId": "bob"}
    assert ServerMessage.ERROR not in alice.types() + bob.types()
    assert bob.last(ServerMessage.STATE_VIEW)["phase"] == "playing"
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_game_messages_reach_engine():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, bob, _ = await seated_pair(hub)

    await send(hub, alice, "attack", cardIndex=0)
    assert len(bob.last(ServerMessage.STATE_VIEW)["table"]) == 1

    await send(hub, bob, "pickUp")
    view = bob.last(ServerMessage.STATE_VIEW)
    assert view["table"] == []
    assert view["players"][1]["cardCount"] == 7
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_rejected_move():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, bob, _ = await seated_pair(hub)

    await send(hub, bob, "attack", cardIndex=0)

    assert bob.last(ServerMessage.REJECTED) == {"action": "attack", "reason": "NotYourTurn"}
    assert ServerMessage.REJECTED not in alice.types()
    await hub.manager.shutdown()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data,reason",
    [
        ({}, "InvalidCardIndex"),
        ({"cardIndex": "0"}, "InvalidCardIndex"),
        ({"cardIndex": 1.5}, "InvalidCardIndex"),
        ({"cardIndex": True}, "InvalidCardIndex"),
    ],
)
async def test_bad_card_index(data, reason):
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, _, _ = await seated_pair(hub)

    await send(hub, alice, "attack", **data)

    assert alice.last(ServerMessage.REJECTED)["reason"] == reason
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_bad_target_index():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, bob, _ = await seated_pair(hub)
    await send(hub, alice, "attack", cardIndex=0)

    await send(hub, bob, "defend", cardIndex=0)

    assert bob.last(ServerMessage.REJECTED) == {
        "action": "defend",
        "reason": "InvalidTargetIndex",
    }
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_lobby_errors_are_reported():
    hub = SessionHub(LobbyManager())
    client = await connect(hub)

    await send(hub, client, "createLobby", name="  ")
    assert client.last(ServerMessage.LOBBY_ERROR) == {"message": "Enter a name"}

    await send(hub, client, "joinLobby", name="Alice", code="AB")
    assert client.last(ServerMessage.LOBBY_ERROR) == {"message": "Enter a lobby code"}

    await send(hub, client, "joinLobby", name="Alice", code="ABCDEF")
    assert client.last(ServerMessage.LOBBY_ERROR) == {"message": "No lobby with that code"}

    await send(hub, client, "attack", cardIndex=0)
    assert client.last(ServerMessage.LOBBY_ERROR) == {"message": "You are not in a game"}

    await send(hub, client, "leave")
    assert client.types().count(ServerMessage.LOBBY_ERROR) == 5


@pytest.mark.asyncio
async def test_full_lobby():
    hub = SessionHub(LobbyManager())
    _, _, code = await seated_pair(hub)
    carol = await connect(hub, "carol")

    await send(hub, carol, "joinLobby", name="Carol", code=code)

    assert carol.last(ServerMessage.LOBBY_ERROR) == {
        "message": "The lobby already has two players"
    }
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_malformed_frames():
    hub = SessionHub(LobbyManager())
    client = await connect(hub)

    await hub.handle_client_message(client.id, "{not json")
    await hub.handle_client_message(client.id, '{"type": "dance", "data": {}}')
    await hub.handle_client_message(client.id, "[]")

    assert client.types()[1:] == [ServerMessage.ERROR] * 3
    assert client.last(ServerMessage.ERROR) == {"message": "Message must be a JSON object"}


@pytest.mark.asyncio
async def test_heartbeat():
    hub = SessionHub(LobbyManager())
    client = await connect(hub)

    await send(hub, client, "heartbeat")

    assert client.last(ServerMessage.HEARTBEAT)["timestamp"] > 0


@pytest.mark.asyncio
async def test_unknown_client_is_ignored():
    hub = SessionHub(LobbyManager())
    await hub.handle_client_message("ghost", '{"type": "heartbeat"}')
    assert hub.clients == {}


@pytest.mark.asyncio
async def test_leave_message():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, bob, code = await seated_pair(hub)

    await send(hub, bob, "leave")

    assert alice.last(ServerMessage.PLAYER_LEFT)["playerId"] == "bob"
    assert alice.last(ServerMessage.STATE_VIEW)["phase"] == "waiting"
    assert hub.manager.lobby_of("bob") is None
    assert "bob" in hub.clients
    await hub.manager.shutdown()


@pytest.mark.asyncio
async def test_disconnect_leaves_lobby():
    hub = SessionHub(LobbyManager(config={"seed": 2}))
    alice, bob, code = await seated_pair(hub)

    await hub.disconnect_client("bob")

    assert "bob" not in hub.clients
    assert alice.last(ServerMessage.PLAYER_LEFT)["playerId"] == "bob"

    await hub.disconnect_client("alice")
    assert hub.manager.codes == []


@pytest.mark.asyncio
async def test_disconnect_unknown_client():
    hub = SessionHub(LobbyManager())
    await hub.disconnect_client("ghost")
    assert hub.clients == {}
