"""
Session hub for connected clients.

The hub sits between the transport and the lobby manager: it tracks
connected clients, decodes their messages into lobby operations and turns
lobby errors and malformed frames into messages for the sender. It knows
nothing about sockets; every client is reached through a send callback.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional

from durak_online.lobby import Intent, IntentType, LobbyError, LobbyManager, NotInLobby
from durak_online.protocol import (
    ClientMessage,
    ProtocolError,
    ServerMessage,
    make_message,
    parse_message,
)

logger = logging.getLogger("durak_online.server")

_GAME_INTENTS = {
    ClientMessage.ATTACK: IntentType.ATTACK,
    ClientMessage.DEFEND: IntentType.DEFEND,
    ClientMessage.PICK_UP: IntentType.PICK_UP,
}


class ConnectedClient:
    """
    Represents one connected client.

    The client id doubles as the player id inside lobbies and engines.
    """

    def __init__(self, client_id: str, send_callback: Callable[[Dict[str, Any]], None]):
        """
        Initialize a client.

        Args:
            client_id: Unique identifier for the client
            send_callback: Function to call to send a message to the client
        """
        self.id = client_id
        self._send = send_callback
        self.connected_at = time.time()
        self.last_activity = time.time()

    def send(self, message_type: str, data: Dict[str, Any]) -> None:
        """
        Send a message to the client.

        Args:
            message_type: Type of message to send
            data: Data to include in the message
        """
        self._send(make_message(message_type, data))
        self.last_activity = time.time()


class SessionHub:
    """
    Routes client messages to the lobby manager.

    Example:
        ```python
        hub = SessionHub(LobbyManager())
        client_id = await hub.connect_client(send_callback=queue.put_nowait)
        await hub.handle_client_message(client_id, '{"type": "createLobby", "data": {"name": "Alice"}}')
        await hub.disconnect_client(client_id)
        ```
    """

    def __init__(self, manager: Optional[LobbyManager] = None):
        self.manager = manager or LobbyManager()
        self.clients: Dict[str, ConnectedClient] = {}

    async def connect_client(
        self,
        client_id: Optional[str] = None,
        send_callback: Callable[[Dict[str, Any]], None] = None,
    ) -> str:
        """
        Register a new client and greet it with its id.

        Args:
            client_id: Optional client ID. If not provided, a new ID will be generated.
            send_callback: Function to call to send a message to the client

        Returns:
            The client ID
        """
        if client_id is None:
            client_id = str(uuid.uuid4())

        if send_callback is None:
            send_callback = lambda msg: None

        client = ConnectedClient(client_id, send_callback)
        self.clients[client_id] = client
        client.send(ServerMessage.CONNECTED, {"clientId": client_id})

        logger.info(f"Client {client_id} connected")
        return client_id

    async def disconnect_client(self, client_id: str) -> None:
        """
        Forget a client, leaving its lobby if it is in one.

        Args:
            client_id: ID of the client to disconnect
        """
        client = self.clients.pop(client_id, None)
        if client is None:
            return

        await self.manager.leave(client_id)
        logger.info(f"Client {client_id} disconnected")

    async def handle_client_message(self, client_id: str, raw: Any) -> None:
        """
        Handle one inbound frame from a client.

        Replies, state views and errors are all delivered through the client's
        send callback.

        Args:
            client_id: ID of the client sending the message
            raw: JSON text, bytes or an already decoded dict
        """
        client = self.clients.get(client_id)
        if client is None:
            logger.warning(f"Received message from unknown client {client_id}")
            return

        client.last_activity = time.time()

        try:
            message_type, data = parse_message(raw)
        except ProtocolError as e:
            logger.debug(f"Bad frame from client {client_id}: {e}")
            client.send(ServerMessage.ERROR, {"message": str(e)})
            return

        try:
            await self._dispatch(client, message_type, data)
        except LobbyError as e:
            logger.debug(f"Lobby error for client {client_id}: {e.message}")
            client.send(ServerMessage.LOBBY_ERROR, {"message": e.message})

    async def _dispatch(
        self, client: ConnectedClient, message_type: str, data: Dict[str, Any]
    ) -> None:
        sink = self._sink_for(client)

        if message_type == ClientMessage.CREATE_LOBBY:
            await self.manager.create_lobby(client.id, data.get("name"), sink)

        elif message_type == ClientMessage.JOIN and not data.get("code"):
            # Bare join: open a lobby for the caller
            await self.manager.create_lobby(client.id, data.get("name"), sink)

        elif message_type in (ClientMessage.JOIN_LOBBY, ClientMessage.JOIN):
            await self.manager.join_lobby(
                data.get("code"), client.id, data.get("name"), sink
            )

        elif message_type in _GAME_INTENTS:
            intent = Intent(
                _GAME_INTENTS[message_type],
                client.id,
                card_index=data.get("cardIndex"),
                target_slot_index=data.get("targetSlotIndex"),
            )
            await self.manager.submit(client.id, intent)

        elif message_type == ClientMessage.LEAVE:
            if not await self.manager.leave(client.id):
                raise NotInLobby()

        elif message_type == ClientMessage.HEARTBEAT:
            client.send(ServerMessage.HEARTBEAT, {"timestamp": time.time()})

        else:
            logger.warning(f"Unknown message type from client {client.id}: {message_type}")
            client.send(ServerMessage.ERROR, {"message": "Unknown message type"})

    @staticmethod
    def _sink_for(client: ConnectedClient) -> Callable[[str, Dict[str, Any]], None]:
        def sink(message_type: str, data: Dict[str, Any]) -> None:
            client.send(message_type, data)

        return sink
