"""
Wire protocol shared by the lobby layer and the WebSocket server.

Every frame is a JSON object of the form ``{"type": ..., "data": {...}}``.
Outbound frames also carry a ``timestamp``.
"""

import json
import time
from typing import Any, Dict, Tuple, Union


class ProtocolError(ValueError):
    """Raised for frames that cannot be decoded into a message."""


class ClientMessage:
    """Message types that clients can send to the server."""

    CREATE_LOBBY = "createLobby"
    JOIN_LOBBY = "joinLobby"
    JOIN = "join"
    ATTACK = "attack"
    DEFEND = "defend"
    PICK_UP = "pickUp"
    LEAVE = "leave"
    HEARTBEAT = "heartbeat"


class ServerMessage:
    """Message types that the server can send to clients."""

    CONNECTED = "connected"
    LOBBY_CREATED = "lobbyCreated"
    LOBBY_JOINED = "lobbyJoined"
    LOBBY_ERROR = "lobbyError"
    STATE_VIEW = "stateView"
    REJECTED = "rejected"
    FINISHED = "finished"
    PLAYER_LEFT = "playerLeft"
    HEARTBEAT = "heartbeat"
    ERROR = "error"


def make_message(message_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Build an outbound message."""
    return {"type": message_type, "data": data, "timestamp": time.time()}


def parse_message(raw: Union[str, bytes, Dict[str, Any]]) -> Tuple[str, Dict[str, Any]]:
    """
    Decode an inbound frame into ``(type, data)``.

    Raises:
        ProtocolError: for invalid JSON, a non-object payload, or a missing type
    """
    if isinstance(raw, (str, bytes)):
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(f"Invalid JSON: {e}") from e
    else:
        message = raw

    if not isinstance(message, dict):
        raise ProtocolError("Message must be a JSON object")

    message_type = message.get("type")
    if not isinstance(message_type, str) or not message_type:
        raise ProtocolError("Message has no type")

    data = message.get("data") or {}
    if not isinstance(data, dict):
        raise ProtocolError("Message data must be a JSON object")

    return message_type, data
