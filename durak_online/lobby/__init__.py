"""
Matchmaking layer: lobby codes, per-lobby serialization and the lobby manager.
"""

from durak_online.lobby.codes import generate_lobby_code, normalize_lobby_code
from durak_online.lobby.errors import (
    AlreadyInLobby,
    InvalidLobbyCode,
    InvalidName,
    LobbyError,
    LobbyFull,
    LobbyNotFound,
    NotInLobby,
)
from durak_online.lobby.lobby import Intent, IntentType, Lobby, LobbyClosed, Sink
from durak_online.lobby.manager import LobbyManager

__all__ = [
    "generate_lobby_code",
    "normalize_lobby_code",
    "LobbyError",
    "InvalidName",
    "InvalidLobbyCode",
    "LobbyNotFound",
    "LobbyFull",
    "NotInLobby",
    "AlreadyInLobby",
    "Intent",
    "IntentType",
    "Lobby",
    "LobbyClosed",
    "Sink",
    "LobbyManager",
]
