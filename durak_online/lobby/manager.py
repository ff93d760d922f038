"""
Lobby manager: the exclusive owner of every active lobby.

The manager maps join codes to lobbies and players to the code of the lobby
they are in. A lobby is created on the first player's request and torn down
when its last participant leaves.
"""

import asyncio
import logging
import random
import time
from typing import Any, Dict, List, Optional

from durak_online.durak.constants import MAX_PLAYERS
from durak_online.engine import MoveResult
from durak_online.events import EventBus, EngineEventType
from durak_online.lobby.codes import (
    MIN_LOBBY_CODE_LENGTH,
    generate_lobby_code,
    normalize_lobby_code,
)
from durak_online.lobby.errors import (
    AlreadyInLobby,
    InvalidLobbyCode,
    InvalidName,
    LobbyFull,
    LobbyNotFound,
    NotInLobby,
)
from durak_online.lobby.lobby import Intent, IntentType, Lobby, LobbyClosed, Sink

logger = logging.getLogger("durak_online.lobby")


class LobbyManager:
    """
    Creates, finds and tears down lobbies.

    Example:
        ```python
        manager = LobbyManager(config={"seed": 1})
        code = await manager.create_lobby("p1", "Alice", send_to_alice)
        await manager.join_lobby(code, "p2", "Bob", send_to_bob)
        await manager.submit("p1", Intent(IntentType.ATTACK, "p1", card_index=0))
        await manager.leave("p2")
        ```
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the manager.

        Args:
            config: Engine configuration passed to every new lobby
            rng: Random source for lobby codes
        """
        self.config = dict(config or {})
        self.event_bus = EventBus.get_instance()
        self._rng = rng or random.Random()
        self._lobbies: Dict[str, Lobby] = {}
        self._player_lobby: Dict[str, str] = {}
        self._lock: Optional[asyncio.Lock] = None

    @property
    def codes(self) -> List[str]:
        return list(self._lobbies)

    def get_lobby(self, code: str) -> Optional[Lobby]:
        return self._lobbies.get(normalize_lobby_code(code))

    def lobby_of(self, player_id: str) -> Optional[Lobby]:
        code = self._player_lobby.get(player_id)
        return self._lobbies.get(code) if code else None

    def _get_lock(self) -> asyncio.Lock:
        # Created on first use so it belongs to the loop that serves requests
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def create_lobby(self, player_id: str, name: Any, sink: Sink) -> str:
        """
        Create a lobby and seat its first player.

        Returns:
            The new lobby's join code

        Raises:
            InvalidName: if the name is blank
            AlreadyInLobby: if the player is already seated somewhere
        """
        name = self._validate_name(name)

        async with self._get_lock():
            if player_id in self._player_lobby:
                raise AlreadyInLobby()

            code = generate_lobby_code(self._lobbies, self._rng)
            lobby = Lobby(code, config=self.config)
            await lobby.start()
            self._lobbies[code] = lobby
            self._player_lobby[player_id] = code

        await lobby.submit(Intent(IntentType.JOIN, player_id, name=name), sink)

        logger.info(f"Lobby {code} created by {name} ({player_id})")
        self.event_bus.emit(
            EngineEventType.LOBBY_CREATED,
            {
                "lobby_code": code,
                "game_id": lobby.engine.game_id,
                "player_id": player_id,
                "timestamp": time.time(),
            },
        )
        return code

    async def join_lobby(
        self, code: Any, player_id: str, name: Any, sink: Sink
    ) -> str:
        """
        Seat a player in an existing lobby.

        The player is reserved in the lobby before the join is queued and the
        reservation is dropped again if the lobby turns the join down.

        Returns:
            The normalized join code

        Raises:
            InvalidName, InvalidLobbyCode, LobbyNotFound, LobbyFull, AlreadyInLobby
        """
        name = self._validate_name(name)
        code = normalize_lobby_code(code)
        if len(code) < MIN_LOBBY_CODE_LENGTH:
            raise InvalidLobbyCode()

        async with self._get_lock():
            if player_id in self._player_lobby:
                raise AlreadyInLobby()

            lobby = self._lobbies.get(code)
            if lobby is None:
                raise LobbyNotFound()
            if len(lobby.participants) >= MAX_PLAYERS:
                raise LobbyFull()
            self._player_lobby[player_id] = code

        try:
            result = await lobby.submit(
                Intent(IntentType.JOIN, player_id, name=name), sink
            )
        except LobbyClosed:
            await self._release(player_id, code)
            raise LobbyNotFound()

        if not result.ok:
            await self._release(player_id, code)
            raise LobbyFull()

        logger.info(f"{name} ({player_id}) joined lobby {code}")
        return code

    async def submit(self, player_id: str, intent: Intent) -> MoveResult:
        """
        Forward a game intent to the player's lobby.

        Raises:
            NotInLobby: if the player is not seated in any lobby
        """
        lobby = self.lobby_of(player_id)
        if lobby is None:
            raise NotInLobby()
        try:
            return await lobby.submit(intent)
        except LobbyClosed:
            raise NotInLobby()

    async def leave(self, player_id: str) -> bool:
        """
        Remove a player from their lobby, closing the lobby if it is now empty.

        Returns:
            True if the player was seated in a lobby
        """
        async with self._get_lock():
            code = self._player_lobby.pop(player_id, None)
            lobby = self._lobbies.get(code) if code else None
        if lobby is None:
            return False

        try:
            await lobby.submit(Intent(IntentType.LEAVE, player_id))
        except LobbyClosed:
            logger.debug(f"Lobby {code} already closed when {player_id} left")
            return True

        async with self._get_lock():
            # A player reserved by a pending join keeps the lobby open
            closing = (
                lobby.is_empty
                and self._lobbies.get(code) is lobby
                and code not in self._player_lobby.values()
            )
            if closing:
                del self._lobbies[code]

        if closing:
            await lobby.stop()
            logger.info(f"Lobby {code} closed")
            self.event_bus.emit(
                EngineEventType.LOBBY_CLOSED,
                {
                    "lobby_code": code,
                    "game_id": lobby.engine.game_id,
                    "timestamp": time.time(),
                },
            )

        return True

    async def shutdown(self) -> None:
        """Stop every lobby and forget all players."""
        async with self._get_lock():
            lobbies = list(self._lobbies.values())
            self._lobbies.clear()
            self._player_lobby.clear()
        for lobby in lobbies:
            await lobby.stop()

    async def _release(self, player_id: str, code: str) -> None:
        async with self._get_lock():
            if self._player_lobby.get(player_id) == code:
                del self._player_lobby[player_id]

    @staticmethod
    def _validate_name(name: Any) -> str:
        name = str(name).strip() if name is not None else ""
        if not name:
            raise InvalidName()
        return name
